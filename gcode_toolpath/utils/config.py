#!/usr/bin/env python3
# gcode-toolpath (G-code toolpath engine)
# Copyright (C) 2026 Bob Kolbasowski
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Parser configuration.

The engine owns no persisted state; hosts that keep their own settings file
can hand the relevant section to ``ParserConfig.from_mapping`` or point
``ParserConfig.load`` at a JSON file.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

from .constants import (
    ARC_SEGMENTS,
    FALLBACK_FEED_RATE,
    PROGRESS_INTERVAL_LINES,
    TIME_MARGIN,
)
from .exceptions import (
    ConfigLoadError,
    ConfigValidationError,
    ValidationException,
)
from .validation import (
    validate_arc_segments,
    validate_feed_rate,
    validate_progress_interval,
    validate_time_margin,
    validate_unit_mode,
)

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "arc_segments": ARC_SEGMENTS,
    "default_units": "mm",
    "fallback_feed_rate": FALLBACK_FEED_RATE,
    "progress_interval": PROGRESS_INTERVAL_LINES,
    "time_margin": TIME_MARGIN,
}


@dataclass(frozen=True)
class ParserConfig:
    """Tunables for one parse.

    Every value is validated on construction, however the instance is
    built; invalid values raise ``ConfigValidationError``.

    Example:
        config = ParserConfig.from_mapping({"fallback_feed_rate": 500})
        result = parse_program(text, config=config)
    """

    arc_segments: int = ARC_SEGMENTS
    default_units: str = "mm"
    fallback_feed_rate: float = FALLBACK_FEED_RATE
    progress_interval: int = PROGRESS_INTERVAL_LINES
    time_margin: float = TIME_MARGIN

    def __post_init__(self) -> None:
        try:
            checked = {
                "arc_segments": validate_arc_segments(self.arc_segments),
                "default_units": validate_unit_mode(self.default_units),
                "fallback_feed_rate": validate_feed_rate(self.fallback_feed_rate),
                "progress_interval": validate_progress_interval(self.progress_interval),
                "time_margin": validate_time_margin(self.time_margin),
            }
        except ValidationException as e:
            raise ConfigValidationError(str(e)) from e
        for name, value in checked.items():
            object.__setattr__(self, name, value)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ParserConfig":
        """Build a config from a mapping, filling gaps from DEFAULT_SETTINGS.

        Unknown keys are ignored with a warning.

        Raises:
            ConfigValidationError: If any value is invalid
        """
        merged = dict(DEFAULT_SETTINGS)
        for key, value in data.items():
            if key not in DEFAULT_SETTINGS:
                logger.warning(f"Ignoring unknown parser setting: {key}")
                continue
            merged[key] = value
        return cls(**merged)

    @classmethod
    def load(cls, filepath: str) -> "ParserConfig":
        """Load a config from a JSON file.

        Raises:
            ConfigLoadError: If the file cannot be read or is not a JSON object
            ConfigValidationError: If any value is invalid
        """
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in parser config: {e}")
            raise ConfigLoadError(f"Invalid JSON: {e}")
        except OSError as e:
            logger.error(f"Failed to read parser config: {e}")
            raise ConfigLoadError(f"Failed to read file: {e}")

        if not isinstance(data, dict):
            raise ConfigLoadError("Parser config must be a JSON object")

        logger.info(f"Parser config loaded from {filepath}")
        return cls.from_mapping(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
