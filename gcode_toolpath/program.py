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

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from gcode_toolpath.dispatcher import CommandDispatcher, ParseDiagnostic
from gcode_toolpath.line_normalizer import normalize_line, split_lines
from gcode_toolpath.modal_state import ModalState
from gcode_toolpath.segment_emitter import (
    ArcDetail,
    Entry,
    MotionSegment,
    SegmentEmitter,
    ToolMarker,
)
from gcode_toolpath.types import (
    KeepRunning,
    LineSource,
    Plane,
    Point,
    ProgressCallback,
    Units,
)
from gcode_toolpath.utils.config import ParserConfig
from gcode_toolpath.utils.constants import HISTOGRAM_BUCKETS, INCH_TO_MM
from gcode_toolpath.utils.exceptions import GcodeParseError

logger = logging.getLogger(__name__)


@dataclass
class ProgramResult:
    """Everything one parse produced.

    ``entries[i]`` belongs to input line ``i``. Coordinates stay in the
    program's own units; ``inch`` tells which ones, as set by the last G20/G21
    in the file.
    """

    entries: List[Entry] = field(default_factory=list)
    arcs: Dict[Plane, List[ArcDetail]] = field(
        default_factory=lambda: {plane: [] for plane in Plane}
    )
    tool_markers: List[ToolMarker] = field(default_factory=list)
    inch: bool = False
    total_distance: float = 0.0
    total_time: float = 0.0
    histogram: List[int] = field(default_factory=lambda: [0] * HISTOGRAM_BUCKETS)
    bounds: Optional[Tuple[float, float, float, float, float, float]] = None
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)

    @property
    def line_count(self) -> int:
        return len(self.entries)

    @property
    def scale_to_mm(self) -> float:
        return INCH_TO_MM if self.inch else 1.0

    def motion_segments(self) -> List[MotionSegment]:
        return [e for e in self.entries if isinstance(e, MotionSegment)]

    def position_at(self, line_index: int) -> Point:
        """Machine position once ``line_index`` has run."""
        return self.entries[line_index].position

    def time_at(self, line_index: int) -> float:
        """Estimated minutes spent up to and including ``line_index``."""
        for entry in reversed(self.entries[: line_index + 1]):
            if isinstance(entry, MotionSegment):
                return entry.time_sum
        return 0.0

    def remaining_time(self, line_index: int) -> float:
        return max(0.0, self.total_time - self.time_at(line_index))

    def progress_fraction(self, line_index: int) -> float:
        """Share of the estimated job time done after ``line_index``."""
        if self.total_time <= 0:
            if not self.entries:
                return 0.0
            return min(1.0, (line_index + 1) / len(self.entries))
        return min(1.0, self.time_at(line_index) / self.total_time)


def _progress_percent(done: int, total: int) -> int:
    if total <= 0:
        return 100
    return int(round(done / total * 100))


def parse_lines(
    lines: LineSource,
    *,
    config: Optional[ParserConfig] = None,
    progress: Optional[ProgressCallback] = None,
    keep_running: Optional[KeepRunning] = None,
) -> Optional[ProgramResult]:
    """Interpret pre-split lines.

    ``progress`` gets a percentage every ``config.progress_interval`` lines;
    ``keep_running`` is checked at the same points and a falsy answer stops
    the parse and returns None.

    Raises:
        GcodeParseError: If an item of ``lines`` is not text
    """
    config = config or ParserConfig()
    state = ModalState(units=Units(config.default_units))
    emitter = SegmentEmitter(
        fallback_feed_rate=config.fallback_feed_rate,
        time_margin=config.time_margin,
    )
    dispatcher = CommandDispatcher(state, emitter, arc_segments=config.arc_segments)
    total = len(lines)
    started = time.monotonic()

    for idx, raw in enumerate(lines):
        if not isinstance(raw, str):
            raise GcodeParseError(
                f"Line {idx + 1} must be text, got {type(raw).__name__}",
                line_number=idx + 1,
                line_content=repr(raw),
            )
        if idx % config.progress_interval == 0:
            if keep_running is not None and not keep_running():
                logger.info(f"Parse cancelled at line {idx + 1} of {total}")
                return None
            if progress is not None:
                progress(_progress_percent(idx, total))
        dispatcher.dispatch(normalize_line(raw, idx))

    if progress is not None:
        progress(100)

    result = ProgramResult(
        entries=emitter.entries,
        arcs=emitter.arcs,
        tool_markers=emitter.tool_markers,
        inch=state.is_inch,
        total_distance=emitter.total_distance,
        total_time=emitter.total_time,
        histogram=emitter.histogram,
        bounds=emitter.bounds,
        diagnostics=dispatcher.diagnostics,
    )
    logger.info(
        f"Parsed {total} lines in {time.monotonic() - started:.2f}s: "
        f"{sum(result.histogram)} moves, {len(result.diagnostics)} diagnostics"
    )
    return result


def parse_program(
    text: str,
    *,
    config: Optional[ParserConfig] = None,
    progress: Optional[ProgressCallback] = None,
    keep_running: Optional[KeepRunning] = None,
) -> Optional[ProgramResult]:
    """Interpret a whole program buffer (CR, LF or CRLF line endings).

    Raises:
        GcodeParseError: If ``text`` is not a string
    """
    if isinstance(text, bytes):
        raise GcodeParseError("Program must be decoded text, got bytes")
    if not isinstance(text, str):
        raise GcodeParseError(f"Program must be text, got {type(text).__name__}")
    return parse_lines(
        split_lines(text),
        config=config,
        progress=progress,
        keep_running=keep_running,
    )
