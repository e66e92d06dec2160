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

"""Input validation helpers for engine settings."""

from .exceptions import InvalidParameterError, InvalidRangeError

ARC_SEGMENTS_LIMITS = (1, 720)
PROGRESS_INTERVAL_LIMITS = (1, 1_000_000)


def validate_feed_rate(feed) -> float:
    """Validate a feed rate.

    Args:
        feed: Feed rate in units/min

    Returns:
        The validated feed rate

    Raises:
        InvalidParameterError: If feed rate is invalid
    """
    try:
        feed = float(feed)
    except (TypeError, ValueError):
        raise InvalidParameterError("feed_rate", feed, "must be numeric")

    if feed <= 0:
        raise InvalidParameterError("feed_rate", feed, "must be positive")

    return feed


def validate_time_margin(margin) -> float:
    """Validate the time estimate overhead factor.

    Raises:
        InvalidParameterError: If the factor is not a positive number
    """
    try:
        margin = float(margin)
    except (TypeError, ValueError):
        raise InvalidParameterError("time_margin", margin, "must be numeric")

    if margin <= 0:
        raise InvalidParameterError("time_margin", margin, "must be positive")

    return margin


def _validate_int_range(name: str, value, limits: tuple[int, int]) -> int:
    if isinstance(value, bool):
        raise InvalidParameterError(name, value, "must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, value, "must be an integer")
    if number != value and not isinstance(value, str):
        raise InvalidParameterError(name, value, "must be an integer")

    min_val, max_val = limits
    if not (min_val <= number <= max_val):
        raise InvalidRangeError(number, min_val, max_val)

    return number


def validate_arc_segments(segments) -> int:
    """Validate the arc tessellation resolution.

    Raises:
        InvalidParameterError: If not an integer
        InvalidRangeError: If outside ARC_SEGMENTS_LIMITS
    """
    return _validate_int_range("arc_segments", segments, ARC_SEGMENTS_LIMITS)


def validate_progress_interval(interval) -> int:
    """Validate the number of lines between progress notifications.

    Raises:
        InvalidParameterError: If not an integer
        InvalidRangeError: If outside PROGRESS_INTERVAL_LIMITS
    """
    return _validate_int_range("progress_interval", interval, PROGRESS_INTERVAL_LIMITS)


def validate_unit_mode(unit_mode: str) -> str:
    """Validate unit mode.

    Args:
        unit_mode: Unit mode string ("mm" or "inch")

    Returns:
        The validated unit mode

    Raises:
        InvalidParameterError: If unit mode is invalid
    """
    if unit_mode not in ("mm", "inch"):
        raise InvalidParameterError("unit_mode", unit_mode, "must be 'mm' or 'inch'")

    return unit_mode
