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

"""Constants and tunables for the toolpath engine.

This module centralizes the magic numbers used while interpreting G-code so
that the parser, the arc resolver and the statistics helpers agree on them.
"""

import math
from typing import Tuple

# ============================================================================
# ARC TESSELLATION
# ============================================================================

ARC_SEGMENTS = 20
"""Number of straight sub-segments used to tessellate every arc."""

FULL_CIRCLE_EPSILON = 1e-9
"""Start/end angles closer than this (radians) are treated as a full circle."""

ZERO_CHORD_EPSILON = 1e-12
"""Chords shorter than this are treated as coincident start/end points."""

TWO_PI = 2 * math.pi

# ============================================================================
# TIME ESTIMATION
# ============================================================================

TIME_MARGIN = 1.32
"""Empirical overhead factor applied to distance / feed (not physically derived)."""

FALLBACK_FEED_RATE = 100.0
"""Feed rate (units/min) used before any F word has been seen."""

INCH_TO_MM = 25.4
"""Millimeters per inch."""

# ============================================================================
# PROGRESS REPORTING
# ============================================================================

PROGRESS_INTERVAL_LINES = 10
"""Lines between progress notifications (and cancellation checks)."""

WORKER_QUEUE_POLL_INTERVAL = 0.1
"""Seconds to wait per poll when draining a background parse queue."""

# ============================================================================
# SEGMENT LENGTH HISTOGRAM
# ============================================================================

HISTOGRAM_BOUNDS: Tuple[float, ...] = (
    0.01,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
    25.0,
    50.0,
    100.0,
    250.0,
    500.0,
    1000.0,
    math.inf,
)
"""Exclusive upper bound of each of the 16 length buckets."""

HISTOGRAM_BUCKETS = len(HISTOGRAM_BOUNDS)

# ============================================================================
# G-CODE TABLES
# ============================================================================

AXIS_LETTERS = ("X", "Y", "Z", "A", "E")
"""Axes tracked by the modal state (A = rotary, E = extruder)."""

COMMAND_LETTERS = ("G", "M")
"""Letters that take precedence as the primary command of a line."""

ARC_WORDS = ("I", "J", "K", "R")
"""Center and radius words; alone on a line they repeat the last arc."""

# Mode-setting words that take no arguments and may be packed on one line.
MODE_G_CODES = frozenset(
    {
        "G17",
        "G18",
        "G19",
        "G20",
        "G21",
        "G40",
        "G41",
        "G42",
        "G45",
        "G46",
        "G47",
        "G48",
        "G49",
        "G54",
        "G55",
        "G56",
        "G57",
        "G58",
        "G59",
        "G61",
        "G64",
        "G69",
        "G90",
        "G90.1",
        "G91",
        "G91.1",
    }
)

SPINDLE_M_CODES = frozenset({"M3", "M4", "M5", "M7", "M8"})
"""Packed M codes recorded as spindle/coolant markers for the renderer."""

TOOL_CHANGE_CODE = "M6"
"""Handled as a primary command so it can carry the active tool."""

MODE_M_CODES = SPINDLE_M_CODES | frozenset(
    {
        "M9",
        "M10",
        "M11",
        "M21",
        "M22",
        "M23",
        "M24",
        "M41",
        "M42",
        "M43",
        "M44",
        "M48",
        "M49",
        "M52",
        "M60",
        "M82",
        "M84",
    }
)
