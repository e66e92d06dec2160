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

from gcode_toolpath.program import ProgramResult
from gcode_toolpath.types import MotionKind


def format_duration(minutes: float) -> str:
    total_minutes = int(round(minutes)) if minutes else 0
    hours = total_minutes // 60
    mins = total_minutes % 60
    return f"{hours:02d}:{mins:02d}"


def compute_stats(result: ProgramResult | None) -> dict:
    if result is None:
        return {"bounds": None, "time_min": None, "rapid_min": None}
    feed_min = 0.0
    rapid_min = 0.0
    counts = {kind.value: 0 for kind in MotionKind}
    for seg in result.motion_segments():
        counts[seg.kind.value] += 1
        if seg.kind is MotionKind.RAPID:
            rapid_min += seg.time
        else:
            feed_min += seg.time
    return {
        "bounds": result.bounds,
        "time_min": feed_min,
        "rapid_min": rapid_min,
        "total_min": result.total_time,
        "distance": result.total_distance,
        "counts": counts,
        "histogram": list(result.histogram),
        "lines": result.line_count,
        "diagnostics": len(result.diagnostics),
        "inch": result.inch,
    }


def format_stats_text(stats: dict) -> str:
    bounds = stats.get("bounds")
    if not bounds:
        return "No toolpath data"
    unit_label = "in" if stats.get("inch") else "mm"
    minx, maxx, miny, maxy, minz, maxz = bounds
    time_min = stats.get("time_min")
    total_min = stats.get("total_min")
    time_txt = "n/a" if time_min is None else format_duration(time_min)
    total_txt = "n/a" if total_min is None else format_duration(total_min)
    return (
        f"Bounds ({unit_label}) X[{minx:.3f}..{maxx:.3f}] "
        f"Y[{miny:.3f}..{maxy:.3f}] "
        f"Z[{minz:.3f}..{maxz:.3f}] | "
        f"Est time (feed only): {time_txt} | "
        f"Est time (with rapids): {total_txt} | "
        "Approx"
    )
