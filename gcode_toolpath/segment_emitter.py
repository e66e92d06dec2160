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

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from gcode_toolpath.arc_resolver import ArcGeometry, LocalPoint
from gcode_toolpath.types import MotionKind, Opcode, Plane, Point
from gcode_toolpath.utils.constants import (
    FALLBACK_FEED_RATE,
    HISTOGRAM_BOUNDS,
    HISTOGRAM_BUCKETS,
    TIME_MARGIN,
)


@dataclass(frozen=True)
class MotionSegment:
    kind: MotionKind
    line_index: int
    opcode: Opcode
    start: Point
    end: Point
    tool: Optional[int]
    feed_rate: float
    distance: float
    distance_sum: float
    time: float
    time_sum: float
    bucket: int
    plane: Optional[Plane] = None
    points: Tuple[Point, ...] = ()
    clockwise: Optional[bool] = None

    @property
    def position(self) -> Point:
        return self.end

    @property
    def is_motion(self) -> bool:
        return True


@dataclass(frozen=True)
class Marker:
    line_index: int
    position: Point
    opcode: Optional[str]
    fake: bool
    tool: Optional[int]
    is_comment: bool = False

    @property
    def is_motion(self) -> bool:
        return False


@dataclass(frozen=True)
class ArcDetail:
    """Arc record for the renderer, in plane-local coordinates."""

    line_index: int
    plane: Plane
    center: Tuple[float, float]
    radius: float
    start_angle: float
    end_angle: float
    clockwise: bool
    positions: Tuple[LocalPoint, ...]
    tool: Optional[int]


@dataclass(frozen=True)
class ToolMarker:
    line_index: int
    position: Point
    code: str
    tool: Optional[int]


Entry = Union[MotionSegment, Marker]


def histogram_bucket(length: float) -> int:
    """Index of the length bucket: bucket i holds [bounds[i-1], bounds[i])."""
    for idx, bound in enumerate(HISTOGRAM_BOUNDS):
        if length < bound:
            return idx
    return HISTOGRAM_BUCKETS - 1


def bucket_range(idx: int) -> Tuple[float, float]:
    low = 0.0 if idx == 0 else HISTOGRAM_BOUNDS[idx - 1]
    return low, HISTOGRAM_BOUNDS[idx]


class SegmentEmitter:
    """Turns state transitions into entries and keeps the running totals.

    Time estimates are coarse: distance over feed times an empirical margin,
    in minutes. They are meant for display, not for planning.
    """

    def __init__(
        self,
        fallback_feed_rate: float = FALLBACK_FEED_RATE,
        time_margin: float = TIME_MARGIN,
    ):
        self.fallback_feed_rate = fallback_feed_rate
        self.time_margin = time_margin
        self.entries: List[Entry] = []
        self.arcs: Dict[Plane, List[ArcDetail]] = {plane: [] for plane in Plane}
        self.tool_markers: List[ToolMarker] = []
        self.histogram: List[int] = [0] * HISTOGRAM_BUCKETS
        self.total_distance = 0.0
        self.total_time = 0.0
        self._mins: Optional[List[float]] = None
        self._maxs: Optional[List[float]] = None

    @property
    def bounds(self) -> Optional[Tuple[float, float, float, float, float, float]]:
        if self._mins is None or self._maxs is None:
            return None
        return (
            self._mins[0],
            self._maxs[0],
            self._mins[1],
            self._maxs[1],
            self._mins[2],
            self._maxs[2],
        )

    def _update_bounds(self, point: Point) -> None:
        if self._mins is None or self._maxs is None:
            self._mins = list(point)
            self._maxs = list(point)
            return
        for i, value in enumerate(point):
            if value < self._mins[i]:
                self._mins[i] = value
            if value > self._maxs[i]:
                self._maxs[i] = value

    def effective_feed(self, feed: Optional[float]) -> float:
        if feed is not None and feed > 0:
            return feed
        return self.fallback_feed_rate

    def _account(self, distance: float, feed: float) -> Tuple[float, int]:
        minutes = distance / feed * self.time_margin
        bucket = histogram_bucket(distance)
        self.histogram[bucket] += 1
        self.total_distance += distance
        self.total_time += minutes
        return minutes, bucket

    def emit_linear(
        self,
        line_index: int,
        opcode: Opcode,
        kind: MotionKind,
        start: Point,
        end: Point,
        feed: Optional[float],
        tool: Optional[int],
    ) -> MotionSegment:
        distance = math.dist(start, end)
        used_feed = self.effective_feed(feed)
        minutes, bucket = self._account(distance, used_feed)
        self._update_bounds(start)
        self._update_bounds(end)
        segment = MotionSegment(
            kind=kind,
            line_index=line_index,
            opcode=opcode,
            start=start,
            end=end,
            tool=tool,
            feed_rate=used_feed,
            distance=distance,
            distance_sum=self.total_distance,
            time=minutes,
            time_sum=self.total_time,
            bucket=bucket,
        )
        self.entries.append(segment)
        return segment

    def emit_arc(
        self,
        line_index: int,
        opcode: Opcode,
        start: Point,
        end: Point,
        arc: ArcGeometry,
        feed: Optional[float],
        tool: Optional[int],
    ) -> MotionSegment:
        distance = arc.length
        used_feed = self.effective_feed(feed)
        minutes, bucket = self._account(distance, used_feed)
        for point in arc.points:
            self._update_bounds(point)
        self.arcs[arc.plane].append(
            ArcDetail(
                line_index=line_index,
                plane=arc.plane,
                center=arc.center,
                radius=arc.radius,
                start_angle=arc.start_angle,
                end_angle=arc.end_angle,
                clockwise=arc.clockwise,
                positions=arc.local_points,
                tool=tool,
            )
        )
        segment = MotionSegment(
            kind=MotionKind.ARC,
            line_index=line_index,
            opcode=opcode,
            start=start,
            end=end,
            tool=tool,
            feed_rate=used_feed,
            distance=distance,
            distance_sum=self.total_distance,
            time=minutes,
            time_sum=self.total_time,
            bucket=bucket,
            plane=arc.plane,
            points=arc.points,
            clockwise=arc.clockwise,
        )
        self.entries.append(segment)
        return segment

    def emit_marker(
        self,
        line_index: int,
        position: Point,
        opcode: Optional[str],
        tool: Optional[int],
        fake: bool = True,
        is_comment: bool = False,
    ) -> Marker:
        marker = Marker(
            line_index=line_index,
            position=position,
            opcode=opcode,
            fake=fake,
            tool=tool,
            is_comment=is_comment,
        )
        self.entries.append(marker)
        return marker

    def record_tool_marker(
        self, line_index: int, position: Point, code: str, tool: Optional[int]
    ) -> None:
        self.tool_markers.append(
            ToolMarker(line_index=line_index, position=position, code=code, tool=tool)
        )
