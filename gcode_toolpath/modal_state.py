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

"""Modal machine state carried from line to line during one parse."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from gcode_toolpath.types import DistanceMode, Opcode, Plane, Point, Units
from gcode_toolpath.utils.constants import AXIS_LETTERS


def _zero_axes() -> Dict[str, float]:
    return {axis: 0.0 for axis in AXIS_LETTERS}


@dataclass
class ModalState:
    """Interpreted machine context.

    Positions are physical (G92 offsets already applied) and stay in the
    program's own units. Only the dispatcher mutates an instance, and each
    parse builds its own.
    """

    position: Dict[str, float] = field(default_factory=_zero_axes)
    offsets: Dict[str, float] = field(default_factory=_zero_axes)
    units: Units = Units.MM
    distance_mode: DistanceMode = DistanceMode.ABSOLUTE
    arc_offset_mode: DistanceMode = DistanceMode.INCREMENTAL
    plane: Plane = Plane.XY
    tool: Optional[int] = None
    feed_rate: Optional[float] = None
    spindle: Optional[float] = None
    last_motion: Optional[Opcode] = None

    @property
    def point(self) -> Point:
        return (self.position["X"], self.position["Y"], self.position["Z"])

    @property
    def is_inch(self) -> bool:
        return self.units is Units.INCH

    def apply_units(self, units: Units) -> None:
        self.units = units

    def apply_distance_mode(self, mode: DistanceMode) -> None:
        self.distance_mode = mode

    def apply_arc_offset_mode(self, mode: DistanceMode) -> None:
        self.arc_offset_mode = mode

    def apply_plane(self, plane: Plane) -> None:
        self.plane = plane

    def apply_tool_change(self, tool: int) -> None:
        self.tool = tool

    def apply_feed(self, feed: Optional[float]) -> None:
        if feed is not None:
            self.feed_rate = feed

    def apply_spindle(self, spindle: Optional[float]) -> None:
        if spindle is not None:
            self.spindle = spindle

    def apply_offset(self, values: Mapping[str, Optional[float]]) -> None:
        """G92: make the current physical position read as ``values``.

        Each named axis gets ``offset = position - value``, computed from the
        physical position so re-issuing G92 never stacks offsets. Axes not
        named are reset to zero offset; a named axis whose number was
        malformed keeps its previous offset.
        """
        for axis in AXIS_LETTERS:
            if axis not in values:
                self.offsets[axis] = 0.0
                continue
            raw = values[axis]
            if raw is None:
                continue
            self.offsets[axis] = self.position[axis] - raw

    def clear_offsets(self) -> None:
        self.offsets = _zero_axes()

    def resolve_axis_value(self, letter: str, raw_value: Optional[float]) -> float:
        """Turn one axis word into a physical coordinate.

        Absolute mode adds the G92 offset once; incremental mode moves
        relative to the current physical position, where the offset is
        already included. A missing or malformed value keeps the axis where
        it is.
        """
        current = self.position[letter]
        if raw_value is None:
            return current
        if self.distance_mode is DistanceMode.INCREMENTAL:
            return current + raw_value
        return raw_value + self.offsets[letter]

    def resolve_target(self, values: Mapping[str, Optional[float]]) -> Dict[str, float]:
        target = dict(self.position)
        for axis, raw in values.items():
            if axis in target:
                target[axis] = self.resolve_axis_value(axis, raw)
        return target

    def move_to(self, target: Mapping[str, float]) -> None:
        self.position.update(target)
