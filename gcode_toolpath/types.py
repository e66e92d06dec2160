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

from enum import Enum
from typing import Callable, Iterator, Protocol, Tuple, TypeAlias

Point: TypeAlias = Tuple[float, float, float]
ProgressCallback: TypeAlias = Callable[[int], None]
KeepRunning: TypeAlias = Callable[[], bool]


class Units(str, Enum):
    MM = "mm"
    INCH = "inch"


class DistanceMode(str, Enum):
    ABSOLUTE = "absolute"
    INCREMENTAL = "incremental"


class Plane(str, Enum):
    XY = "XY"
    XZ = "XZ"
    YZ = "YZ"


class MotionKind(str, Enum):
    RAPID = "rapid"
    FEED = "feed"
    ARC = "arc"


class Opcode(str, Enum):
    """Primary commands with a dedicated handler; everything else is DEFAULT."""

    G0 = "G0"
    G1 = "G1"
    G2 = "G2"
    G3 = "G3"
    G73 = "G73"
    G92 = "G92"
    G92_1 = "G92.1"
    M6 = "M6"
    M30 = "M30"
    T = "T"
    DEFAULT = "default"

    @classmethod
    def from_code(cls, code: str) -> "Opcode":
        if code.startswith("T"):
            return cls.T
        try:
            return cls(code)
        except ValueError:
            return cls.DEFAULT


class LineSource(Protocol):
    def __len__(self) -> int: ...
    def __iter__(self) -> Iterator[str]: ...
