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

"""Arc geometry for G2/G3.

All math runs in plane-local coordinates ``(u, v, w)``: ``u``/``v`` span the
working plane and ``w`` is the axis interpolated linearly along the arc.

    plane  u  v  w     back to machine
    XY     X  Y  Z     (u, v, w)
    XZ     X  Z  -Y    (u, -w, v)
    YZ     Y  Z  X     (w, u, v)

The XZ plane carries the negated Y as its third coordinate; the renderer
relies on that convention for arc details, so it is kept per plane.

Helical moves are approximated: ``w`` changes linearly with the sample
index, not with true helix pitch.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from gcode_toolpath.types import Plane, Point
from gcode_toolpath.utils.constants import (
    ARC_SEGMENTS,
    FULL_CIRCLE_EPSILON,
    TWO_PI,
    ZERO_CHORD_EPSILON,
)

LocalPoint = Tuple[float, float, float]

# (u axis, v axis, w axis, w sign)
PLANE_AXES: Dict[Plane, Tuple[str, str, str, float]] = {
    Plane.XY: ("X", "Y", "Z", 1.0),
    Plane.XZ: ("X", "Z", "Y", -1.0),
    Plane.YZ: ("Y", "Z", "X", 1.0),
}

OFFSET_WORDS: Dict[Plane, Tuple[str, str]] = {
    Plane.XY: ("I", "J"),
    Plane.XZ: ("I", "K"),
    Plane.YZ: ("J", "K"),
}


@dataclass(frozen=True)
class ArcGeometry:
    plane: Plane
    center: Tuple[float, float]
    radius: float
    start_angle: float
    end_angle: float
    sweep: float
    clockwise: bool
    full_circle: bool
    local_points: Tuple[LocalPoint, ...]
    points: Tuple[Point, ...]

    @property
    def length(self) -> float:
        total = 0.0
        for a, b in zip(self.points, self.points[1:]):
            total += math.dist(a, b)
        return total


def to_local(plane: Plane, point: Point) -> LocalPoint:
    x, y, z = point
    if plane is Plane.XZ:
        return (x, z, -y)
    if plane is Plane.YZ:
        return (y, z, x)
    return (x, y, z)


def to_machine(plane: Plane, u: float, v: float, w: float) -> Point:
    if plane is Plane.XZ:
        return (u, -w, v)
    if plane is Plane.YZ:
        return (w, u, v)
    return (u, v, w)


def center_from_offsets(
    plane: Plane,
    start: Point,
    offsets: Tuple[Optional[float], Optional[float]],
    absolute: bool,
    origin: Tuple[float, float] = (0.0, 0.0),
) -> Tuple[float, float]:
    """Arc center from the two in-plane I/J/K words.

    Incremental (G91.1) offsets are added to the start point. Absolute
    (G90.1) values are program coordinates, shifted by ``origin`` (the G92
    offset along u and v). A missing word leaves the center on the start
    coordinate.
    """
    u0, v0, _ = to_local(plane, start)
    result = []
    for base, off, shift in zip((u0, v0), offsets, origin):
        if off is None:
            result.append(base)
        elif absolute:
            result.append(off + shift)
        else:
            result.append(base + off)
    return result[0], result[1]


def _signed_area(
    u0: float, v0: float, cu: float, cv: float, u1: float, v1: float
) -> float:
    return (u0 - cu) * (v0 + cv) + (cu - u1) * (cv + v1)


def center_from_radius(
    u0: float, v0: float, u1: float, v1: float, radius: float, clockwise: bool
) -> Tuple[float, float]:
    """Pick the arc center for radius-form arcs.

    The two candidates sit ``sqrt(R^2 - (q/2)^2)`` either side of the chord
    midpoint; a radius too small for the chord clamps that to zero and gives
    the half-circle on the chord. The candidate with the larger signed area
    is the clockwise one. A negative radius asks for the major arc, so it
    takes the opposite candidate.
    """
    q = math.hypot(u1 - u0, v1 - v0)
    if q < ZERO_CHORD_EPSILON:
        return u0 + abs(radius), v0
    um = (u0 + u1) / 2.0
    vm = (v0 + v1) / 2.0
    h = math.sqrt(max(radius * radius - (q / 2.0) ** 2, 0.0))
    nu = (v0 - v1) / q
    nv = (u1 - u0) / q
    c1 = (um + h * nu, vm + h * nv)
    c2 = (um - h * nu, vm - h * nv)
    if _signed_area(u0, v0, c1[0], c1[1], u1, v1) >= _signed_area(
        u0, v0, c2[0], c2[1], u1, v1
    ):
        cw_center, ccw_center = c1, c2
    else:
        cw_center, ccw_center = c2, c1
    if (clockwise and radius >= 0) or (not clockwise and radius < 0):
        return cw_center
    return ccw_center


def angle_of(u: float, v: float, cu: float, cv: float) -> float:
    return math.atan2(v - cv, u - cu) % TWO_PI


def is_full_circle(start_angle: float, end_angle: float) -> bool:
    diff = abs(start_angle - end_angle)
    return diff < FULL_CIRCLE_EPSILON or abs(diff - TWO_PI) < FULL_CIRCLE_EPSILON


def sweep_angle(start_angle: float, end_angle: float, clockwise: bool) -> float:
    """Signed sweep from start to end in the requested direction.

    Counter-clockwise sweeps are in (0, 2pi], clockwise ones in [-2pi, 0).
    """
    delta = end_angle - start_angle
    same = abs(delta) < FULL_CIRCLE_EPSILON
    delta %= TWO_PI
    if delta < FULL_CIRCLE_EPSILON or TWO_PI - delta < FULL_CIRCLE_EPSILON:
        delta = 0.0 if same else TWO_PI
    if clockwise and not same:
        delta = -TWO_PI if delta == TWO_PI else delta - TWO_PI
    return delta


def tessellate(
    start: LocalPoint,
    end: LocalPoint,
    center: Tuple[float, float],
    radius: float,
    start_angle: float,
    sweep: float,
    segments: int = ARC_SEGMENTS,
) -> List[LocalPoint]:
    """Sample the arc at ``segments + 1`` points.

    ``w`` is interpolated linearly. The first and last samples are the exact
    start and end points. A zero radius has no circle to follow, so the
    samples fall on the straight line between the endpoints.
    """
    u0, v0, w0 = start
    u1, v1, w1 = end
    cu, cv = center
    out: List[LocalPoint] = []
    for i in range(segments + 1):
        t = i / segments
        w = w0 + (w1 - w0) * t
        if radius > 0:
            ang = start_angle + sweep * t
            out.append((cu + radius * math.cos(ang), cv + radius * math.sin(ang), w))
        else:
            out.append((u0 + (u1 - u0) * t, v0 + (v1 - v0) * t, w))
    out[0] = start
    out[-1] = end
    return out


def resolve_arc(
    plane: Plane,
    start: Point,
    end: Point,
    clockwise: bool,
    radius: Optional[float] = None,
    center: Optional[Tuple[float, float]] = None,
    segments: int = ARC_SEGMENTS,
) -> ArcGeometry:
    """Resolve an arc from radius form (``radius``) or center form (``center``).

    ``center`` is plane-local, as returned by ``center_from_offsets``. When
    both are given the radius wins, as on GRBL. When neither is given the
    center is the start point, which makes a zero-radius arc.
    """
    ls = to_local(plane, start)
    le = to_local(plane, end)
    u0, v0, _ = ls
    u1, v1, _ = le
    if radius is not None:
        cu, cv = center_from_radius(u0, v0, u1, v1, radius, clockwise)
    elif center is not None:
        cu, cv = center
    else:
        cu, cv = u0, v0

    arc_radius = math.hypot(u0 - cu, v0 - cv)
    start_angle = angle_of(u0, v0, cu, cv)
    end_angle = angle_of(u1, v1, cu, cv)
    full = is_full_circle(start_angle, end_angle) and arc_radius > 0
    if full:
        end_angle = start_angle + TWO_PI
    sweep = sweep_angle(start_angle, end_angle, clockwise)

    local_points = tessellate(ls, le, (cu, cv), arc_radius, start_angle, sweep, segments)
    points = tuple(to_machine(plane, u, v, w) for u, v, w in local_points)
    return ArcGeometry(
        plane=plane,
        center=(cu, cv),
        radius=arc_radius,
        start_angle=start_angle,
        end_angle=start_angle + sweep,
        sweep=sweep,
        clockwise=clockwise,
        full_circle=full,
        local_points=tuple(local_points),
        points=points,
    )
