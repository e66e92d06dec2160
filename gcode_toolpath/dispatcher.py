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

"""Routes normalized lines to handlers that update modal state and emit entries.

Every line produces exactly one entry. Mode words (plane, units, distance
modes, most M codes) are applied first, in the order they appear; then the
primary command runs. Coordinates with no command reuse the last motion, and
after an arc so do bare I/J/K/R words.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Optional

from gcode_toolpath.arc_resolver import (
    OFFSET_WORDS,
    PLANE_AXES,
    center_from_offsets,
    resolve_arc,
)
from gcode_toolpath.line_normalizer import NormalizedLine, Word
from gcode_toolpath.modal_state import ModalState
from gcode_toolpath.segment_emitter import Entry, SegmentEmitter
from gcode_toolpath.types import DistanceMode, MotionKind, Opcode, Plane, Units
from gcode_toolpath.utils.constants import (
    ARC_SEGMENTS,
    ARC_WORDS,
    AXIS_LETTERS,
    COMMAND_LETTERS,
    MODE_G_CODES,
    MODE_M_CODES,
    SPINDLE_M_CODES,
    TOOL_CHANGE_CODE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseDiagnostic:
    """A recoverable defect on one line; the parse carried on without it."""

    line_index: int
    token: str
    message: str


@dataclass
class LineContext:
    line: NormalizedLine
    opcode: Opcode
    code: Optional[str] = None
    axes: Dict[str, Optional[float]] = field(default_factory=dict)
    params: Dict[str, Optional[float]] = field(default_factory=dict)
    mode_codes: List[str] = field(default_factory=list)

    @property
    def index(self) -> int:
        return self.line.index

    @property
    def label(self) -> Optional[str]:
        if self.code:
            return self.code
        if self.mode_codes:
            return self.mode_codes[0]
        return None

    def param(self, letter: str) -> Optional[float]:
        return self.params.get(letter)


Handler = Callable[[LineContext], Entry]

_MODE_ACTIONS: Dict[str, Callable[[ModalState], None]] = {
    "G17": lambda s: s.apply_plane(Plane.XY),
    "G18": lambda s: s.apply_plane(Plane.XZ),
    "G19": lambda s: s.apply_plane(Plane.YZ),
    "G20": lambda s: s.apply_units(Units.INCH),
    "G21": lambda s: s.apply_units(Units.MM),
    "G90": lambda s: s.apply_distance_mode(DistanceMode.ABSOLUTE),
    "G91": lambda s: s.apply_distance_mode(DistanceMode.INCREMENTAL),
    "G90.1": lambda s: s.apply_arc_offset_mode(DistanceMode.ABSOLUTE),
    "G91.1": lambda s: s.apply_arc_offset_mode(DistanceMode.INCREMENTAL),
}


class CommandDispatcher:
    def __init__(
        self,
        state: ModalState,
        emitter: SegmentEmitter,
        arc_segments: int = ARC_SEGMENTS,
    ):
        self.state = state
        self.emitter = emitter
        self.arc_segments = arc_segments
        self.diagnostics: List[ParseDiagnostic] = []
        self._handlers: Dict[Opcode, Handler] = {
            Opcode.G0: partial(self._handle_linear, MotionKind.RAPID),
            Opcode.G1: partial(self._handle_linear, MotionKind.FEED),
            Opcode.G73: partial(self._handle_linear, MotionKind.FEED),
            Opcode.G2: partial(self._handle_arc, True),
            Opcode.G3: partial(self._handle_arc, False),
            Opcode.G92: self._handle_set_offset,
            Opcode.G92_1: self._handle_clear_offset,
            Opcode.M6: self._handle_tool_change,
            Opcode.M30: self._handle_annotation,
            Opcode.T: self._handle_tool_select,
            Opcode.DEFAULT: self._handle_default,
        }
        missing = set(Opcode) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for {sorted(op.value for op in missing)}")

    def _diagnose(self, index: int, token: str, message: str) -> None:
        self.diagnostics.append(ParseDiagnostic(index, token, message))
        logger.debug(f"Line {index + 1}: {message} ({token!r})")

    def _report_defects(self, line: NormalizedLine) -> None:
        for word in line.malformed_words():
            self._diagnose(
                line.index,
                f"{word.letter}{word.raw}",
                f"Malformed number after {word.letter}; value ignored",
            )
        for token in line.stray:
            self._diagnose(line.index, token, "Token does not start with a letter; ignored")

    def _apply_mode(self, code: str, index: int) -> None:
        action = _MODE_ACTIONS.get(code)
        if action is not None:
            action(self.state)
        if code in SPINDLE_M_CODES:
            self.emitter.record_tool_marker(index, self.state.point, code, self.state.tool)

    def _build_context(self, line: NormalizedLine) -> LineContext:
        # T applies before anything else so M6 on the same line sees it
        for word in line.words:
            if word.letter == "T" and word.value is not None:
                self.state.apply_tool_change(int(word.value))

        mode_codes: List[str] = []
        remaining: List[Word] = []
        for word in line.words:
            code = word.code
            if word.value is not None and (code in MODE_G_CODES or code in MODE_M_CODES):
                self._apply_mode(code, line.index)
                mode_codes.append(code)
            else:
                remaining.append(word)

        primary: Optional[Word] = None
        for word in remaining:
            if word.letter in COMMAND_LETTERS and word.value is not None:
                primary = word
                break
        if primary is None:
            for word in remaining:
                if word.letter == "T" and word.value is not None:
                    primary = word
                    break

        axes: Dict[str, Optional[float]] = {}
        params: Dict[str, Optional[float]] = {}
        for word in remaining:
            if word is primary or word.letter in COMMAND_LETTERS:
                continue
            if word.letter in AXIS_LETTERS:
                axes[word.letter] = word.value
            elif word.value is not None:
                params[word.letter] = word.value

        self.state.apply_feed(params.get("F"))
        self.state.apply_spindle(params.get("S"))

        if primary is not None:
            code = primary.code
            opcode = Opcode.from_code(code)
        elif self._carries_over(axes, params):
            code = None
            opcode = self.state.last_motion
        else:
            code = None
            opcode = Opcode.DEFAULT
        return LineContext(
            line=line,
            opcode=opcode,
            code=code,
            axes=axes,
            params=params,
            mode_codes=mode_codes,
        )

    def _carries_over(
        self, axes: Dict[str, Optional[float]], params: Dict[str, Optional[float]]
    ) -> bool:
        last = self.state.last_motion
        if last is None:
            return False
        if axes:
            return True
        # I/J/K/R alone repeat an arc with the new center or radius
        return last in (Opcode.G2, Opcode.G3) and any(w in params for w in ARC_WORDS)

    def dispatch(self, line: NormalizedLine) -> Entry:
        """Interpret one line and emit its entry."""
        if line.is_comment:
            return self.emitter.emit_marker(
                line.index,
                self.state.point,
                None,
                self.state.tool,
                fake=True,
                is_comment=True,
            )
        self._report_defects(line)
        ctx = self._build_context(line)
        return self._handlers[ctx.opcode](ctx)

    def _handle_linear(self, kind: MotionKind, ctx: LineContext) -> Entry:
        start = self.state.point
        self.state.move_to(self.state.resolve_target(ctx.axes))
        self.state.last_motion = ctx.opcode
        return self.emitter.emit_linear(
            ctx.index,
            ctx.opcode,
            kind,
            start,
            self.state.point,
            self.state.feed_rate,
            self.state.tool,
        )

    def _handle_arc(self, clockwise: bool, ctx: LineContext) -> Entry:
        """G2 and G3; G3 is G2 with the direction flipped."""
        state = self.state
        plane = state.plane
        start = state.point
        state.move_to(state.resolve_target(ctx.axes))
        end = state.point
        state.last_motion = ctx.opcode

        radius = ctx.param("R")
        center = None
        if not radius:
            # R0 is meaningless, fall back to the center words
            radius = None
            u_axis, v_axis, _, _ = PLANE_AXES[plane]
            off_u, off_v = OFFSET_WORDS[plane]
            center = center_from_offsets(
                plane,
                start,
                (ctx.param(off_u), ctx.param(off_v)),
                absolute=state.arc_offset_mode is DistanceMode.ABSOLUTE,
                origin=(state.offsets[u_axis], state.offsets[v_axis]),
            )
        arc = resolve_arc(
            plane,
            start,
            end,
            clockwise,
            radius=radius,
            center=center,
            segments=self.arc_segments,
        )
        return self.emitter.emit_arc(
            ctx.index,
            ctx.opcode,
            start,
            end,
            arc,
            state.feed_rate,
            state.tool,
        )

    def _handle_set_offset(self, ctx: LineContext) -> Entry:
        self.state.apply_offset(ctx.axes)
        return self._annotate(ctx)

    def _handle_clear_offset(self, ctx: LineContext) -> Entry:
        self.state.clear_offsets()
        return self._annotate(ctx)

    def _handle_tool_change(self, ctx: LineContext) -> Entry:
        self.emitter.record_tool_marker(
            ctx.index, self.state.point, ctx.code or TOOL_CHANGE_CODE, self.state.tool
        )
        return self._annotate(ctx)

    def _handle_tool_select(self, ctx: LineContext) -> Entry:
        # the tool itself was applied while building the context
        return self._annotate(ctx)

    def _handle_annotation(self, ctx: LineContext) -> Entry:
        if ctx.code and ctx.code.startswith("M"):
            self.emitter.record_tool_marker(
                ctx.index, self.state.point, ctx.code, self.state.tool
            )
        return self._annotate(ctx)

    def _handle_default(self, ctx: LineContext) -> Entry:
        """Unknown commands, blank lines and bare words: no state change."""
        if ctx.code and ctx.code.startswith("M"):
            self.emitter.record_tool_marker(
                ctx.index, self.state.point, ctx.code, self.state.tool
            )
        return self.emitter.emit_marker(
            ctx.index,
            self.state.point,
            ctx.label,
            self.state.tool,
            fake=not ctx.mode_codes,
        )

    def _annotate(self, ctx: LineContext) -> Entry:
        return self.emitter.emit_marker(
            ctx.index,
            self.state.point,
            ctx.label,
            self.state.tool,
            fake=False,
        )
