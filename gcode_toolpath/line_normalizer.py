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
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

LINE_SPLIT_PAT = re.compile(r"\r\n|\r|\n")
LINE_NUMBER_PAT = re.compile(r"^\s*N\d+\s*", re.IGNORECASE)
PAREN_COMMENT_PAT = re.compile(r"\(.*?\)")
TRAILING_COMMENT_PAT = re.compile(r"[;(].*$")
LETTER_PAT = re.compile(r"(?<![A-Z])([A-Z])")
LETTER_GAP_PAT = re.compile(r"([A-Z])\s+(?=[-+.\d])")
NUMBER_PAT = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)")
COMMENT_LEADERS = (";", "(", "<", "%")


@dataclass(frozen=True)
class Word:
    """One letter/number pair. ``value`` is None when the number is malformed."""

    letter: str
    raw: str
    value: Optional[float]

    @property
    def code(self) -> str:
        """Canonical spelling, e.g. ``G01`` -> ``G1``, ``G90.10`` -> ``G90.1``."""
        if self.value is None:
            return f"{self.letter}{self.raw}"
        if self.value == int(self.value):
            return f"{self.letter}{int(self.value)}"
        return f"{self.letter}{self.value:g}"


@dataclass(frozen=True)
class NormalizedLine:
    index: int
    original: str
    text: str
    words: Tuple[Word, ...]
    is_comment: bool
    stray: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.words and not self.stray

    def malformed_words(self) -> List[Word]:
        return [w for w in self.words if w.value is None]


def split_lines(text: str) -> List[str]:
    """Split a program buffer on CR, LF or CRLF.

    An empty buffer has no lines; a trailing separator leaves a final empty
    line, the same count an editor shows.
    """
    if not text:
        return []
    return LINE_SPLIT_PAT.split(text)


def parse_number(raw: str) -> Optional[float]:
    """Parse the number after a letter; None when malformed or too large for a float."""
    if not NUMBER_PAT.fullmatch(raw):
        return None
    value = float(raw)
    if not math.isfinite(value):
        return None
    return value


def _respace(text: str) -> str:
    # each run of letters starts a token and its number sticks to it
    text = LETTER_PAT.sub(r" \1", text.upper())
    text = LETTER_GAP_PAT.sub(r"\1", text)
    return " ".join(text.split())


def normalize_line(text: str, index: int) -> NormalizedLine:
    """Normalize one raw line into words.

    Comment lines keep their original text and produce no words. Lines that
    are empty once comments are stripped produce an empty word tuple; they
    still flow through the dispatcher so the line gets its own entry.
    """
    original = text
    text = text.replace("\ufeff", "")
    text = LINE_NUMBER_PAT.sub("", text)
    spaced = _respace(text)

    if spaced.startswith(COMMENT_LEADERS):
        return NormalizedLine(
            index=index,
            original=original,
            text=original,
            words=(),
            is_comment=True,
        )

    spaced = PAREN_COMMENT_PAT.sub("", spaced)
    spaced = " ".join(TRAILING_COMMENT_PAT.sub("", spaced).split())

    words: List[Word] = []
    stray: List[str] = []
    for token in spaced.split():
        letter = token[0]
        if not ("A" <= letter <= "Z"):
            stray.append(token)
            continue
        raw = token[1:]
        words.append(Word(letter=letter, raw=raw, value=parse_number(raw)))

    return NormalizedLine(
        index=index,
        original=original,
        text=spaced,
        words=tuple(words),
        is_comment=False,
        stray=tuple(stray),
    )
