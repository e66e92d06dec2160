"""gcode-toolpath - G-code interpretation and toolpath synthesis.

Turns a G-code program into one entry per line (moves, arcs and markers)
with geometry, coarse time estimates and totals for a viewer and job
progress display.
"""

__version__ = "0.1.0"
__author__ = "Bob Kolbasowski"

from .program import ProgramResult, parse_lines, parse_program
from .utils import ParserConfig
from .worker import ParseJob

__all__ = [
    "ParseJob",
    "ParserConfig",
    "ProgramResult",
    "parse_lines",
    "parse_program",
]
