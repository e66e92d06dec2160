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

"""Run a parse off the caller's thread.

The job posts events on a queue the host drains from its own loop:

    ("progress", percent)
    ("done", ProgramResult)
    ("cancelled", None)
    ("error", message)
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Optional, Tuple

from gcode_toolpath.program import ProgramResult, parse_program
from gcode_toolpath.utils.config import ParserConfig
from gcode_toolpath.utils.constants import WORKER_QUEUE_POLL_INTERVAL
from gcode_toolpath.utils.exceptions import ParseCancelledError

logger = logging.getLogger(__name__)

WorkerEvent = Tuple[str, Any]


class ParseJob:
    """One background parse. Each job owns its state; jobs never share it."""

    def __init__(
        self,
        text: str,
        config: Optional[ParserConfig] = None,
        events: Optional[queue.Queue] = None,
        name: str = "gcode-parse",
    ):
        self._text = text
        self._config = config
        self.events: queue.Queue = events if events is not None else queue.Queue()
        self._cancel = threading.Event()
        self._finished = threading.Event()
        self._result: Optional[ProgramResult] = None
        self._error: Optional[str] = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> "ParseJob":
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Ask the parse to stop at its next progress boundary."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    def _run(self) -> None:
        try:
            result = parse_program(
                self._text,
                config=self._config,
                progress=lambda pct: self.events.put(("progress", pct)),
                keep_running=lambda: not self._cancel.is_set(),
            )
        except Exception as exc:
            logger.exception("Background parse failed")
            self._error = str(exc)
            self.events.put(("error", self._error))
            self._finished.set()
            return
        if result is None:
            self.events.put(("cancelled", None))
        else:
            self._result = result
            self.events.put(("done", result))
        self._finished.set()

    def wait(self, timeout: Optional[float] = None) -> ProgramResult:
        """Block until the job ends and return its result.

        Raises:
            TimeoutError: If the job is still running after ``timeout``
            ParseCancelledError: If the job was cancelled
            RuntimeError: If the parse raised
        """
        if not self._finished.wait(timeout):
            raise TimeoutError("Parse still running")
        if self._error is not None:
            raise RuntimeError(f"Parse failed: {self._error}")
        if self._result is None:
            raise ParseCancelledError("Parse was cancelled")
        return self._result

    def drain(self, timeout: float = WORKER_QUEUE_POLL_INTERVAL) -> list[WorkerEvent]:
        """Collect the events queued so far, waiting up to ``timeout`` for the first."""
        events: list[WorkerEvent] = []
        try:
            events.append(self.events.get(timeout=timeout))
            while True:
                events.append(self.events.get_nowait())
        except queue.Empty:
            pass
        return events
