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

"""Structured logging setup for the toolpath engine."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

APP_LOGGER_NAME = "gcode_toolpath"
CONSOLE_HANDLER_NAME = "gcode_toolpath_console"
APP_FILE_HANDLER_NAME = "gcode_toolpath_app_file"
ERROR_FILE_HANDLER_NAME = "gcode_toolpath_error_file"


def _handler_exists(logger: logging.Logger, name: str) -> bool:
    for handler in logger.handlers:
        if handler.get_name() == name:
            return True
    return False


def setup_logging(
    log_dir: str | Path | None = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Initialize engine logging.

    Installs a console handler once; when ``log_dir`` is given also installs
    rotating ``toolpath.log`` and ``errors.log`` files. Calling it again does
    not duplicate handlers.
    """
    root = logging.getLogger(APP_LOGGER_NAME)
    root.setLevel(logging.DEBUG)
    root.propagate = False

    if not _handler_exists(root, CONSOLE_HANDLER_NAME):
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S")
        )
        console.set_name(CONSOLE_HANDLER_NAME)
        root.addHandler(console)

    if log_dir is None:
        return root

    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)

    if not _handler_exists(root, APP_FILE_HANDLER_NAME):
        app_handler = logging.handlers.RotatingFileHandler(
            path / "toolpath.log",
            maxBytes=10_000_000,
            backupCount=5,
            encoding="utf-8",
        )
        app_handler.setLevel(logging.DEBUG)
        app_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        app_handler.set_name(APP_FILE_HANDLER_NAME)
        root.addHandler(app_handler)

    if not _handler_exists(root, ERROR_FILE_HANDLER_NAME):
        error_handler = logging.handlers.RotatingFileHandler(
            path / "errors.log",
            maxBytes=2_000_000,
            backupCount=5,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.WARNING)
        error_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s:%(lineno)d\n%(message)s\n")
        )
        error_handler.set_name(ERROR_FILE_HANDLER_NAME)
        root.addHandler(error_handler)

    return root
