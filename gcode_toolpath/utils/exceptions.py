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

"""Custom exceptions for the toolpath engine.

Per-line defects never raise: they are recorded as diagnostics and the parse
continues. These types cover caller mistakes and configuration problems.
"""

from typing import Any, Optional


class ToolpathException(Exception):
    """Base exception for all toolpath engine errors."""
    pass


# ============================================================================
# G-CODE EXCEPTIONS
# ============================================================================

class GcodeException(ToolpathException):
    """Base exception for G-code related errors."""
    pass


class GcodeParseError(GcodeException):
    """The caller supplied something that cannot be parsed at all."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        line_content: Optional[str] = None,
    ):
        super().__init__(message)
        self.line_number = line_number
        self.line_content = line_content


class ParseCancelledError(GcodeException):
    """A background parse was cancelled before it finished."""
    pass


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================

class ConfigException(ToolpathException):
    """Base exception for configuration errors."""
    pass


class ConfigLoadError(ConfigException):
    """Failed to load a configuration file."""
    pass


class ConfigValidationError(ConfigException):
    """Configuration validation failed."""
    pass


# ============================================================================
# VALIDATION EXCEPTIONS
# ============================================================================

class ValidationException(ToolpathException):
    """Base exception for validation errors."""
    pass


class InvalidParameterError(ValidationException):
    """Invalid parameter value."""

    def __init__(self, parameter_name: str, value: Any, reason: Optional[str] = None):
        self.parameter_name = parameter_name
        self.value = value
        self.reason = reason

        message = f"Invalid value for '{parameter_name}': {value}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidRangeError(ValidationException):
    """Value out of valid range."""

    def __init__(self, value, min_val, max_val):
        self.value = value
        self.min_val = min_val
        self.max_val = max_val

        message = f"Value {value} out of range [{min_val}, {max_val}]"
        super().__init__(message)
