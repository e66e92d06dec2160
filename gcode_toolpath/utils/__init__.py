"""Utility modules for the toolpath engine."""

from .constants import *
from .exceptions import *
from .validation import *
from .config import DEFAULT_SETTINGS, ParserConfig
from .logging_config import setup_logging

__all__ = [
    # Config
    "DEFAULT_SETTINGS",
    "ParserConfig",
    # Logging
    "setup_logging",
]
