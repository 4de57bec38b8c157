"""
Utility functions and helper modules.

This module contains the cross-cutting helpers used throughout the
application:
- Error classification
- Logging configuration
- Output formatting
"""

from .error_handling import (
    AppError,
    EngineError,
    ErrorKind,
    NotFoundError,
    ParseError,
    PathResolutionError,
    PermissionDeniedError,
    classify_exception,
    handle_storage_error,
)
from .formatter import OutputFormat, format_result, render_history_table, render_stats
from .logging_config import configure_logging, disable_logging, enable_debug_logging, get_logger

__all__ = [
    # Error handling
    "AppError",
    "EngineError",
    "ErrorKind",
    "NotFoundError",
    "ParseError",
    "PathResolutionError",
    "PermissionDeniedError",
    "classify_exception",
    "handle_storage_error",
    # Formatting
    "OutputFormat",
    "format_result",
    "render_history_table",
    "render_stats",
    # Logging
    "configure_logging",
    "disable_logging",
    "enable_debug_logging",
    "get_logger",
]
