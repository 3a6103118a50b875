"""Utility functions for the JSON workbench."""

from .error_handler import ErrorHandler, default_error_handler, handle_error
from .logging_config import JSONFormatter, setup_logging, log_error_with_context

__all__ = [
    "ErrorHandler",
    "default_error_handler",
    "handle_error",
    "JSONFormatter",
    "setup_logging",
    "log_error_with_context",
]
