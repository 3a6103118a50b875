"""Logging configuration for the workbench server."""

import json
import logging
import logging.handlers
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'taskName', 'message',
    'exc_info', 'exc_text', 'stack_info',
])


class JSONFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES:
                log_entry[key] = value

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_json_logging: bool = False,
    stream: Optional[TextIO] = None,
) -> Dict[str, Any]:
    """Configure the root logger.

    Console output goes to stderr by default; stdout carries the MCP
    protocol when the server runs over stdio.

    Args:
        log_level: Level name, e.g. "DEBUG"
        log_file: Optional path of a rotating log file (10MB, 5 backups)
        enable_json_logging: Use :class:`JSONFormatter` for every handler
        stream: Console stream override

    Returns:
        Summary of the configuration applied
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(numeric_level)
    if enable_json_logging:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setLevel(numeric_level)
        if enable_json_logging:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
            ))
        root_logger.addHandler(file_handler)

    logging.getLogger("json_workbench").setLevel(numeric_level)
    logging.getLogger("mcp").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)

    return {
        "log_level": logging.getLevelName(numeric_level),
        "log_file": log_file,
        "json_logging": enable_json_logging,
        "handlers_count": len(root_logger.handlers),
    }


def log_error_with_context(logger: logging.Logger, error: Exception,
                           context: Dict[str, Any], operation: str, include_traceback: bool = False) -> None:
    """Log a failed operation with its context as structured extra fields."""
    error_info = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error_message": str(error),
        **context,
    }
    code = getattr(error, "error_code", None)
    if code:
        error_info["error_code"] = code

    logger.error(f"Operation {operation} failed: {error}", extra=error_info,
                 exc_info=error if include_traceback else None)
