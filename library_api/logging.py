"""
Structured logging configuration.

This module provides logging with support for:
- Correlation ID tracking
- Contextual fields (endpoint, method, status_code, etc.)
- Human-readable console output and JSON-formatted error log file
"""

import json
import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from library_api.constants import MAX_LOG_SIZE_BYTES
from library_api.settings import app_settings

# Context variables for storing request-specific logging context
log_context: ContextVar[dict[str, Any] | None] = ContextVar(
    "log_context", default=None
)

# LogRecord attributes that are not copied into the JSON payload
_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "correlation_id",
    }
)


def get_correlation_id() -> str:
    """
    Get correlation ID from context, safe wrapper for logging.

    Returns:
        Correlation ID or empty string if not available.
    """
    from library_api.middlewares.correlation_id import (
        get_correlation_id as _get_cid,
    )

    return _get_cid()


def set_log_context(**kwargs: Any) -> None:
    """
    Set contextual fields for structured logging.

    Args:
        **kwargs: Key-value pairs to add to log context.

    Example:
        >>> set_log_context(endpoint="/api/books", method="GET")
        >>> logger.info("Processing request")  # Includes endpoint and method
    """
    current = dict(log_context.get() or {})
    current.update(kwargs)
    log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Get current log context."""
    return log_context.get() or {}


def clear_log_context() -> None:
    """Clear the log context (useful at end of request)."""
    log_context.set(None)


class StructuredJSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs standard fields (timestamp, level, logger, message), the
    correlation ID, fields from log_context, exception info and any
    ``extra`` passed to the logging call.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": app_settings.ENVIRONMENT,
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        log_data.update(get_log_context())

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        json_str = json.dumps(log_data, default=str)
        if len(json_str) > MAX_LOG_SIZE_BYTES:
            log_data["message"] = (
                log_data["message"][: MAX_LOG_SIZE_BYTES - 1000]
                + "... [TRUNCATED]"
            )
            json_str = json.dumps(log_data, default=str)

        return json_str


class HumanReadableFormatter(logging.Formatter):
    """
    Console formatter: one line per record, prefixed with the correlation
    id. Records at WARNING and above also carry their source location.
    """

    DATEFMT = "%Y-%m-%d %H:%M:%S"
    SHORT = "%(asctime)s [%(correlation_id)s] %(levelname)s %(name)s: %(message)s"
    LONG = (
        "%(asctime)s [%(correlation_id)s] %(levelname)s %(name)s "
        "(%(module)s.%(funcName)s:%(lineno)d): %(message)s"
    )

    def __init__(self) -> None:
        super().__init__(datefmt=self.DATEFMT)
        self._short = logging.Formatter(self.SHORT, datefmt=self.DATEFMT)
        self._long = logging.Formatter(self.LONG, datefmt=self.DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        record.correlation_id = get_correlation_id() or "-"
        if record.levelno >= logging.WARNING:
            return self._long.format(record)
        return self._short.format(record)


def setup_logging() -> logging.Logger:
    """
    Configure logging.

    This function sets up:
    - Console handler with human-readable format (for development)
    - File handler for errors (JSON format)

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger("library_api")
    logger.setLevel(getattr(logging, app_settings.LOG_LEVEL.upper()))
    logger.propagate = False

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(HumanReadableFormatter())
    logger.addHandler(console_handler)

    try:
        log_file = Path(app_settings.LOG_FILE_PATH)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(StructuredJSONFormatter())
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not create file handler: {e}")

    # Silence logging under the test runner
    if "pytest" in sys.modules:
        logging.disable(logging.ERROR)

    return logger


# Create default logger instance
logger = setup_logging()
