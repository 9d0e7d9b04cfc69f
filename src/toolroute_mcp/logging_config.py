"""Logging infrastructure for the tool router server.

Provides structured logging with configurable levels and per-call
correlation ids across all modules.
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from typing import Any

# Call ID tracking for per-call correlation
call_id_ctx: ContextVar[str | None] = ContextVar("call_id", default=None)

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [call=%(call_id)s] %(message)s"


def get_call_id() -> str | None:
    """Get the current call ID if available."""
    return call_id_ctx.get()


class _CallIdFilter(logging.Filter):
    """Guarantee every record has a call_id so the default format never fails."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "call_id"):
            record.call_id = get_call_id() or "-"
        return True


def setup_logging(
    level: int | str | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """Configure logging for the application.

    Args:
        level: Logging level (e.g., 'DEBUG', 'INFO', 'ERROR').
               Defaults to LOGGING_LEVEL env var or 'INFO'.
        format_string: Custom log format string. Defaults to a structured format.

    Returns:
        The root logger configured for the application.
    """
    if level is None:
        level = os.environ.get("LOGGING_LEVEL", "INFO")

    if format_string is None:
        format_string = DEFAULT_FORMAT

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(format_string))
    console_handler.addFilter(_CallIdFilter())
    logger.addHandler(console_handler)

    # Disable noisy third-party loggers
    logging.getLogger("asyncio").setLevel("WARNING")
    logging.getLogger("asyncio").propagate = False
    logging.getLogger("mcp").setLevel("WARNING")

    return logger


class RequestLoggerAdapter(logging.LoggerAdapter[Any]):
    """Logger adapter that automatically adds the call ID to log records."""

    def process(self, msg: str, kwargs: Any) -> tuple[str, Any]:
        """Process the log record and add call context."""
        extra = kwargs.get("extra")
        if extra is None:
            extra = {}
        extra["call_id"] = get_call_id() or "-"
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> RequestLoggerAdapter:
    """Get a logger for the given module name.

    Args:
        name: The module name (e.g., __name__).

    Returns:
        A configured logger with call context support.
    """
    logger = logging.getLogger(name)
    return RequestLoggerAdapter(logger, {})


def create_logger(name: str) -> RequestLoggerAdapter:
    """Create and return a logger for a module (typically ``__name__``)."""
    return get_logger(name)
