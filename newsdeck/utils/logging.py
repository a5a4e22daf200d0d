"""Structured logging configuration with JSON formatting.

This module provides centralized logging setup with support for both JSON
and text formats, rotating file handlers, and a request-scoped context that
stamps every record with the id of the aggregation request being served.
"""

import logging
import sys
from contextvars import ContextVar, Token
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger  # type: ignore[import-untyped, unused-ignore]

from newsdeck.core.config import settings

# Context fields carried across asyncio tasks spawned for one request
_log_context: ContextVar[dict[str, Any]] = ContextVar("newsdeck_log_context", default={})


class RequestContextFilter(logging.Filter):
    """Copy the active log context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined, misc]
    """Custom JSON formatter with additional context fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to log records.

        Args:
            log_record: The log record dictionary to modify
            record: The original LogRecord object
            message_dict: Additional message fields
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno
        log_record["environment"] = settings.environment

        # Request and adapter keys make per-source outcomes aggregatable
        for key in ("request_id", "adapter"):
            value = getattr(record, key, None)
            if value is not None:
                log_record[key] = value

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def setup_logging() -> None:
    """Configure application-wide logging.

    Sets up logging with both console and file handlers, using JSON or text
    format based on configuration. Creates log directory if it doesn't exist.
    """
    log_file_path = Path(settings.log_file)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, settings.log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    file_handler = RotatingFileHandler(
        settings.log_file,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
    )
    file_handler.setLevel(level)

    if settings.log_format == "json":
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    context_filter = RequestContextFilter()
    for handler in (console_handler, file_handler):
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class ContextLoggerAdapter(logging.LoggerAdapter):  # type: ignore[type-arg]
    """LoggerAdapter that merges per-call ``extra`` with the bound context."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str, extra: dict[str, Any] | None = None) -> ContextLoggerAdapter:
    """Get a logger with optional extra context.

    Args:
        name: Logger name (typically __name__)
        extra: Additional context to include in all log messages

    Returns:
        LoggerAdapter with extra context
    """
    logger = logging.getLogger(name)
    return ContextLoggerAdapter(logger, dict(extra or {}))


def current_log_context() -> dict[str, Any]:
    """Return a copy of the fields bound by the innermost LogContext."""
    return dict(_log_context.get())


class LogContext:
    """Context manager for adding temporary context to log messages.

    The fields live in a context variable, so tasks created inside the block
    (for example the adapter fan-out) inherit them while concurrent requests
    keep their own values.

    Example:
        with LogContext(request_id="abc123"):
            logger.info("Processing request")
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize log context.

        Args:
            **kwargs: Context fields to add to log messages
        """
        self.context = kwargs
        self._token: Token[dict[str, Any]] | None = None

    def __enter__(self) -> "LogContext":
        """Enter context and bind the fields."""
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context and restore the previous fields."""
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None
