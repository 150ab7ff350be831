"""Structured JSON logging for the diff check service."""

import json
import logging
import os
import sys
import traceback
from datetime import UTC, datetime
from typing import IO, Any, ClassVar

ROOT_LOGGER_NAME = "diffcheck"


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects.

    Anything passed through ``extra=`` ends up as a top-level key, so
    ``logger.info("Checking commit", extra={"sha": sha})`` produces
    ``{"message": "Checking commit", "sha": "...", ...}``.
    """

    # Attributes every LogRecord carries; never copied into the output
    RESERVED_ATTRS: ClassVar[frozenset[str]] = frozenset(
        {
            "args",
            "created",
            "exc_info",
            "exc_text",
            "filename",
            "funcName",
            "levelname",
            "levelno",
            "lineno",
            "message",
            "module",
            "msecs",
            "msg",
            "name",
            "pathname",
            "process",
            "processName",
            "relativeCreated",
            "stack_info",
            "taskName",
            "thread",
            "threadName",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted string.
        """
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "thread": record.threadName,
        }

        if record.levelno >= logging.WARNING:
            entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        for key, value in record.__dict__.items():
            if key in self.RESERVED_ATTRS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            entry[key] = value

        return json.dumps(entry, default=str)


def _level_from_env(default: int = logging.INFO) -> int:
    """Resolve ``LOG_LEVEL`` to a numeric level, ignoring unknown names."""
    level = logging.getLevelName(os.environ.get("LOG_LEVEL", "").upper())
    return level if isinstance(level, int) else default


def configure_logging(
    name: str = ROOT_LOGGER_NAME,
    level: int | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Install the JSON handler on the service's root logger.

    Calling this more than once replaces the handler instead of stacking a
    second one.

    Args:
        name: The root logger name.
        level: Explicit log level. Falls back to ``LOG_LEVEL``, then INFO.
        stream: Destination stream, stderr by default.

    Returns:
        Configured logger instance.
    """
    if level is None:
        level = _level_from_env()

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Get a child of the service logger, e.g. ``diffcheck.checks.dispatcher``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")
