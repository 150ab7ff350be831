"""Unit tests for structured JSON logging."""

import json
import logging
import sys
from collections.abc import Generator
from io import StringIO

import pytest

from diffcheck_service.utils.logging import (
    ROOT_LOGGER_NAME,
    JsonFormatter,
    configure_logging,
    get_logger,
)


def _record(
    level: int = logging.INFO, msg: str = "Test message", args: tuple = ()
) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=args,
        exc_info=None,
    )


@pytest.fixture(autouse=True)
def restore_root_logger() -> Generator[None]:
    """Undo configure_logging so other tests see the logger as they left it."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestJsonFormatter:
    """Tests for JSON log formatter."""

    def test_format_basic_message(self) -> None:
        """Test formatting a basic log message."""
        parsed = json.loads(JsonFormatter().format(_record()))

        assert parsed["message"] == "Test message"
        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test"
        assert "timestamp" in parsed
        assert "thread" in parsed
        assert "location" not in parsed

    def test_format_with_extra_fields(self) -> None:
        """Test formatting with extra context fields."""
        record = _record()
        record.sha = "0d1a26e67d8f5eaf1f6ba5c57fc3c7d91ac0fd1c"
        record.repository = "owner/repo"

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["sha"] == "0d1a26e67d8f5eaf1f6ba5c57fc3c7d91ac0fd1c"
        assert parsed["repository"] == "owner/repo"

    def test_unserializable_extra_is_stringified(self) -> None:
        """Test that an extra JSON cannot encode is rendered with str()."""
        record = _record()
        record.secret = b"bytes"

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["secret"] == "b'bytes'"

    def test_warning_carries_location(self) -> None:
        """Test that warnings and above say where they were logged."""
        parsed = json.loads(JsonFormatter().format(_record(level=logging.WARNING)))

        assert parsed["location"]["file"] == "test.py"
        assert parsed["location"]["line"] == 10

    def test_format_with_exception(self) -> None:
        """Test formatting with exception info."""
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        record = _record(level=logging.ERROR, msg="Error occurred")
        record.exc_info = exc_info

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["level"] == "ERROR"
        assert "ValueError" in parsed["exception"]

    def test_format_with_message_args(self) -> None:
        """Test formatting with message arguments."""
        record = _record(msg="Checked %d commits in %s", args=(3, "owner/repo"))

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["message"] == "Checked 3 commits in owner/repo"


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_configure_with_default_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test configuring logging with default level."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        logger = configure_logging()

        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.INFO
        assert not logger.propagate

    def test_configure_with_debug_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test configuring logging with DEBUG level."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        logger = configure_logging()

        assert logger.level == logging.DEBUG

    def test_configure_with_invalid_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test configuring logging with invalid level falls back to INFO."""
        monkeypatch.setenv("LOG_LEVEL", "INVALID")
        logger = configure_logging()

        assert logger.level == logging.INFO

    def test_explicit_level_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        assert configure_logging(level=logging.ERROR).level == logging.ERROR

    def test_reconfigure_replaces_handler(self) -> None:
        """Test that a second call does not stack handlers."""
        configure_logging(stream=StringIO())
        logger = configure_logging(stream=StringIO())

        assert len(logger.handlers) == 1


class TestGetLogger:
    """Tests for logger retrieval."""

    def test_get_logger_returns_child(self) -> None:
        """Test that get_logger returns a child logger."""
        logger = get_logger("mymodule")

        assert logger.name == "diffcheck.mymodule"

    def test_child_writes_json_through_root_handler(self) -> None:
        """Test that module loggers inherit the JSON handler."""
        stream = StringIO()
        configure_logging(level=logging.INFO, stream=stream)

        get_logger("checks.dispatcher").info("Checking commit", extra={"sha": "abc"})

        parsed = json.loads(stream.getvalue())
        assert parsed["message"] == "Checking commit"
        assert parsed["logger"] == "diffcheck.checks.dispatcher"
        assert parsed["sha"] == "abc"
