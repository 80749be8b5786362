#!/usr/bin/env python3
"""Tests for the structured Logger."""

import io
import logging

import pytest

from treesort.infrastructure.logger import Logger, LogLevel, get_logger, set_global_logger


def _stream_logger(level=LogLevel.DEBUG):
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    return Logger("treesort.test", level=level, handlers=[handler]), stream


class TestLogLevel:
    """Tests for LogLevel enum."""

    def test_log_levels(self):
        """Log level values match Python logging."""
        assert LogLevel.DEBUG == logging.DEBUG
        assert LogLevel.INFO == logging.INFO
        assert LogLevel.WARNING == logging.WARNING
        assert LogLevel.ERROR == logging.ERROR
        assert LogLevel.CRITICAL == logging.CRITICAL


class TestLogger:
    """Tests for Logger."""

    def test_level_from_string(self):
        logger = Logger("treesort.test", level="warning", handlers=[])
        assert logger.get_level() == LogLevel.WARNING

    def test_set_level(self):
        logger = Logger("treesort.test", handlers=[])
        logger.set_level(LogLevel.ERROR)
        assert logger.get_level() == LogLevel.ERROR
        assert not logger.is_enabled_for("warning")
        assert logger.is_enabled_for(LogLevel.CRITICAL)

    def test_invalid_level_name(self):
        with pytest.raises(KeyError):
            Logger("treesort.test", level="verbose", handlers=[])

    def test_context_appended_to_message(self):
        """Keyword context is rendered as key=value pairs."""
        logger, stream = _stream_logger()
        logger.info("Sorted directory", directory=3, children=12)

        assert stream.getvalue().strip() == "INFO Sorted directory | directory=3 children=12"

    def test_message_without_context(self):
        logger, stream = _stream_logger()
        logger.warning("plain")
        assert stream.getvalue().strip() == "WARNING plain"

    def test_messages_below_level_dropped(self):
        logger, stream = _stream_logger(level=LogLevel.INFO)
        logger.debug("hidden")
        logger.info("shown")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "shown" in output

    def test_nested_context(self):
        """Nested add_context() blocks combine and unwind."""
        logger, stream = _stream_logger()

        with logger.add_context(event="rename"):
            with logger.add_context(directory=7):
                logger.error("inner")
            logger.error("outer")
        logger.error("none")

        lines = stream.getvalue().strip().splitlines()
        assert lines[0] == "ERROR inner | event=rename directory=7"
        assert lines[1] == "ERROR outer | event=rename"
        assert lines[2] == "ERROR none"

    def test_exception_includes_type_and_traceback(self):
        logger, stream = _stream_logger()
        try:
            raise ValueError("boom")
        except ValueError as e:
            logger.exception("Listener failed", e, directory=1)

        output = stream.getvalue()
        assert "exception_type=ValueError" in output
        assert "exception_message=boom" in output
        assert "Traceback" in output

    def test_file_handler(self, temp_dir):
        logger = Logger("treesort.test.file", handlers=[])
        log_path = temp_dir / "treesort.log"
        handler = logger.create_file_handler(log_path)
        logger.add_handler(handler)

        logger.info("to file", key="value")
        handler.flush()
        logger.remove_handler(handler)
        handler.close()

        assert "to file | key=value" in log_path.read_text()

    def test_does_not_propagate(self):
        logger = Logger("treesort.test", handlers=[])
        assert logger.logger.propagate is False


class TestGlobalLogger:
    """Tests for the global logger helpers."""

    def test_get_logger_returns_same_instance(self):
        assert get_logger() is get_logger()

    def test_get_logger_with_other_name(self):
        first = get_logger("treesort")
        second = get_logger("treesort.other")
        assert second is not first
        assert second.name == "treesort.other"

    def test_set_global_logger(self):
        custom = Logger("treesort.custom", handlers=[])
        set_global_logger(custom)
        assert get_logger("treesort.custom") is custom
