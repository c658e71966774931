"""Unit tests for telemetry module."""

import asyncio
import json
import logging
import sys

import pytest

from creator_video.commons.telemetry.decorators import LogContext, log_exceptions, timed
from creator_video.commons.telemetry.logger import (
    JsonFormatter,
    TextFormatter,
    clear_log_context,
    configure_logging,
    get_correlation_id,
    get_log_context,
    set_correlation_id,
    set_log_context,
)


def _record(msg: str = "Test", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="/test/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationId:
    """Tests for correlation ID management."""

    def test_set_and_get_correlation_id(self):
        cid = set_correlation_id("test-123")
        assert cid == "test-123"
        assert get_correlation_id() == "test-123"

    def test_auto_generate_correlation_id(self):
        cid = set_correlation_id()
        assert len(cid) == 36  # UUID format

    def test_correlation_id_isolation(self):
        set_correlation_id("main-context")

        async def async_task():
            set_correlation_id("async-context")
            return get_correlation_id()

        assert asyncio.run(async_task()) == "async-context"
        assert get_correlation_id() == "main-context"


class TestLogContext:
    """Tests for log context helpers."""

    def setup_method(self):
        clear_log_context()

    def test_set_and_get_context(self):
        set_log_context(video_id="v-1")
        set_log_context(session_id="s-1")
        assert get_log_context() == {"video_id": "v-1", "session_id": "s-1"}

    def test_context_is_copied(self):
        set_log_context(video_id="v-1")
        ctx = get_log_context()
        ctx["video_id"] = "changed"
        assert get_log_context()["video_id"] == "v-1"


class TestJsonFormatter:
    """Tests for JSON log formatter."""

    def setup_method(self):
        clear_log_context()

    def test_basic_format(self):
        data = json.loads(JsonFormatter().format(_record("Test message")))

        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["path"] == "/test/file.py:42"

    def test_service_and_environment(self):
        formatter = JsonFormatter(service="creator-video-core", environment="prod")
        data = json.loads(formatter.format(_record()))
        assert data["service"] == "creator-video-core"
        assert data["environment"] == "prod"

    def test_format_with_correlation_id(self):
        set_correlation_id("test-cid")
        data = json.loads(JsonFormatter().format(_record()))
        assert data["correlation_id"] == "test-cid"

    def test_format_with_context(self):
        set_log_context(video_id="v-123")
        data = json.loads(JsonFormatter().format(_record()))
        assert data["context"]["video_id"] == "v-123"

    def test_extra_fields_are_included(self):
        data = json.loads(JsonFormatter().format(_record(session_id="s-1", count=3)))
        assert data["session_id"] == "s-1"
        assert data["count"] == 3
        assert "args" not in data

    def test_sensitive_extra_fields_are_redacted(self):
        data = json.loads(JsonFormatter().format(_record(signature="abc123")))
        assert data["signature"] == "***"

    def test_format_with_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record("Error occurred", level=logging.ERROR)
            record.exc_info = sys.exc_info()
            data = json.loads(JsonFormatter().format(record))

        assert "ValueError" in data["exception"]


class TestTextFormatter:
    """Tests for text log formatter."""

    def test_basic_format(self):
        output = TextFormatter().format(_record("Hello"))
        assert "INFO" in output
        assert "[test.logger]" in output
        assert "Hello" in output

    def test_extras_appended(self):
        output = TextFormatter().format(_record("Hello", video_id="v-1"))
        assert output.endswith("video_id=v-1")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_configure_json_logger(self):
        logger = configure_logging(level="DEBUG", format_type="json", logger_name="t.json")
        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logger.propagate is False

    def test_configure_text_logger(self):
        logger = configure_logging(level="INFO", format_type="text", logger_name="t.text")
        assert isinstance(logger.handlers[0].formatter, TextFormatter)


class TestTimedDecorator:
    """Tests for @timed decorator."""

    def test_timed_async_function(self, caplog):
        logger = logging.getLogger("test.timed")

        @timed(logger=logger)
        async def work():
            await asyncio.sleep(0)
            return "done"

        with caplog.at_level(logging.DEBUG, logger="test.timed"):
            result = asyncio.run(work())

        assert result == "done"
        records = [r for r in caplog.records if r.name == "test.timed"]
        assert records[0].getMessage().endswith("work completed")
        assert records[0].duration_ms >= 0

    def test_timed_with_threshold(self, caplog):
        logger = logging.getLogger("test.timed.threshold")

        @timed(logger=logger, threshold_ms=10_000)
        async def fast():
            return "fast"

        with caplog.at_level(logging.DEBUG, logger="test.timed.threshold"):
            assert asyncio.run(fast()) == "fast"

        assert [r for r in caplog.records if r.name.startswith("test.")] == []

    def test_timed_rejects_sync_functions(self):
        with pytest.raises(TypeError):

            @timed
            def not_async():
                return None


class TestLogExceptionsDecorator:
    """Tests for @log_exceptions decorator."""

    def test_log_and_reraise(self, caplog):
        logger = logging.getLogger("test.exceptions")

        @log_exceptions(logger=logger)
        async def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError), caplog.at_level(logging.ERROR, logger="test.exceptions"):
            asyncio.run(failing())

        records = [r for r in caplog.records if r.name == "test.exceptions"]
        assert records[0].exception_type == "RuntimeError"

    def test_ignored_exceptions_are_not_logged(self, caplog):
        logger = logging.getLogger("test.exceptions.ignored")

        @log_exceptions(logger=logger, ignore=(KeyError,))
        async def failing():
            raise KeyError("expected")

        with pytest.raises(KeyError), caplog.at_level(logging.ERROR, logger="test.exceptions.ignored"):
            asyncio.run(failing())

        assert [r for r in caplog.records if r.name.startswith("test.")] == []


class TestLogContextManager:
    """Tests for LogContext context manager."""

    def setup_method(self):
        clear_log_context()

    def teardown_method(self):
        clear_log_context()

    def test_context_manager_restores_context(self):
        set_log_context(existing="value")

        with LogContext(video_id="v-1"):
            ctx = get_log_context()
            assert ctx["existing"] == "value"
            assert ctx["video_id"] == "v-1"

        ctx = get_log_context()
        assert ctx["existing"] == "value"
        assert "video_id" not in ctx

    def test_nested_context_managers(self):
        with LogContext(video_id="v-1"):
            with LogContext(session_id="s-1"):
                assert get_log_context() == {"video_id": "v-1", "session_id": "s-1"}
            assert get_log_context() == {"video_id": "v-1"}
