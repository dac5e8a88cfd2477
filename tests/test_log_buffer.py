"""
tests/test_log_buffer.py — Live Log Capture
=============================================
"""

from __future__ import annotations

import logging

import pytest

from creed.services import log_buffer
from creed.services.log_buffer import BufferHandler, LogBuffer, LogEntry


def _entry(level="INFO", name="creed.api", message="hello"):
    return LogEntry("2026-10-18T00:00:00+00:00", level, name, message)


@pytest.fixture
def installed():
    """Install the buffer handler, then detach it and restore the root level."""
    root = logging.getLogger()
    original_level = root.level
    handler = log_buffer.install_handler()
    log_buffer.get_buffer().clear()
    yield handler
    root.removeHandler(handler)
    root.setLevel(original_level)
    log_buffer.get_buffer().clear()


class TestLogBuffer:
    def test_capacity_drops_oldest(self):
        buf = LogBuffer(capacity=3)
        for i in range(5):
            buf.append(_entry(message=str(i)))
        assert len(buf) == 3
        assert [e.message for e in buf.tail(10)] == ["2", "3", "4"]

    def test_tail_limit_keeps_newest(self):
        buf = LogBuffer()
        for i in range(10):
            buf.append(_entry(message=str(i)))
        assert [e.message for e in buf.tail(2)] == ["8", "9"]

    def test_min_level(self):
        buf = LogBuffer()
        buf.append(_entry("DEBUG"))
        buf.append(_entry("INFO"))
        buf.append(_entry("ERROR"))
        assert [e.level for e in buf.tail(min_level="warning")] == ["ERROR"]

    def test_unknown_min_level_filters_nothing(self):
        buf = LogBuffer()
        buf.append(_entry("DEBUG"))
        assert len(buf.tail(min_level="LOUD")) == 1

    def test_prefix(self):
        buf = LogBuffer()
        buf.append(_entry(name="creed.services.poll_service"))
        buf.append(_entry(name="uvicorn.access"))
        assert [e.logger for e in buf.tail(prefix="uvicorn")] == ["uvicorn.access"]


class TestHandler:
    def test_emit_copies_record(self):
        buf = LogBuffer()
        logger = logging.getLogger("creed.test.handler")
        logger.propagate = False
        handler = BufferHandler(buf, level=logging.DEBUG)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        try:
            logger.warning("ride %s full", "r1")
        finally:
            logger.removeHandler(handler)
            logger.propagate = True
        (entry,) = buf.tail()
        assert entry.level == "WARNING"
        assert entry.logger == "creed.test.handler"
        assert entry.message == "ride r1 full"
        assert entry.timestamp.endswith("+00:00")

    def test_install_is_idempotent(self, installed):
        assert log_buffer.install_handler() is installed
        handlers = [h for h in logging.getLogger().handlers if isinstance(h, BufferHandler)]
        assert len(handlers) == 1

    def test_get_logs(self, installed):
        logging.getLogger("creed.test.logs").info("captured")
        logs = log_buffer.get_logs(tail=10, logger_prefix="creed.test")
        assert logs[-1]["message"] == "captured"
        assert set(logs[-1]) == {"timestamp", "level", "logger", "message"}


class TestCaptureLevel:
    def test_set_and_get(self, installed):
        assert log_buffer.set_capture_level("debug") == "DEBUG"
        assert log_buffer.get_capture_level() == "DEBUG"
        logging.getLogger("creed.test.level").debug("fine detail")
        assert log_buffer.get_logs(level="DEBUG", logger_prefix="creed.test.level")

    def test_invalid_level(self, installed):
        with pytest.raises(ValueError):
            log_buffer.set_capture_level("VERBOSE")
