"""Tests for logging_config.py module."""

import io
import logging

import colorlog
import pytest

from irongolem.logging_config import (
    ErrorAggregator,
    LoggerConfigurator,
    error_aggregator,
    log_structured_error,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggerConfigurator:
    def test_installs_colored_handler(self, restore_root_logger, monkeypatch):
        monkeypatch.delenv("DEBUG", raising=False)
        stream = io.StringIO()
        LoggerConfigurator({"stream": stream}).configure()

        root = restore_root_logger
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, colorlog.ColoredFormatter)
        assert root.level == logging.INFO

        logging.info("connected")
        assert "connected" in stream.getvalue()

    @pytest.mark.parametrize("value", ["true", "1", "YES"])
    def test_debug_env_enables_debug(self, restore_root_logger, monkeypatch, value):
        monkeypatch.setenv("DEBUG", value)
        LoggerConfigurator({"stream": io.StringIO()}).configure()
        assert restore_root_logger.level == logging.DEBUG

    def test_aiohttp_quietened(self, restore_root_logger):
        LoggerConfigurator({"stream": io.StringIO()}).configure()
        assert logging.getLogger("aiohttp").level == logging.WARNING


class TestErrorAggregator:
    def test_summary_counts(self):
        aggregator = ErrorAggregator()
        aggregator.record_error("network", "refused")
        aggregator.record_error("network", "reset", {"user": "Steve"})

        summary = aggregator.get_error_summary()
        assert summary["network"]["total_count"] == 2
        assert summary["network"]["recent_count"] == 2
        assert summary["network"]["last_occurrence"]["context"] == {"user": "Steve"}

    def test_alert_threshold(self):
        aggregator = ErrorAggregator()
        assert not aggregator.should_alert("fatal")
        for _ in range(3):
            aggregator.record_error("fatal", "boom")
        assert aggregator.should_alert("fatal", threshold_rate=2)
        assert not aggregator.should_alert("fatal", threshold_rate=5)

    def test_clear(self):
        aggregator = ErrorAggregator()
        aggregator.record_error("auth", "bad")
        aggregator.clear()
        assert aggregator.get_error_summary() == {}


def test_log_structured_error_formats_and_records(caplog):
    with caplog.at_level(logging.ERROR):
        log_structured_error(
            "fatal",
            "remote host refused connection",
            exception=ConnectionRefusedError("refused"),
            context={"user": "Steve"},
        )

    assert "[FATAL] remote host refused connection" in caplog.text
    assert "Exception: ConnectionRefusedError: refused" in caplog.text
    assert "Context: user=Steve" in caplog.text
    assert error_aggregator.get_error_summary()["fatal"]["total_count"] == 1
