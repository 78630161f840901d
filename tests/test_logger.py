"""
Tests for logging setup.

Requires Python 3.11+.
"""

import json

import pytest

from fshelper.utils.logger import LoggerMixin, configure_logging, get_logger


class Widget(LoggerMixin):
    pass


class TestLogging:
    """Test cases for configure_logging and LoggerMixin."""

    def test_json_events_go_to_stderr(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ):
        """Test that JSON rendering writes one object per event to stderr only."""
        monkeypatch.setenv("LOG_FORMAT", "json")
        configure_logging()

        get_logger("test").info("listed", entries=3)

        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip())
        assert event["event"] == "listed"
        assert event["entries"] == 3
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_level_filters_events(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ):
        """Test that events below LOG_LEVEL are dropped."""
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        configure_logging()

        log = get_logger("test")
        log.debug("hidden")
        log.info("hidden")
        log.warning("shown")

        lines = capsys.readouterr().err.strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["shown"]

    def test_mixin_logger_is_cached(self):
        """Test that the log property returns the same logger each time."""
        widget = Widget()
        assert widget.log is widget.log
