"""Tests for logger configuration."""

import json
import logging
from pathlib import Path

import pytest

from cigate_logging import (
    TRACE,
    JSONFormatter,
    SafeFormatter,
    configure_logger,
    get_log_level,
)
from cigate_logging.utils import get_log_file_path, should_use_file_logging


@pytest.fixture
def logger_name():
    """A throwaway logger name, cleaned up after the test."""
    name = "cigate_logging_test"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class TestConfigureLogger:
    """Tests for configure_logger function."""

    def test_unknown_profile(self, logger_name):
        """Test unknown profiles are refused."""
        with pytest.raises(ValueError, match="Unknown profile"):
            configure_logger(logger_name, profile="server")

    def test_test_profile(self, logger_name):
        """Test the test profile logs to stderr and propagates."""
        logger = configure_logger(logger_name, profile="test", level="DEBUG")

        assert logger.propagate
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)

    def test_cli_profile_without_file_logging(self, logger_name):
        """Test the cli profile falls back to a null handler."""
        logger = configure_logger(logger_name, profile="cli")

        assert not logger.propagate
        assert [type(h) for h in logger.handlers] == [logging.NullHandler]

    def test_cli_profile_with_file(self, logger_name, monkeypatch, tmp_path: Path):
        """Test the cli profile writes to the given log file."""
        monkeypatch.delenv("CIGATE_NO_FILE_LOGGING")
        log_file = tmp_path / "cli.log"

        logger = configure_logger(logger_name, log_file=str(log_file))
        logger.info("provisioned %s", "runner-1")
        for handler in logger.handlers:
            handler.flush()

        assert "provisioned runner-1" in log_file.read_text()

    def test_trace_level(self, logger_name):
        """Test TRACE resolves below DEBUG."""
        logger = configure_logger(logger_name, profile="test", level="TRACE")

        assert logger.level == TRACE < logging.DEBUG

    def test_reconfigure_replaces_handlers(self, logger_name):
        """Test configuring twice does not stack handlers."""
        configure_logger(logger_name, profile="test")
        logger = configure_logger(logger_name, profile="test")

        assert len(logger.handlers) == 1


class TestUtils:
    """Tests for environment-driven logging helpers."""

    def test_log_level_from_env(self, monkeypatch):
        """Test CIGATE_LOG_LEVEL is honored and validated."""
        monkeypatch.setenv("CIGATE_LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"

        monkeypatch.setenv("CIGATE_LOG_LEVEL", "loud")
        assert get_log_level() == "INFO"

    def test_file_logging_switch(self, monkeypatch):
        """Test CIGATE_NO_FILE_LOGGING disables file logging."""
        assert not should_use_file_logging()

        monkeypatch.setenv("CIGATE_NO_FILE_LOGGING", "0")
        assert should_use_file_logging()

    def test_log_file_path(self, monkeypatch, tmp_path: Path):
        """Test CIGATE_LOG_DIR overrides the log directory."""
        monkeypatch.setenv("CIGATE_LOG_DIR", str(tmp_path / "logs"))

        path = get_log_file_path("cli")

        assert path == str(tmp_path / "logs" / "cli.log")
        assert (tmp_path / "logs").is_dir()


class TestFormatters:
    """Tests for log formatters."""

    def _record(self, level=logging.WARNING) -> logging.LogRecord:
        return logging.LogRecord(
            "cigate.x",
            level,
            __file__,
            1,
            "hello %s",
            ("x",),
            None,
        )

    def test_safe_formatter_shortens_warning(self):
        """Test WARNING is rendered as WARN."""
        assert "WARN  [cigate.x] hello x" in SafeFormatter().format(self._record())

    def test_json_formatter(self):
        """Test JSON output carries level, logger and message."""
        record = self._record(logging.INFO)
        record.run_id = "42"

        payload = json.loads(JSONFormatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "cigate.x"
        assert payload["message"] == "hello x"
        assert payload["run_id"] == "42"
