"""Test environment setup and logging configuration."""

import logging
import os

GITHUB_VARS = (
    "GITHUB_ACTIONS",
    "RUNNER_DEBUG",
    "GITHUB_EVENT_NAME",
    "GITHUB_REF",
    "GITHUB_RUN_ID",
    "GITHUB_WORKFLOW",
    "GITHUB_REPOSITORY",
    "GITHUB_SERVER_URL",
    "GITHUB_OUTPUT",
    "GITHUB_BASE_REF",
    "SLAB_BASE_URL",
    "SLAB_ACTION_TOKEN",
    "JOB_SECRET",
    "SLACK_WEBHOOK",
    "SLACK_CHANNEL",
    "SLACK_USERNAME",
    "SLACK_ICON",
    "CIGATE_STATE_DIR",
    "CIGATE_LOG_LEVEL",
    "CIGATE_CONSOLE_LOGGING",
)


def configure_test_logging() -> None:
    """Route cigate loggers through pytest's caplog at the configured level."""
    from cigate_logging import configure_logger

    level = os.getenv("CIGATE_TEST_LOG_LEVEL", "DEBUG")
    for name in ("cigate", "cigate_cli", "cigate_common", "tests"):
        configure_logger(name, profile="test", level=level)
        logging.getLogger(name).propagate = True

    for name in ("urllib3", "requests"):
        logging.getLogger(name).setLevel(logging.WARNING)


def isolate_environment(monkeypatch, home) -> None:
    """Point HOME at ``home``, disable file logging and clear CI variables."""
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("CIGATE_NO_FILE_LOGGING", "1")
    for var in GITHUB_VARS:
        monkeypatch.delenv(var, raising=False)
