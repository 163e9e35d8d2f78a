"""Logger configuration profiles."""

import logging
import sys

from cigate_logging.formatters import JSONFormatter, SafeFormatter
from cigate_logging.utils import (
    get_log_file_path,
    get_log_level,
    should_use_console_logging,
    should_use_file_logging,
)

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

PROFILES = ("cli", "test")


def _resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    name = (level or get_log_level()).upper()
    if name == "TRACE":
        return TRACE
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logger(
    name: str,
    profile: str = "cli",
    level: str | int | None = None,
    to_console: bool | None = None,
    log_file: str | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure a named logger according to a profile.

    Existing handlers on the logger are replaced, so calling this twice is safe.

    Parameters
    ----------
    name : str
        Logger name (usually a package name)
    profile : str
        ``"cli"`` logs to a file (and optionally stderr); ``"test"`` logs to stderr only
    level : str | int | None
        Explicit level; defaults to ``CIGATE_LOG_LEVEL`` or INFO
    to_console : bool | None
        Force a stderr handler on or off; ``None`` follows ``CIGATE_CONSOLE_LOGGING``
    log_file : str | None
        Explicit log file path for the ``cli`` profile
    json_format : bool
        Emit JSON lines instead of text

    Returns
    -------
    logging.Logger
        The configured logger

    Raises
    ------
    ValueError
        If the profile is unknown
    """
    if profile not in PROFILES:
        msg = f"Unknown profile: {profile}"
        raise ValueError(msg)

    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(_resolve_level(level))
    logger.propagate = profile == "test"
    formatter: logging.Formatter = JSONFormatter() if json_format else SafeFormatter()

    console = should_use_console_logging() if to_console is None else to_console
    if profile == "test" or console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if profile == "cli" and should_use_file_logging():
        file_handler = logging.FileHandler(
            log_file or get_log_file_path("cli"),
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger


def get_cli_logger(name: str) -> logging.Logger:
    """Get a module logger for cigate code.

    Handlers are attached by :func:`configure_logger` on the package loggers, so
    module loggers only need a name.
    """
    return logging.getLogger(name)


def get_test_logger(name: str = "tests") -> logging.Logger:
    """Get a logger configured with the ``test`` profile."""
    return configure_logger(name, profile="test", level=get_log_level("DEBUG"))
