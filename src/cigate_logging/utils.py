"""Environment-driven logging helpers."""

import os
from pathlib import Path

from cigate_common.env import read_bool, read_str
from cigate_common.path import get_cigate_log_dir

LOG_LEVEL_ENV = "CIGATE_LOG_LEVEL"
LOG_DIR_ENV = "CIGATE_LOG_DIR"
NO_FILE_LOGGING_ENV = "CIGATE_NO_FILE_LOGGING"
CONSOLE_LOGGING_ENV = "CIGATE_CONSOLE_LOGGING"

VALID_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def get_log_level(default: str = "INFO") -> str:
    """Get the configured log level.

    Parameters
    ----------
    default : str
        Level used when ``CIGATE_LOG_LEVEL`` is unset or invalid

    Returns
    -------
    str
        Upper-cased level name
    """
    level = (read_str(LOG_LEVEL_ENV) or default).upper()
    if level not in VALID_LEVELS:
        return default.upper()
    return level


def should_use_file_logging() -> bool:
    """Whether file handlers should be attached (disabled by CIGATE_NO_FILE_LOGGING)."""
    return not read_bool(NO_FILE_LOGGING_ENV, False)


def should_use_console_logging() -> bool:
    """Whether console handlers are forced on (CIGATE_CONSOLE_LOGGING)."""
    return read_bool(CONSOLE_LOGGING_ENV, False)


def get_log_file_path(
    name: str,
    log_dir: str | None = None,
    filename: str | None = None,
) -> str:
    """Resolve the log file path for a named log, creating its directory.

    Parameters
    ----------
    name : str
        Log name (e.g. ``"cli"``); used as ``<name>.log`` unless ``filename`` is given
    log_dir : str | None
        Directory override; falls back to ``CIGATE_LOG_DIR`` then ``~/.cigate/log``
    filename : str | None
        Explicit file name

    Returns
    -------
    str
        Absolute path of the log file
    """
    directory = Path(log_dir or read_str(LOG_DIR_ENV) or get_cigate_log_dir())
    os.makedirs(directory, exist_ok=True)
    return str(directory / (filename or f"{name}.log"))
