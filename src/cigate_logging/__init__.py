"""Logging configuration for cigate packages.

Wraps the standard :mod:`logging` module with named profiles so the CLI, the core
library and the test suite configure handlers the same way.

Usage
-----
>>> from cigate_logging import get_cli_logger
>>> logger = get_cli_logger(__name__)
>>> logger.info("Provisioned %s", label)
"""

from cigate_logging.config import (
    TRACE,
    configure_logger,
    get_cli_logger,
    get_test_logger,
)
from cigate_logging.formatters import JSONFormatter, SafeFormatter
from cigate_logging.utils import (
    get_log_file_path,
    get_log_level,
    should_use_console_logging,
    should_use_file_logging,
)

__all__ = [
    "JSONFormatter",
    "SafeFormatter",
    "TRACE",
    "configure_logger",
    "get_cli_logger",
    "get_log_file_path",
    "get_log_level",
    "get_test_logger",
    "should_use_console_logging",
    "should_use_file_logging",
]
