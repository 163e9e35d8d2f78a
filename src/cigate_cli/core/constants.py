"""Constants and enums for the cigate CLI."""

from enum import Enum

from cigate.models import RunOutcome


class LogLevel(str, Enum):
    """Supported log levels."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


ALL_LOG_LEVELS = tuple(LogLevel)


class ExitCode:
    """Exit codes for CLI operations."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    NOT_FOUND = 2
    CONFIG_ERROR = 3
    PERMISSION_ERROR = 4
    TIMEOUT = 124
    CANCELLED = 130


OUTCOME_EXIT_CODES = {
    RunOutcome.SUCCESS: ExitCode.SUCCESS,
    RunOutcome.SKIPPED: ExitCode.SUCCESS,
    RunOutcome.FAILURE: ExitCode.GENERAL_ERROR,
    RunOutcome.CANCELLED: ExitCode.CANCELLED,
}


class OutputFormat(str, Enum):
    """Report rendering formats."""

    TEXT = "text"
    JSON = "json"
    GITHUB = "github"


class Icons:
    """Unicode icons for CLI output.

    Reserved for errors, section headers and status indicators.
    """

    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "📄"
    ROCKET = "🚀"
    GEAR = "⚙️"
    TEST = "🧪"
    STOP = "🛑"
    MAGNIFYING = "🔍"
    CONFIG = "🔧"
    LIST = "📋"
    REPORT = "📊"
    SKIPPED = "⏭️"
    UNKNOWN = "❓"


STATUS_ICONS = {
    "success": Icons.SUCCESS,
    "failure": Icons.ERROR,
    "skipped": Icons.SKIPPED,
    "cancelled": Icons.STOP,
}


class EnvVars:
    """Environment variable names."""

    LOG_LEVEL = "CIGATE_LOG_LEVEL"
    CONSOLE_LOGGING = "CIGATE_CONSOLE_LOGGING"
    NO_FILE_LOGGING = "CIGATE_NO_FILE_LOGGING"
    STATE_DIR = "CIGATE_STATE_DIR"

    GITHUB_EVENT_NAME = "GITHUB_EVENT_NAME"
    GITHUB_REF = "GITHUB_REF"
    GITHUB_RUN_ID = "GITHUB_RUN_ID"
    GITHUB_WORKFLOW = "GITHUB_WORKFLOW"
    GITHUB_REPOSITORY = "GITHUB_REPOSITORY"
    GITHUB_SERVER_URL = "GITHUB_SERVER_URL"
    GITHUB_OUTPUT = "GITHUB_OUTPUT"
    GITHUB_BASE_REF = "GITHUB_BASE_REF"
    GITHUB_SHA = "GITHUB_SHA"
    GITHUB_ACTIONS = "GITHUB_ACTIONS"
    RUNNER_DEBUG = "RUNNER_DEBUG"
