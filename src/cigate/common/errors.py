"""Exception hierarchy for cigate.

Every error raised by the orchestration core derives from :class:`CigateError` so the
CLI can map them to exit codes in one place.
"""


class CigateError(Exception):
    """Base class for all cigate errors."""


class PipelineConfigError(CigateError):
    """A pipeline definition is malformed or inconsistent."""


class CommandError(CigateError):
    """A subprocess failed, timed out, or could not be started."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class ChangeDetectionError(CigateError):
    """The revision range could not be resolved.

    Callers treat this as "every component changed" rather than "nothing changed".
    """


class ProvisioningError(CigateError):
    """A runner instance could not be started or never became ready."""


class TeardownError(CigateError):
    """A runner instance could not be released."""


class StageExecutionError(CigateError):
    """A stage's build target failed."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"Stage '{stage}' failed: {message}")
        self.stage = stage


class NotificationError(CigateError):
    """A notification could not be delivered."""


class RunCancelledError(CigateError):
    """The run was cancelled, usually by a newer run in the same concurrency group."""


class ConcurrencyRejectedError(CigateError):
    """A run was refused because a protected run holds its concurrency group."""
