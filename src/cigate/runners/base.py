"""Runner platform interface."""

from abc import ABC, abstractmethod

from cigate.models import RunnerSpec


class RunnerPlatform(ABC):
    """A service that hosts ephemeral CI runners.

    Implementations translate platform failures into ``ProvisioningError`` (from
    :meth:`start`) and ``TeardownError`` (from :meth:`stop`).
    """

    name = "platform"

    @abstractmethod
    def start(self, spec: RunnerSpec) -> str:
        """Request a new runner.

        Returns
        -------
        str
            Opaque handle (the runner label) for later calls
        """

    @abstractmethod
    def is_ready(self, handle: str) -> bool:
        """Check whether a requested runner can accept work."""

    @abstractmethod
    def stop(self, handle: str) -> None:
        """Release a runner. Stopping an already released runner is a no-op."""
