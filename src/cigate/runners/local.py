"""Host-local runner platform used for dry runs and local invocations."""

import itertools
import os
import socket

from cigate.models import RunnerSpec
from cigate.runners.base import RunnerPlatform
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)


class LocalRunnerPlatform(RunnerPlatform):
    """Treat the current host as the runner.

    Starting is immediate and stopping only forgets the handle; nothing is
    provisioned.
    """

    name = "local"

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.active: set[str] = set()

    def start(self, spec: RunnerSpec) -> str:
        label = f"local-{socket.gethostname()}-{os.getpid()}-{next(self._counter)}"
        self.active.add(label)
        logger.info("Using local host as runner %s (profile %s)", label, spec.profile)
        return label

    def is_ready(self, handle: str) -> bool:
        return handle in self.active

    def stop(self, handle: str) -> None:
        self.active.discard(handle)
