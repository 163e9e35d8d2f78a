"""Runner platforms and the instance lifecycle manager."""

from cigate.runners.base import RunnerPlatform
from cigate.runners.lifecycle import InstanceLifecycleManager
from cigate.runners.local import LocalRunnerPlatform
from cigate.runners.slab import SlabRunnerPlatform

__all__ = [
    "InstanceLifecycleManager",
    "LocalRunnerPlatform",
    "RunnerPlatform",
    "SlabRunnerPlatform",
]
