"""Gated stage execution."""

from cigate.stages.executor import (
    CommandTargetExecutor,
    DryRunTargetExecutor,
    TargetExecutor,
)
from cigate.stages.runner import StageRunner

__all__ = [
    "CommandTargetExecutor",
    "DryRunTargetExecutor",
    "StageRunner",
    "TargetExecutor",
]
