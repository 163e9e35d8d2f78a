"""Data model for pipeline definitions and run state."""

from cigate.models.changeset import ChangeSet, ChangeState
from cigate.models.pipeline import (
    CancellationPolicy,
    Component,
    ConcurrencySpec,
    NotifySpec,
    PipelineDefinition,
    ProtectedConflict,
    RunnerSpec,
    Stage,
)
from cigate.models.run import (
    InstanceState,
    Notification,
    RunIdentity,
    RunnerInstance,
    RunOutcome,
    RunReport,
    StageResult,
    StageStatus,
    Trigger,
    TriggerKind,
    branch_from_ref,
)

__all__ = [
    "CancellationPolicy",
    "ChangeSet",
    "ChangeState",
    "Component",
    "ConcurrencySpec",
    "InstanceState",
    "Notification",
    "NotifySpec",
    "PipelineDefinition",
    "ProtectedConflict",
    "RunIdentity",
    "RunOutcome",
    "RunReport",
    "RunnerInstance",
    "RunnerSpec",
    "Stage",
    "StageResult",
    "StageStatus",
    "Trigger",
    "TriggerKind",
    "branch_from_ref",
]
