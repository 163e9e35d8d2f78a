"""Per-run state: triggers, runner instances, stage results and the run report."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from cigate.models.changeset import ChangeSet

_BRANCH_PREFIX = "refs/heads/"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class TriggerKind(str, Enum):
    """What started the run."""

    MANUAL = "manual"
    PUSH = "push"
    PULL_REQUEST = "pull_request"

    @classmethod
    def from_event_name(cls, event_name: str) -> "TriggerKind":
        """Map a GitHub Actions event name to a trigger kind.

        Raises
        ------
        ValueError
            If the event is not one cigate knows how to gate
        """
        mapping = {
            "workflow_dispatch": cls.MANUAL,
            "manual": cls.MANUAL,
            "push": cls.PUSH,
            "schedule": cls.PUSH,
            "pull_request": cls.PULL_REQUEST,
            "pull_request_target": cls.PULL_REQUEST,
        }
        try:
            return mapping[event_name]
        except KeyError:
            msg = f"Unsupported trigger event: {event_name}"
            raise ValueError(msg) from None


@dataclass(frozen=True)
class Trigger:
    """An explicit trigger value passed into gate resolution.

    Parameters
    ----------
    kind : TriggerKind
        Trigger kind; only pull requests are change-gated
    ref : str
        Git ref the run is for (e.g. ``refs/heads/main``)
    action : str | None
        Pull-request event action (e.g. ``"labeled"``)
    label : str | None
        Label attached by a ``labeled`` action
    """

    kind: TriggerKind
    ref: str
    action: str | None = None
    label: str | None = None

    @property
    def is_change_gated(self) -> bool:
        """Whether stage gates depend on the change set."""
        return self.kind is TriggerKind.PULL_REQUEST

    @property
    def branch(self) -> str:
        """Branch name for ``refs/heads/*`` refs, the raw ref otherwise."""
        return branch_from_ref(self.ref)


def branch_from_ref(ref: str) -> str:
    """Strip the ``refs/heads/`` prefix from a ref."""
    return ref[len(_BRANCH_PREFIX):] if ref.startswith(_BRANCH_PREFIX) else ref


@dataclass(frozen=True)
class RunIdentity:
    """Identity of one pipeline run, used for concurrency and notifications."""

    run_id: str
    workflow: str
    ref: str
    repository: str = ""
    server_url: str = "https://github.com"

    @property
    def group_key(self) -> str:
        """Concurrency group key: workflow identity plus ref."""
        return f"{self.workflow}_{self.ref}"

    @property
    def branch(self) -> str:
        return branch_from_ref(self.ref)

    @property
    def link(self) -> str:
        """Dereferenceable link to the run."""
        if not self.repository:
            return f"{self.server_url}/actions/runs/{self.run_id}"
        return f"{self.server_url}/{self.repository}/actions/runs/{self.run_id}"


class InstanceState(str, Enum):
    """Lifecycle state of a runner instance."""

    REQUESTED = "requested"
    READY = "ready"
    IN_USE = "in_use"
    TEARING_DOWN = "tearing_down"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass
class RunnerInstance:
    """A provisioned runner, owned by exactly one run."""

    label: str
    profile: str
    backend: str
    state: InstanceState = InstanceState.REQUESTED
    trace: list[tuple[InstanceState, datetime]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.trace:
            self.trace.append((self.state, _utcnow()))

    def transition(self, state: InstanceState) -> None:
        """Move to ``state`` and record it in the trace."""
        self.state = state
        self.trace.append((state, _utcnow()))

    def reached(self, state: InstanceState) -> bool:
        """Whether the instance has ever been in ``state``."""
        return any(s is state for s, _ in self.trace)

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "profile": self.profile,
            "backend": self.backend,
            "state": self.state.value,
            "trace": [
                {"state": s.value, "at": at.isoformat()} for s, at in self.trace
            ],
        }


class StageStatus(str, Enum):
    """Per-stage outcome. SKIPPED means "not evaluated", never "passed"."""

    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


@dataclass
class StageResult:
    """Outcome of one stage."""

    name: str
    status: StageStatus
    gate: bool
    reason: str = ""
    duration: float = 0.0
    returncode: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "gate": self.gate,
            "reason": self.reason,
            "duration": round(self.duration, 3),
            "returncode": self.returncode,
        }


class RunOutcome(str, Enum):
    """Terminal status of a run, or of one observation point within it."""

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Notification:
    """A failure notification handed to a sink."""

    point: str
    status: RunOutcome
    message: str
    link: str
    run_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "point": self.point,
            "status": self.status.value,
            "message": self.message,
            "link": self.link,
            "run_id": self.run_id,
        }


@dataclass
class RunReport:
    """Everything observable about a finished run."""

    identity: RunIdentity
    trigger: Trigger
    change_set: ChangeSet | None = None
    gates: dict[str, bool] = field(default_factory=dict)
    any_changed: bool = False
    started: bool = False
    stage_results: list[StageResult] = field(default_factory=list)
    instance: RunnerInstance | None = None
    lifecycle_outcome: RunOutcome = RunOutcome.SKIPPED
    stage_outcome: RunOutcome = RunOutcome.SKIPPED
    outcome: RunOutcome = RunOutcome.SKIPPED
    notifications: list[Notification] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def result_for(self, stage: str) -> StageResult | None:
        """Get the result recorded for a stage."""
        return next((r for r in self.stage_results if r.name == stage), None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the report for JSON output."""
        return {
            "run_id": self.identity.run_id,
            "link": self.identity.link,
            "group": self.identity.group_key,
            "trigger": {
                "kind": self.trigger.kind.value,
                "ref": self.trigger.ref,
                "action": self.trigger.action,
                "label": self.trigger.label,
            },
            "changes": self.change_set.to_dict() if self.change_set else None,
            "gates": dict(self.gates),
            "any_changed": self.any_changed,
            "started": self.started,
            "stages": [r.to_dict() for r in self.stage_results],
            "instance": self.instance.to_dict() if self.instance else None,
            "lifecycle_outcome": self.lifecycle_outcome.value,
            "stage_outcome": self.stage_outcome.value,
            "outcome": self.outcome.value,
            "notifications": [n.to_dict() for n in self.notifications],
            "errors": list(self.errors),
        }
