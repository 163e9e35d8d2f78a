"""Gate resolution: which stages run for a given change set and trigger."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from cigate.models import ChangeSet, Stage, Trigger
from cigate_common.constants import DEFAULT_SHARED_COMPONENT
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

LABELED_ACTION = "labeled"


@dataclass(frozen=True)
class GateDecision:
    """Per-stage gates plus the aggregate start decision for one run.

    Attributes
    ----------
    gates : dict[str, bool]
        Stage name to gate, in stage declaration order
    any_changed : bool
        True when the trigger is ungated or any component changed
    approved : bool
        False only for a ``labeled`` pull-request event with the wrong label
    """

    gates: dict[str, bool] = field(default_factory=dict)
    any_changed: bool = True
    approved: bool = True

    @property
    def should_start(self) -> bool:
        """Whether the run should provision an instance at all."""
        return self.any_changed and self.approved

    def gate(self, stage: str) -> bool:
        """Get one stage's gate; unknown stages are closed."""
        return self.gates.get(stage, False)

    @property
    def open_stages(self) -> list[str]:
        return [name for name, gate in self.gates.items() if gate]


class GateResolver:
    """Compute stage gates from a change set.

    A stage runs when the trigger is not change-gated, the stage is marked
    ``always``, one of its components changed, or the shared dependencies component
    changed and the stage is ``shared``. Unknown components count as changed.

    Parameters
    ----------
    shared_component : str | None
        Component whose change opens every gate
    approval_label : str | None
        Label required when a pull request run is triggered by labeling
    """

    def __init__(
        self,
        shared_component: str | None = DEFAULT_SHARED_COMPONENT,
        approval_label: str | None = None,
    ) -> None:
        self.shared_component = shared_component
        self.approval_label = approval_label

    def gate(self, stage: Stage, change_set: ChangeSet, trigger: Trigger) -> bool:
        """Compute the gate for a single stage."""
        if not trigger.is_change_gated or stage.always:
            return True
        if (
            stage.shared
            and self.shared_component
            and change_set.is_changed(self.shared_component)
        ):
            return True
        return any(change_set.is_changed(c) for c in stage.components)

    def is_approved(self, trigger: Trigger) -> bool:
        """Check the label approval rule for ``labeled`` pull-request events."""
        if not trigger.is_change_gated or self.approval_label is None:
            return True
        if trigger.action != LABELED_ACTION:
            return True
        return trigger.label == self.approval_label

    def resolve(
        self,
        change_set: ChangeSet,
        trigger: Trigger,
        stages: Iterable[Stage],
    ) -> GateDecision:
        """Resolve gates for every stage.

        Parameters
        ----------
        change_set : ChangeSet
            The run's change set
        trigger : Trigger
            What started the run
        stages : Iterable[Stage]
            Stages in declaration order

        Returns
        -------
        GateDecision
            Gates, the aggregate change flag and label approval
        """
        gates = {s.name: self.gate(s, change_set, trigger) for s in stages}
        any_changed = not trigger.is_change_gated or change_set.any_changed()
        approved = self.is_approved(trigger)

        logger.info(
            "Gates (%s): %s",
            trigger.kind.value,
            ", ".join(f"{n}={'open' if g else 'closed'}" for n, g in gates.items())
            or "no stages",
        )
        if not approved:
            logger.info(
                "Label '%s' does not match approval label '%s'",
                trigger.label,
                self.approval_label,
            )
        return GateDecision(gates=gates, any_changed=any_changed, approved=approved)
