"""Pipeline definition models.

These are declared once, when a pipeline is authored, and never mutated during a run.
"""

from dataclasses import dataclass, field
from enum import Enum

from cigate_common.constants import DEFAULT_BRANCH, DEFAULT_SHARED_COMPONENT


class CancellationPolicy(str, Enum):
    """What a new run does to an in-flight run of the same concurrency group."""

    ALWAYS_CANCEL = "always-cancel"
    PROTECT_DEFAULT_BRANCH = "protect-default-branch"


class ProtectedConflict(str, Enum):
    """How a new run behaves when the in-flight run is on a protected branch."""

    QUEUE = "queue"
    REJECT = "reject"


@dataclass(frozen=True)
class Component:
    """A named group of source paths used for change-based gating.

    Parameters
    ----------
    name : str
        Component name (e.g. ``"core_crypto"``)
    include : tuple[str, ...]
        Globs selecting the component's paths
    exclude : tuple[str, ...]
        Globs removed from the selection; they always win over ``include``
    """

    name: str
    include: tuple[str, ...]
    exclude: tuple[str, ...] = ()


@dataclass(frozen=True)
class Stage:
    """A gated unit of test execution.

    Parameters
    ----------
    name : str
        Stage name
    target : str
        Build target invoked on the runner (e.g. ``"test_boolean"``)
    components : tuple[str, ...]
        Components whose change opens this stage's gate
    requires : tuple[str, ...]
        Producer stages that must succeed before this stage may run
    produces : tuple[str, ...]
        Artifacts this stage leaves on the runner for later stages
    always : bool
        Run regardless of the change set
    shared : bool
        Open the gate when the shared dependencies component changes; stages
        that do not build on that component set this to False
    env : dict[str, str]
        Extra environment for the build target
    timeout : float | None
        Target timeout in seconds
    description : str
        Human-readable label
    """

    name: str
    target: str
    components: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    produces: tuple[str, ...] = ()
    always: bool = False
    shared: bool = True
    env: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    description: str = ""


@dataclass(frozen=True)
class RunnerSpec:
    """Capability profile and provisioning limits for the run's instance."""

    profile: str
    backend: str = "aws"
    provision_timeout: float = 900.0
    poll_interval: float = 10.0


@dataclass(frozen=True)
class ConcurrencySpec:
    """Concurrency group settings.

    The group key is ``"{workflow}_{ref}"``; ``policy`` decides whether a new run
    cancels an in-flight one.
    ``stale_after`` is the age in seconds past which a claim is treated as left
    behind by a run that died without releasing.
    """

    policy: CancellationPolicy = CancellationPolicy.ALWAYS_CANCEL
    protected_branches: tuple[str, ...] = (DEFAULT_BRANCH,)
    on_protected_conflict: ProtectedConflict = ProtectedConflict.QUEUE
    queue_timeout: float = 3600.0
    poll_interval: float = 15.0
    stale_after: float = 21600.0


@dataclass(frozen=True)
class NotifySpec:
    """Failure notification settings."""

    title: str
    channel: str | None = None
    username: str = "cigate"
    icon_url: str | None = None
    webhook_env: str = "SLACK_WEBHOOK"


@dataclass(frozen=True)
class PipelineDefinition:
    """A complete pipeline: components, ordered stages, runner and policies."""

    name: str
    components: tuple[Component, ...]
    stages: tuple[Stage, ...]
    runner: RunnerSpec
    concurrency: ConcurrencySpec = field(default_factory=ConcurrencySpec)
    notify: NotifySpec | None = None
    shared_component: str | None = DEFAULT_SHARED_COMPONENT
    approval_label: str | None = None

    @property
    def component_names(self) -> list[str]:
        """Component names in declaration order."""
        return [c.name for c in self.components]

    @property
    def stage_names(self) -> list[str]:
        """Stage names in declaration (execution) order."""
        return [s.name for s in self.stages]

    def get_component(self, name: str) -> Component | None:
        """Look up a component by name."""
        return next((c for c in self.components if c.name == name), None)

    def get_stage(self, name: str) -> Stage | None:
        """Look up a stage by name."""
        return next((s for s in self.stages if s.name == name), None)
