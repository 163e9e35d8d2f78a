"""Change set model."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class ChangeState(str, Enum):
    """Per-component change detection result."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ChangeSet:
    """Result of evaluating every component against one revision range.

    ``UNKNOWN`` is produced when there is no comparable range (manual dispatch, first
    run, unresolvable refs). :meth:`is_changed` reads it, and any component missing
    from the mapping, as changed.
    """

    states: Mapping[str, ChangeState]
    base: str | None = None
    head: str | None = None
    changed_paths: tuple[str, ...] = ()
    reason: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", MappingProxyType(dict(self.states)))

    @property
    def is_unknown(self) -> bool:
        """True when every component is in the unknown state."""
        return bool(self.states) and all(
            s is ChangeState.UNKNOWN for s in self.states.values()
        )

    def state(self, name: str) -> ChangeState:
        """Get a component's state, ``UNKNOWN`` if it was never evaluated."""
        return self.states.get(name, ChangeState.UNKNOWN)

    def is_changed(self, name: str) -> bool:
        """Fail-open change test for one component."""
        return self.state(name) is not ChangeState.UNCHANGED

    def any_changed(self) -> bool:
        """Whether any evaluated component changed (or is unknown)."""
        return any(s is not ChangeState.UNCHANGED for s in self.states.values())

    def changed_components(self) -> list[str]:
        """Names of components that are changed or unknown."""
        return [name for name in self.states if self.is_changed(name)]

    def to_dict(self) -> dict:
        """Serialize for reports."""
        return {
            "base": self.base,
            "head": self.head,
            "reason": self.reason,
            "changed_paths": list(self.changed_paths),
            "components": {name: state.value for name, state in self.states.items()},
        }
