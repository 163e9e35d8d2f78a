"""Per-component change evaluation."""

from collections.abc import Iterable

from cigate.changes.globs import PathMatcher, normalize_path
from cigate.models import ChangeSet, ChangeState, Component
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)


class ChangeSetEvaluator:
    """Evaluate named components against a list of changed paths.

    Parameters
    ----------
    components : Iterable[Component]
        Components to evaluate, in declaration order
    """

    def __init__(self, components: Iterable[Component]) -> None:
        self.components = tuple(components)
        self._matchers = {
            c.name: PathMatcher(c.include, c.exclude) for c in self.components
        }

    def evaluate(
        self,
        changed_paths: Iterable[str],
        base: str | None = None,
        head: str | None = None,
    ) -> ChangeSet:
        """Build the change set for one revision range.

        Parameters
        ----------
        changed_paths : Iterable[str]
            Paths that differ between ``base`` and ``head``
        base : str | None
            Base revision, recorded on the change set
        head : str | None
            Head revision, recorded on the change set

        Returns
        -------
        ChangeSet
            Every component marked ``CHANGED`` or ``UNCHANGED``
        """
        paths = tuple(p for p in (normalize_path(p) for p in changed_paths) if p)
        states: dict[str, ChangeState] = {}
        for name, matcher in self._matchers.items():
            hit = matcher.any_match(paths)
            states[name] = ChangeState.CHANGED if hit else ChangeState.UNCHANGED
            logger.debug("Component %s: %s", name, states[name].value)

        changed = [n for n, s in states.items() if s is ChangeState.CHANGED]
        logger.info(
            "%d path(s) changed, %d/%d component(s) affected: %s",
            len(paths),
            len(changed),
            len(states),
            ", ".join(changed) or "none",
        )
        return ChangeSet(states=states, base=base, head=head, changed_paths=paths)

    def unknown(
        self,
        base: str | None = None,
        head: str | None = None,
        reason: str = "",
    ) -> ChangeSet:
        """Build a change set with every component in the ``UNKNOWN`` state."""
        states = {c.name: ChangeState.UNKNOWN for c in self.components}
        return ChangeSet(states=states, base=base, head=head, reason=reason)

    def matching_paths(self, name: str, changed_paths: Iterable[str]) -> list[str]:
        """List the paths that put one component in the changed state.

        Raises
        ------
        KeyError
            If ``name`` is not a known component
        """
        return self._matchers[name].filter(changed_paths)
