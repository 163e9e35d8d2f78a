"""Change detection against a git revision range."""

from pathlib import Path

from cigate.changes.evaluator import ChangeSetEvaluator
from cigate.common.errors import ChangeDetectionError, CommandError
from cigate.common.process import CommandExecutor
from cigate.models import ChangeSet
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

GIT_TIMEOUT = 120


class GitChangeSource:
    """List changed paths with ``git diff --name-only``.

    The range uses three-dot (merge-base) semantics, so a pull request is compared
    against the point it branched from rather than the current tip of its base.

    Parameters
    ----------
    repo_root : Path
        Repository to query
    command_executor : CommandExecutor | None
        Executor used for git calls
    """

    def __init__(
        self,
        repo_root: Path,
        command_executor: CommandExecutor | None = None,
    ) -> None:
        self.repo_root = Path(repo_root)
        self.command_executor = command_executor or CommandExecutor()

    def changed_paths(self, base: str, head: str | None = None) -> list[str]:
        """List paths changed between ``base`` and ``head``.

        Parameters
        ----------
        base : str
            Base revision (branch, tag or sha)
        head : str | None
            Head revision, ``HEAD`` if omitted

        Returns
        -------
        list[str]
            Repository-relative paths

        Raises
        ------
        ChangeDetectionError
            If git is unavailable or the range cannot be resolved
        """
        rev_range = f"{base}...{head or 'HEAD'}"
        try:
            result = self.command_executor.execute(
                ["git", "diff", "--name-only", rev_range],
                cwd=self.repo_root,
                capture_output=True,
                timeout=GIT_TIMEOUT,
            )
        except CommandError as e:
            msg = f"Cannot list changes for {rev_range}: {e}"
            raise ChangeDetectionError(msg) from e

        paths = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        logger.debug("git diff %s: %d path(s)", rev_range, len(paths))
        return paths


def detect_changes(
    source: GitChangeSource,
    evaluator: ChangeSetEvaluator,
    base: str | None,
    head: str | None = None,
) -> ChangeSet:
    """Compute the run's change set, failing open.

    A missing base (manual dispatch, first run on a branch) or an unresolvable range
    yields an all-``UNKNOWN`` change set, which opens every gate.

    Returns
    -------
    ChangeSet
        The change set for this run
    """
    if not base:
        logger.info("No base revision, treating every component as changed")
        return evaluator.unknown(head=head, reason="no base revision")

    try:
        paths = source.changed_paths(base, head)
    except ChangeDetectionError as e:
        logger.warning("Change detection failed, failing open: %s", e)
        return evaluator.unknown(base=base, head=head, reason=str(e))

    return evaluator.evaluate(paths, base=base, head=head)
