"""GitHub Actions context: trigger, run identity and base revision."""

import uuid
from pathlib import Path

import click

from cigate.common.errors import CommandError
from cigate.common.process import CommandExecutor
from cigate.models import RunIdentity, Trigger, TriggerKind
from cigate_cli.core.constants import EnvVars
from cigate_common.env import read_str
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)


def build_trigger(
    event: str,
    ref: str,
    action: str | None = None,
    label: str | None = None,
) -> Trigger:
    """Build a :class:`Trigger` from an event name.

    Raises
    ------
    ValueError
        If the event is not a supported trigger
    """
    return Trigger(
        kind=TriggerKind.from_event_name(event),
        ref=ref,
        action=action,
        label=label,
    )


def resolve_ref(
    ref: str | None,
    repo_root: Path,
    command_executor: CommandExecutor,
) -> str:
    """Use ``ref`` when given, otherwise the checked-out branch."""
    if ref:
        return ref
    try:
        result = command_executor.execute(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=repo_root,
            capture_output=True,
        )
    except CommandError as e:
        logger.debug("Cannot determine current branch: %s", e)
        return "HEAD"
    branch = result.stdout.strip()
    return f"refs/heads/{branch}" if branch and branch != "HEAD" else "HEAD"


def resolve_base(base: str | None, trigger: Trigger) -> str | None:
    """Default a pull request's base to its target branch on ``origin``."""
    if base or not trigger.is_change_gated:
        return base
    base_ref = read_str(EnvVars.GITHUB_BASE_REF)
    return f"origin/{base_ref}" if base_ref else None


def build_identity(
    workflow: str,
    ref: str,
    run_id: str | None = None,
) -> RunIdentity:
    """Build the run identity from the GitHub environment.

    Outside GitHub Actions a random ``local-*`` run id is generated.
    """
    return RunIdentity(
        run_id=run_id
        or read_str(EnvVars.GITHUB_RUN_ID)
        or f"local-{uuid.uuid4().hex[:8]}",
        workflow=read_str(EnvVars.GITHUB_WORKFLOW) or workflow,
        ref=ref,
        repository=read_str(EnvVars.GITHUB_REPOSITORY, default=""),
        server_url=read_str(EnvVars.GITHUB_SERVER_URL, default="https://github.com"),
    )


def trigger_from_options(
    event: str,
    ref: str | None,
    action: str | None,
    label: str | None,
    repo_root: Path,
    command_executor: CommandExecutor,
) -> Trigger:
    """Build a trigger from CLI options, reporting bad events as usage errors."""
    try:
        return build_trigger(
            event,
            resolve_ref(ref, repo_root, command_executor),
            action=action,
            label=label,
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--event") from e
