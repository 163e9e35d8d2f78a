"""Full pipeline run."""

from pathlib import Path

import click

from cigate.changes import GitChangeSource
from cigate.concurrency import CancellationToken, FileConcurrencyStore
from cigate.config import load_pipeline
from cigate.notify import sink_from_spec
from cigate.pipeline import PipelineRun
from cigate.runners import LocalRunnerPlatform, RunnerPlatform, SlabRunnerPlatform
from cigate.stages import CommandTargetExecutor, DryRunTargetExecutor, TargetExecutor
from cigate_cli.core.constants import OUTCOME_EXIT_CODES, OutputFormat
from cigate_cli.core.decorators import (
    handle_exceptions,
    output_format_option,
    trigger_options,
)
from cigate_cli.core.formatting import (
    render_report,
    report_output_lines,
    to_json,
    write_github_output,
)
from cigate_cli.core.github import build_identity, resolve_base, trigger_from_options
from cigate_cli.core.signals import cancel_on_signals
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)


@click.command(name="run")
@click.argument(
    "pipeline",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@trigger_options
@click.option("--run-id", default=None, help="Run id [default: $GITHUB_RUN_ID]")
@click.option(
    "--local",
    is_flag=True,
    help="Use this host as the runner instead of provisioning one",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Use this host and only report which targets would run",
)
@click.option(
    "--state-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for concurrency state",
)
@click.option(
    "--github-output",
    default=None,
    help="File for --format github [default: $GITHUB_OUTPUT]",
)
@output_format_option
@click.pass_context
@handle_exceptions
def command(
    ctx: click.Context,
    pipeline: Path,
    event: str,
    ref: str | None,
    base: str | None,
    head: str | None,
    event_action: str | None,
    label: str | None,
    run_id: str | None,
    local: bool,
    dry_run: bool,
    state_dir: Path | None,
    github_output: str | None,
    output_format: str,
) -> None:
    """Run PIPELINE: gate stages, provision a runner, run and report.

    \b
    Exits 0 on success or skip, 1 on failure and 130 when cancelled. SIGINT or
    SIGTERM cancels the run and still tears the runner down.
    """  # noqa: W605
    cigate_ctx = ctx.obj
    output = cigate_ctx.output

    definition = load_pipeline(pipeline, cigate_ctx.config)
    trigger = trigger_from_options(
        event,
        ref,
        event_action,
        label,
        cigate_ctx.repo_root,
        cigate_ctx.command_executor,
    )
    identity = build_identity(definition.name, trigger.ref, run_id)
    logger.info(
        "Run %s of %s on %s (%s)",
        identity.run_id,
        definition.name,
        trigger.ref,
        trigger.kind.value,
    )

    platform: RunnerPlatform
    if local or dry_run:
        platform = LocalRunnerPlatform()
    else:
        platform = SlabRunnerPlatform.from_env(identity.repository, identity.run_id)

    executor: TargetExecutor
    if dry_run:
        executor = DryRunTargetExecutor()
    else:
        executor = CommandTargetExecutor(
            cigate_ctx.repo_root,
            command_template=cigate_ctx.config["executor"]["command_template"],
            command_executor=cigate_ctx.command_executor,
        )

    token = CancellationToken()
    run = PipelineRun(
        definition,
        identity,
        platform=platform,
        executor=executor,
        store=FileConcurrencyStore(state_dir or cigate_ctx.state_dir),
        sink=sink_from_spec(definition.notify),
        change_source=GitChangeSource(
            cigate_ctx.repo_root,
            cigate_ctx.command_executor,
        ),
        token=token,
    )
    with cancel_on_signals(token):
        report = run.execute(trigger, base=resolve_base(base, trigger), head=head)

    if output_format == OutputFormat.JSON.value:
        output.result(to_json(report.to_dict()))
    elif output_format == OutputFormat.GITHUB.value:
        write_github_output(report_output_lines(report), output, github_output)
    else:
        render_report(output, report)

    ctx.exit(OUTCOME_EXIT_CODES[report.outcome])
