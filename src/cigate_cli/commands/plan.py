"""Change set and gate preview."""

from pathlib import Path

import click

from cigate.changes import GitChangeSource
from cigate.concurrency import InMemoryConcurrencyStore
from cigate.config import load_pipeline
from cigate.pipeline import PipelineRun
from cigate.runners import LocalRunnerPlatform
from cigate.stages import DryRunTargetExecutor
from cigate_cli.core.constants import OutputFormat
from cigate_cli.core.decorators import (
    handle_exceptions,
    output_format_option,
    trigger_options,
)
from cigate_cli.core.formatting import (
    plan_output_lines,
    render_plan,
    to_json,
    write_github_output,
)
from cigate_cli.core.github import build_identity, resolve_base, trigger_from_options


@click.command(name="plan")
@click.argument(
    "pipeline",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@trigger_options
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
    github_output: str | None,
    output_format: str,
) -> None:
    """Show which components changed and which stages PIPELINE would run.

    Nothing is provisioned and no target runs.
    """
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
    run = PipelineRun(
        definition,
        build_identity(definition.name, trigger.ref),
        platform=LocalRunnerPlatform(),
        executor=DryRunTargetExecutor(),
        store=InMemoryConcurrencyStore(),
        change_source=GitChangeSource(
            cigate_ctx.repo_root,
            cigate_ctx.command_executor,
        ),
    )
    change_set, decision = run.plan(trigger, resolve_base(base, trigger), head)

    if output_format == OutputFormat.JSON.value:
        output.result(
            to_json(
                {
                    "changes": change_set.to_dict(),
                    "gates": decision.gates,
                    "any_changed": decision.any_changed,
                    "approved": decision.approved,
                    "should_start": decision.should_start,
                },
            ),
        )
    elif output_format == OutputFormat.GITHUB.value:
        write_github_output(
            plan_output_lines(change_set, decision),
            output,
            github_output,
        )
    else:
        render_plan(output, change_set, decision)
