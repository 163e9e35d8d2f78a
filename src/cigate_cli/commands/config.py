"""Configuration commands.

Validates pipeline definitions and shows the effective project configuration.
"""

import json
from pathlib import Path

import click
import yaml

from cigate.config import load_pipeline
from cigate_cli.core.constants import Icons
from cigate_cli.core.decorators import handle_exceptions
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)


@click.group(name="config")
@click.pass_context
def group(ctx: click.Context) -> None:
    """Validate pipelines and inspect configuration."""


@group.command()
@click.argument(
    "pipelines",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.pass_context
@handle_exceptions
def validate(ctx: click.Context, pipelines: tuple[Path, ...]) -> None:
    """Check that each pipeline definition loads and is consistent."""
    cigate_ctx = ctx.obj
    output = cigate_ctx.output
    output.section("Validating pipelines", Icons.CONFIG)

    for path in pipelines:
        definition = load_pipeline(path, cigate_ctx.config)
        logger.debug("Validated %s as %s", path, definition.name)
        output.success(
            f"{Icons.SUCCESS} {path}: {definition.name} "
            f"({len(definition.components)} components, "
            f"{len(definition.stages)} stages)",
        )
        for stage in definition.stages:
            output.detail(
                f"{stage.name}: target={stage.target} "
                f"components={','.join(stage.components) or '-'} "
                f"requires={','.join(stage.requires) or '-'}",
            )


@group.command()
@click.option(
    "--format",
    "-f",
    "format_type",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    help="Output format",
)
@click.pass_context
@handle_exceptions
def show(ctx: click.Context, format_type: str) -> None:
    """Show the merged defaults, user and project configuration."""
    cigate_ctx = ctx.obj
    output = cigate_ctx.output
    if format_type == "json":
        output.result(json.dumps(cigate_ctx.config, indent=2))
    else:
        output.result(yaml.safe_dump(cigate_ctx.config, sort_keys=False).rstrip())
