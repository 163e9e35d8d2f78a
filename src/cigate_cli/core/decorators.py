"""Custom Click decorators for common CLI patterns."""

import functools
import traceback
from collections.abc import Callable
from typing import Any, TypeVar

import click

from cigate.common.errors import CigateError, CommandError, PipelineConfigError
from cigate_cli.core.constants import ExitCode, OutputFormat
from cigate_cli.core.output import OutputStrategy
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _output_for(ctx: click.Context) -> OutputStrategy:
    output = getattr(ctx.obj, "output", None)
    if isinstance(output, OutputStrategy):
        return output
    return OutputStrategy.from_click_context(ctx)


def handle_exceptions(func: F) -> F:
    """Handle exceptions and convert to appropriate exit codes.

    Parameters
    ----------
    func : Callable
        Function to wrap

    Returns
    -------
    Callable
        Wrapped function
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except click.exceptions.Exit:
            raise
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            ctx = click.get_current_context()
            _output_for(ctx).warning("Interrupted")
            ctx.exit(ExitCode.CANCELLED)
        except Exception as e:
            ctx = click.get_current_context()
            output = _output_for(ctx)
            logger.debug("Command failed: %s", e, exc_info=True)

            if isinstance(e, PipelineConfigError):
                output.error(f"Invalid pipeline: {e}")
                ctx.exit(ExitCode.CONFIG_ERROR)
            elif isinstance(e, CommandError) and e.returncode == ExitCode.TIMEOUT:
                output.error(str(e))
                ctx.exit(ExitCode.TIMEOUT)
            elif isinstance(e, CigateError):
                output.error(str(e))
                ctx.exit(ExitCode.GENERAL_ERROR)
            elif isinstance(e, FileNotFoundError):
                output.error(f"File not found: {e}")
                ctx.exit(ExitCode.NOT_FOUND)
            elif isinstance(e, PermissionError):
                output.error(f"Permission denied: {e}")
                ctx.exit(ExitCode.PERMISSION_ERROR)
            else:
                output.error(f"Unexpected error: {e}")
                if getattr(ctx.obj, "verbose_debug", False):
                    output.error("Full traceback:")
                    output.error(traceback.format_exc())
                else:
                    output.plain("Re-run with -vvv for full traceback", err=True)
                ctx.exit(ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore[return-value]


def output_format_option(func: F) -> F:
    """Add the ``--format`` option."""
    return click.option(
        "--format",
        "output_format",
        type=click.Choice([f.value for f in OutputFormat]),
        default=OutputFormat.TEXT.value,
        show_default=True,
        help="Report format (github writes key=value lines to $GITHUB_OUTPUT)",
    )(func)


def trigger_options(func: F) -> F:
    """Add options describing what triggered the run.

    Defaults come from the GitHub Actions environment when present.
    """
    options = [
        click.option(
            "--event",
            envvar="GITHUB_EVENT_NAME",
            default="workflow_dispatch",
            show_default=True,
            help="Trigger event (workflow_dispatch, push, pull_request)",
        ),
        click.option(
            "--ref",
            envvar="GITHUB_REF",
            default=None,
            help="Git ref of the run [default: $GITHUB_REF or current branch]",
        ),
        click.option("--base", default=None, help="Base revision for change detection"),
        click.option("--head", default=None, help="Head revision for change detection"),
        click.option("--action", "event_action", default=None, help="PR event action"),
        click.option("--label", default=None, help="Label added by a 'labeled' action"),
    ]
    for option in reversed(options):
        func = option(func)
    return func
