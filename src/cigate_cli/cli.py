"""Main CLI entry point for cigate.

This module provides the main Click command group and the shared context object
handed to every subcommand.
"""

from pathlib import Path
from typing import Any

import click

from cigate.common.process import CommandExecutor
from cigate_cli.commands import config, plan, run, runner
from cigate_cli.core.constants import ALL_LOG_LEVELS, EnvVars, LogLevel
from cigate_cli.core.output import OutputStrategy
from cigate_common.config import load_merged_config
from cigate_common.env import read_str
from cigate_common.path import detect_repo_root
from cigate_logging import configure_logger, get_cli_logger

logger = get_cli_logger(__name__)

LOGGING_PACKAGES = ("cigate", "cigate_cli", "cigate_common")


def _effective_log_level(
    verbose: bool,
    verbose_debug: bool,
    log_level: str | None,
) -> str | None:
    """Pick the log level implied by the CLI flags.

    Returns
    -------
    str | None
        The level to configure, or None to leave logging at its defaults
    """
    if log_level:
        return log_level
    if verbose_debug:
        return LogLevel.TRACE.value
    if verbose:
        return LogLevel.DEBUG.value
    return read_str(EnvVars.LOG_LEVEL)


def _configure_package_loggers(
    effective_level: str | None,
    verbose_debug: bool,
) -> None:
    """Configure the package loggers, mirroring to stderr with -vvv."""
    for pkg_name in LOGGING_PACKAGES:
        configure_logger(
            pkg_name,
            profile="cli",
            level=effective_level,
            to_console=True if verbose_debug else None,
        )


class Context:
    """CLI context object for sharing state between commands."""

    def __init__(self, repo_root: Path | None = None) -> None:
        """Initialize CLI context.

        Parameters
        ----------
        repo_root : Path, optional
            Repository root directory. If not provided, will be auto-detected.
        """
        self.verbose: bool = False
        self.verbose_debug: bool = False
        self.repo_root: Path = repo_root or detect_repo_root()
        self._config: dict[str, Any] | None = None
        self._command_executor: CommandExecutor | None = None
        self._output: OutputStrategy | None = None

    @property
    def config(self) -> dict[str, Any]:
        """Merged defaults, user and project configuration."""
        if self._config is None:
            self._config = load_merged_config(self.repo_root)
        return self._config

    @property
    def state_dir(self) -> Path:
        """Directory for cross-run state such as concurrency groups."""
        override = read_str(EnvVars.STATE_DIR)
        return Path(override or self.config["defaults"]["state_dir"]).expanduser()

    @property
    def command_executor(self) -> CommandExecutor:
        """Get command executor singleton instance."""
        if self._command_executor is None:
            self._command_executor = CommandExecutor()
        return self._command_executor

    @property
    def output(self) -> OutputStrategy:
        """Console output shared by every subcommand of this invocation."""
        if self._output is None:
            self._output = OutputStrategy.from_environment(
                self.verbose,
                self.verbose_debug,
            )
        return self._output


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.version_option(package_name="cigate", prog_name="cigate")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show per-stage details and changed paths",
)
@click.option(
    "--verbose-debug",
    "-vvv",
    is_flag=True,
    help="Show lifecycle traces and mirror logs to stderr",
)
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in ALL_LOG_LEVELS]),
    help="Set logging level",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    verbose_debug: bool,
    log_level: str | None,
) -> None:
    """cigate - change-gated CI pipelines on ephemeral runners.

    \b
    Decides which test stages a change needs, provisions a runner for them,
    keeps one live run per branch and reports failures.
    """  # noqa: W605
    ctx.ensure_object(Context)
    cigate_ctx: Context = ctx.obj
    cigate_ctx.verbose = verbose
    cigate_ctx.verbose_debug = verbose_debug

    _configure_package_loggers(
        _effective_log_level(verbose, verbose_debug, log_level),
        verbose_debug,
    )
    logger.debug("cigate CLI starting with repo root: %s", cigate_ctx.repo_root)


cli.add_command(run.command)
cli.add_command(plan.command)
cli.add_command(runner.group)
cli.add_command(config.group)


def main() -> None:
    """Serve as the main entry point for the CLI."""
    cli(prog_name="cigate")


if __name__ == "__main__":
    main()
