"""Console output for local terminals and GitHub Actions logs."""

from __future__ import annotations

import click

from cigate_cli.core.constants import EnvVars, Icons
from cigate_cli.core.output.verbosity import Verbosity
from cigate_common.env import read_bool

RULE_WIDTH = 60


def escape_workflow_data(message: str) -> str:
    """Escape a message for a ``::error::``/``::warning::`` workflow command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class OutputStrategy:
    """Write user-facing CLI output.

    Results, warnings and errors always print. ``info`` and ``detail`` need
    ``-v``; ``debug`` needs ``-vvv``.

    With ``annotate`` set (the default under GitHub Actions) errors and
    warnings are emitted as workflow commands, so they surface as annotations
    on the run summary instead of only in the raw log.

    Parameters
    ----------
    verbosity : Verbosity
        Console detail level
    annotate : bool
        Emit GitHub workflow commands for errors and warnings
    """

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.NORMAL,
        annotate: bool = False,
    ) -> None:
        self.verbosity = verbosity
        self.annotate = annotate
        self._blank = False

    def _write(self, text: str, err: bool = False, **style) -> None:
        if not text.strip():
            # one blank line at most between blocks
            if not self._blank:
                click.echo("", err=err)
            self._blank = True
            return
        click.echo(click.style(text, **style) if style else text, err=err)
        self._blank = False

    def _annotation(self, kind: str, message: str, err: bool) -> None:
        self._write(f"::{kind}::{escape_workflow_data(message)}", err=err)

    def error(self, message: str, to_stderr: bool = True) -> None:
        if self.annotate:
            self._annotation("error", message, to_stderr)
        else:
            self._write(f"{Icons.ERROR} {message}", err=to_stderr, fg="red")

    def warning(self, message: str) -> None:
        if self.annotate:
            self._annotation("warning", message, False)
        else:
            self._write(message, fg="yellow")

    def success(self, message: str) -> None:
        self._write(message, fg="green")

    def result(self, message: str) -> None:
        self._write(message)

    def plain(self, message: str, err: bool = False) -> None:
        self._write(message, err=err)

    def section(self, title: str, icon: str | None = None) -> None:
        """Print a ruled heading for a report block."""
        heading = f"{icon} {title}" if icon else title
        self._write("=" * RULE_WIDTH)
        self._write(heading, bold=True)
        self._write("=" * RULE_WIDTH)

    def subsection(self, title: str, icon: str | None = None) -> None:
        self._write("")
        self._write(f"{icon} {title}:" if icon else f"{title}:")

    def info(self, message: str) -> None:
        if self.verbosity >= Verbosity.VERBOSE:
            self._write(message)

    def detail(self, message: str) -> None:
        if self.verbosity >= Verbosity.VERBOSE:
            self._write(f"  {message}", dim=True)

    def debug(self, message: str) -> None:
        if self.verbosity < Verbosity.DEBUG:
            return
        if self.annotate:
            self._write(f"::debug::{escape_workflow_data(message)}")
        else:
            self._write(f"[DEBUG] {message}", fg="cyan")

    @classmethod
    def from_environment(
        cls,
        verbose: bool = False,
        verbose_debug: bool = False,
    ) -> OutputStrategy:
        """Build an output for the current process, reading the Actions variables."""
        return cls(
            verbosity=Verbosity.from_flags(
                verbose,
                verbose_debug,
                runner_debug=read_bool(EnvVars.RUNNER_DEBUG),
            ),
            annotate=read_bool(EnvVars.GITHUB_ACTIONS),
        )

    @classmethod
    def from_click_context(cls, ctx: click.Context) -> OutputStrategy:
        """Build an output from whatever flags the click context carries."""
        obj = ctx.obj
        return cls.from_environment(
            verbose=bool(getattr(obj, "verbose", False)),
            verbose_debug=bool(getattr(obj, "verbose_debug", False)),
        )
