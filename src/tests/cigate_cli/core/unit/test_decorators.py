"""Tests for CLI decorators."""

import click
import pytest
from click.testing import CliRunner

from cigate.common.errors import (
    CommandError,
    PipelineConfigError,
    ProvisioningError,
)
from cigate_cli.core.decorators import handle_exceptions


def command_raising(error: BaseException) -> click.Command:
    """Build a command that raises ``error`` under handle_exceptions."""

    @click.command()
    @handle_exceptions
    def broken() -> None:
        raise error

    return broken


class TestHandleExceptions:
    """Tests for handle_exceptions decorator."""

    @pytest.mark.parametrize(
        ("error", "exit_code"),
        [
            (PipelineConfigError("bad stage"), 3),
            (CommandError("timed out", 124), 124),
            (CommandError("failed", 2), 1),
            (ProvisioningError("no capacity"), 1),
            (FileNotFoundError("x.yaml"), 2),
            (PermissionError("state dir"), 4),
            (RuntimeError("boom"), 1),
            (KeyboardInterrupt(), 130),
        ],
    )
    def test_exit_codes(self, error, exit_code):
        """Test each exception maps to its exit code."""
        result = CliRunner().invoke(command_raising(error))

        assert result.exit_code == exit_code

    def test_unexpected_error_hint(self):
        """Test unexpected errors suggest re-running with -vvv."""
        result = CliRunner().invoke(command_raising(RuntimeError("boom")))

        assert "Unexpected error: boom" in result.output
        assert "-vvv" in result.output

    def test_click_exceptions_pass_through(self):
        """Test usage errors keep click's own handling."""
        result = CliRunner().invoke(command_raising(click.BadParameter("nope")))

        assert result.exit_code == 2
        assert "nope" in result.output

    def test_success_passes_through(self):
        """Test a command that does not raise exits 0."""

        @click.command()
        @handle_exceptions
        def ok() -> None:
            click.echo("done")

        result = CliRunner().invoke(ok)

        assert result.exit_code == 0
        assert result.output == "done\n"
