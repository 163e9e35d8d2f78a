"""Tests for the top-level CLI group."""

import logging
from pathlib import Path

import pytest

from cigate_cli.cli import Context, _effective_log_level, cli


class TestEffectiveLogLevel:
    """Tests for _effective_log_level function."""

    @pytest.mark.parametrize(
        ("verbose", "verbose_debug", "log_level", "expected"),
        [
            (False, False, "ERROR", "ERROR"),
            (True, True, None, "TRACE"),
            (True, False, None, "DEBUG"),
            (False, False, None, None),
        ],
    )
    def test_flags(self, verbose, verbose_debug, log_level, expected):
        """Test explicit level beats -vvv, which beats -v."""
        assert _effective_log_level(verbose, verbose_debug, log_level) == expected

    def test_env_fallback(self, monkeypatch):
        """Test CIGATE_LOG_LEVEL applies without flags."""
        monkeypatch.setenv("CIGATE_LOG_LEVEL", "WARNING")

        assert _effective_log_level(False, False, None) == "WARNING"


class TestCliGroup:
    """Tests for the cli group."""

    def test_help_lists_commands(self, cli_runner):
        """Test every subcommand is registered."""
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in ("run", "plan", "runner", "config"):
            assert name in result.output

    def test_verbose_sets_debug(self, cli_runner, cli_context):
        """Test -v configures package loggers at DEBUG."""
        result = cli_runner.invoke(cli, ["-v", "config", "show"], obj=cli_context)

        assert result.exit_code == 0
        assert logging.getLogger("cigate").level == logging.DEBUG
        assert cli_context.verbose


class TestContext:
    """Tests for the CLI Context."""

    def test_state_dir_override(self, monkeypatch, repo_root: Path, tmp_path: Path):
        """Test CIGATE_STATE_DIR overrides the configured state directory."""
        monkeypatch.setenv("CIGATE_STATE_DIR", str(tmp_path / "custom"))

        assert Context(repo_root=repo_root).state_dir == tmp_path / "custom"

    def test_state_dir_default(self, repo_root: Path):
        """Test the state directory defaults to ~/.cigate/state."""
        assert Context(repo_root=repo_root).state_dir == (
            Path.home() / ".cigate" / "state"
        )
