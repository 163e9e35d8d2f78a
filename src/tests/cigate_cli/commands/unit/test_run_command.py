"""Tests for the run command."""

import json
import signal
from pathlib import Path
from unittest.mock import Mock, patch

from cigate.concurrency import FileConcurrencyStore
from cigate_cli.cli import cli
from tests._helpers.fakes import FakeTargetExecutor


def run_args(pipeline_file: Path, state_dir: Path, *extra: str) -> list[str]:
    return [
        "run",
        str(pipeline_file),
        "--ref",
        "refs/heads/main",
        "--run-id",
        "77",
        "--state-dir",
        str(state_dir),
        *extra,
    ]


class TestRunCommand:
    """Tests for 'cigate run'."""

    def test_dry_run_json(self, cli_runner, cli_context, pipeline_file, state_dir):
        """Test a dry run reports every stage and succeeds."""
        result = cli_runner.invoke(
            cli,
            run_args(pipeline_file, state_dir, "--dry-run", "--format", "json"),
            obj=cli_context,
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["run_id"] == "77"
        assert data["outcome"] == "success"
        assert [s["status"] for s in data["stages"]] == ["success"] * 3
        assert data["instance"]["state"] == "stopped"

    def test_dry_run_text(self, cli_runner, cli_context, pipeline_file, state_dir):
        """Test the text report names the run and its outcome."""
        result = cli_runner.invoke(
            cli,
            run_args(pipeline_file, state_dir, "--dry-run"),
            obj=cli_context,
        )

        assert result.exit_code == 0
        assert "Run 77" in result.output
        assert "Run succeeded" in result.output

    def test_stage_failure_exits_one(
        self,
        cli_runner,
        cli_context,
        pipeline_file,
        state_dir,
    ):
        """Test a failing stage exits 1 with a failure report."""
        with patch(
            "cigate_cli.commands.run.CommandTargetExecutor",
            return_value=FakeTargetExecutor(failing={"test_integer"}),
        ):
            result = cli_runner.invoke(
                cli,
                run_args(pipeline_file, state_dir, "--local", "--format", "json"),
                obj=cli_context,
            )

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["outcome"] == "failure"
        assert data["notifications"][0]["point"] == "stages"

    def test_skipped_exits_zero(
        self,
        cli_runner,
        cli_context,
        pipeline_file,
        state_dir,
        tmp_path,
    ):
        """Test a pull request without relevant changes skips and exits 0."""
        cli_context._command_executor = Mock()
        cli_context._command_executor.execute.return_value = Mock(
            stdout="README.md\n",
            returncode=0,
        )
        output_file = tmp_path / "out"

        result = cli_runner.invoke(
            cli,
            [
                *run_args(pipeline_file, state_dir, "--dry-run"),
                "--event",
                "pull_request",
                "--base",
                "origin/main",
                "--format",
                "github",
                "--github-output",
                str(output_file),
            ],
            obj=cli_context,
        )

        assert result.exit_code == 0
        lines = output_file.read_text().splitlines()
        assert "outcome=skipped" in lines
        assert "boolean_status=skipped" in lines
        assert not any(line.startswith("runner_label=") for line in lines)

    def test_cancelled_exits_130(
        self,
        cli_runner,
        cli_context,
        pipeline_file,
        state_dir,
    ):
        """Test a run refused by a protected in-flight run exits 130."""
        pipeline_file.write_text(
            pipeline_file.read_text()
            + "concurrency:\n"
            + "  policy: protect-default-branch\n"
            + "  on_protected_conflict: reject\n",
        )
        FileConcurrencyStore(state_dir).claim("CPU tests_refs/heads/main", "76")

        result = cli_runner.invoke(
            cli,
            run_args(pipeline_file, state_dir, "--dry-run", "--format", "json"),
            obj=cli_context,
        )

        assert result.exit_code == 130
        assert json.loads(result.output)["outcome"] == "cancelled"

    def test_sigterm_cancels_run(
        self,
        cli_runner,
        cli_context,
        pipeline_file,
        state_dir,
    ):
        """Test SIGTERM mid-run cancels the rest and still stops the runner."""
        executor = FakeTargetExecutor(
            on_run=lambda _stage: signal.raise_signal(signal.SIGTERM),
        )
        with patch(
            "cigate_cli.commands.run.CommandTargetExecutor",
            return_value=executor,
        ):
            result = cli_runner.invoke(
                cli,
                run_args(pipeline_file, state_dir, "--local", "--format", "json"),
                obj=cli_context,
            )

        assert result.exit_code == 130, result.output
        data = json.loads(result.output)
        assert data["outcome"] == "cancelled"
        assert executor.ran == ["test_boolean"]
        assert data["instance"]["state"] == "stopped"
        store = FileConcurrencyStore(state_dir)
        assert store.in_flight("CPU tests_refs/heads/main") is None

    def test_missing_slab_config(
        self,
        cli_runner,
        cli_context,
        pipeline_file,
        state_dir,
    ):
        """Test a real run without Slab credentials fails with a clear error."""
        result = cli_runner.invoke(
            cli,
            run_args(pipeline_file, state_dir),
            obj=cli_context,
        )

        assert result.exit_code == 1
        assert "SLAB_BASE_URL" in result.output
