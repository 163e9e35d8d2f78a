"""Tests for console output and verbosity."""

import click
import pytest
from click.testing import CliRunner

from cigate_cli.core.output import OutputStrategy, Verbosity, escape_workflow_data


def _capture(callback):
    @click.command()
    def command():
        callback()

    result = CliRunner().invoke(command, color=False)
    assert result.exit_code == 0, result.output
    return result.output


class TestVerbosity:
    """Tests for Verbosity.from_flags."""

    @pytest.mark.parametrize(
        ("kwargs", "expected"),
        [
            ({}, Verbosity.NORMAL),
            ({"verbose": True}, Verbosity.VERBOSE),
            ({"verbose_debug": True}, Verbosity.DEBUG),
            ({"runner_debug": True}, Verbosity.DEBUG),
            ({"verbose": True, "runner_debug": True}, Verbosity.DEBUG),
        ],
    )
    def test_from_flags(self, kwargs, expected):
        """Test flag combinations map to the expected level."""
        assert Verbosity.from_flags(**kwargs) is expected


class TestOutputStrategy:
    """Tests for OutputStrategy gating and annotations."""

    def test_info_hidden_at_normal(self):
        """Test info and detail only print with -v."""
        output = OutputStrategy()
        text = _capture(lambda: (output.info("hidden"), output.result("shown")))
        assert "hidden" not in text
        assert "shown" in text

    def test_detail_and_debug(self):
        """Test detail prints at VERBOSE and debug needs DEBUG."""
        output = OutputStrategy(Verbosity.VERBOSE)
        text = _capture(lambda: (output.detail("paths"), output.debug("trace")))
        assert "  paths" in text
        assert "trace" not in text

    def test_blank_lines_coalesce(self):
        """Test consecutive blank lines collapse into one."""
        output = OutputStrategy()

        def emit():
            output.result("a")
            output.plain("")
            output.plain("")
            output.result("b")

        assert _capture(emit) == "a\n\nb\n"

    def test_plain_error(self):
        """Test errors carry the error icon outside Actions."""
        output = OutputStrategy()
        text = _capture(lambda: output.error("boom", to_stderr=False))
        assert text.endswith("boom\n")
        assert "::error::" not in text

    def test_annotations(self):
        """Test errors and warnings become workflow commands under Actions."""
        output = OutputStrategy(annotate=True)

        def emit():
            output.error("stage failed\nsee log", to_stderr=False)
            output.warning("100% slow")

        text = _capture(emit)
        assert "::error::stage failed%0Asee log\n" in text
        assert "::warning::100%25 slow\n" in text

    def test_from_environment(self, monkeypatch):
        """Test GITHUB_ACTIONS and RUNNER_DEBUG are honored."""
        monkeypatch.setenv("GITHUB_ACTIONS", "true")
        monkeypatch.setenv("RUNNER_DEBUG", "1")

        output = OutputStrategy.from_environment()

        assert output.annotate is True
        assert output.verbosity is Verbosity.DEBUG

    def test_from_environment_defaults(self):
        """Test a local shell gets plain NORMAL output."""
        output = OutputStrategy.from_environment()
        assert output.annotate is False
        assert output.verbosity is Verbosity.NORMAL


class TestEscapeWorkflowData:
    """Tests for escape_workflow_data."""

    def test_escapes_percent_first(self):
        """Test percent signs are escaped before newlines are encoded."""
        assert escape_workflow_data("50%\r\n") == "50%25%0D%0A"
