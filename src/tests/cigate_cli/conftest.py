"""Fixtures for CLI test suite."""

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from cigate_cli.cli import Context
from tests._conftest.environment import configure_test_logging

PIPELINE = {
    "name": "CPU tests",
    "runner": {"profile": "cpu-big", "provision_timeout": 5, "poll_interval": 0},
    "components": {
        "dependencies": ["Cargo.toml"],
        "boolean": ["tfhe/src/boolean/**"],
        "integer": ["tfhe/src/integer/**"],
    },
    "stages": [
        {"name": "boolean", "target": "test_boolean", "components": ["boolean"]},
        {"name": "integer", "target": "test_integer", "components": ["integer"]},
        {"name": "safe", "target": "test_safe_deserialization", "always": True},
    ],
}


@pytest.fixture(autouse=True)
def restore_test_logging():
    """Undo the CLI's logger configuration after each invocation."""
    yield
    configure_test_logging()


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def cli_context(repo_root: Path) -> Context:
    """CLI context rooted at an empty temporary repository."""
    return Context(repo_root=repo_root)


@pytest.fixture
def pipeline_file(tmp_path: Path) -> Path:
    """A small valid pipeline definition on disk."""
    path = tmp_path / "cpu.yaml"
    path.write_text(yaml.safe_dump(PIPELINE, sort_keys=False))
    return path


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "state"
