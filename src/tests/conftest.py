"""Root pytest configuration and shared fixtures for the cigate test suite."""

import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from tests._conftest.environment import (  # noqa: E402
    configure_test_logging,
    isolate_environment,
)

configure_test_logging()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path_factory):
    """Keep tests away from the real home directory and GitHub variables."""
    isolate_environment(monkeypatch, tmp_path_factory.mktemp("home"))


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """An empty directory standing in for a repository root."""
    root = tmp_path / "repo"
    root.mkdir()
    return root
