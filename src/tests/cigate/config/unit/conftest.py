"""Fixtures for pipeline loader tests."""

from pathlib import Path

import pytest

PIPELINES_DIR = Path(__file__).resolve().parents[5] / "pipelines"


@pytest.fixture
def minimal() -> dict:
    """Smallest valid pipeline mapping."""
    return {
        "name": "CPU tests",
        "runner": {"profile": "cpu-big"},
        "components": {
            "dependencies": ["Cargo.toml"],
            "boolean": ["tfhe/src/boolean/**"],
        },
        "stages": [
            {"name": "boolean", "target": "test_boolean", "components": "boolean"},
        ],
    }


@pytest.fixture
def pipelines_dir() -> Path:
    """Directory holding the bundled example pipelines."""
    return PIPELINES_DIR
