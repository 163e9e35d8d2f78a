"""Fixtures for change detection tests."""

from unittest.mock import Mock

import pytest

from cigate.changes import ChangeSetEvaluator
from tests._helpers.builders import COMPONENTS


@pytest.fixture
def evaluator() -> ChangeSetEvaluator:
    """Evaluator over the fast-tests style components."""
    return ChangeSetEvaluator(COMPONENTS)


@pytest.fixture
def mock_executor() -> Mock:
    """Command executor whose ``execute`` returns empty output."""
    executor = Mock()
    executor.execute.return_value = Mock(stdout="", returncode=0)
    return executor
