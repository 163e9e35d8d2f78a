"""Fixtures for end-to-end pipeline run tests."""

from unittest.mock import Mock

import pytest

from cigate.concurrency import InMemoryConcurrencyStore
from cigate.pipeline import PipelineRun
from tests._helpers.builders import make_definition, make_identity
from tests._helpers.fakes import FakeRunnerPlatform, FakeTargetExecutor, RecordingSink


@pytest.fixture
def platform() -> FakeRunnerPlatform:
    return FakeRunnerPlatform()


@pytest.fixture
def executor() -> FakeTargetExecutor:
    return FakeTargetExecutor()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def store() -> InMemoryConcurrencyStore:
    return InMemoryConcurrencyStore()


@pytest.fixture
def change_source() -> Mock:
    """Change source reporting no changed paths unless a test overrides it."""
    source = Mock()
    source.changed_paths.return_value = []
    return source


@pytest.fixture
def make_run(platform, executor, sink, store, change_source):
    """Factory building a PipelineRun over the shared fakes.

    Returns
    -------
    Callable[..., PipelineRun]
        Accepts ``definition`` and ``identity`` overrides
    """

    def _make(definition=None, identity=None) -> PipelineRun:
        return PipelineRun(
            definition or make_definition(),
            identity or make_identity(),
            platform=platform,
            executor=executor,
            store=store,
            sink=sink,
            change_source=change_source,
        )

    return _make
