"""Fixtures for runner lifecycle tests."""

import pytest

from cigate.models import RunnerSpec
from cigate.runners.slab import SlabRunnerPlatform
from tests._helpers.fakes import FakeRunnerPlatform


@pytest.fixture
def spec() -> RunnerSpec:
    """Runner spec with instant polling and a short deadline."""
    return RunnerSpec(
        profile="cpu-big",
        backend="aws",
        provision_timeout=0.05,
        poll_interval=0.0,
    )


@pytest.fixture
def platform() -> FakeRunnerPlatform:
    return FakeRunnerPlatform()


@pytest.fixture
def slab() -> SlabRunnerPlatform:
    """Slab client with fixed credentials."""
    return SlabRunnerPlatform(
        base_url="https://slab.example.com/",
        token="action-token",
        job_secret="s3cret",
        repository="zama-ai/tfhe-rs",
        run_id="42",
    )
