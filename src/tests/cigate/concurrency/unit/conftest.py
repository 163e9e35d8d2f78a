"""Fixtures for concurrency tests."""

from pathlib import Path

import pytest

from cigate.concurrency import FileConcurrencyStore, InMemoryConcurrencyStore


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path: Path):
    """Each store implementation, so both honor the same contract."""
    if request.param == "memory":
        return InMemoryConcurrencyStore()
    return FileConcurrencyStore(tmp_path / "state")


class FakeClock:
    """Wall clock for the store module that only moves when told to."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def time(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    """Replace the clock the stores stamp claims with."""
    fake = FakeClock()
    monkeypatch.setattr("cigate.concurrency.store.time", fake)
    return fake
