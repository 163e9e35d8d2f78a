"""Concurrency groups: deduplication and cancellation of overlapping runs."""

from cigate.concurrency.deduplicator import ConcurrencyDeduplicator, RunLease
from cigate.concurrency.store import (
    ConcurrencyStore,
    FileConcurrencyStore,
    InMemoryConcurrencyStore,
)
from cigate.concurrency.token import CancellationToken

__all__ = [
    "CancellationToken",
    "ConcurrencyDeduplicator",
    "ConcurrencyStore",
    "FileConcurrencyStore",
    "InMemoryConcurrencyStore",
    "RunLease",
]
