"""Shared "latest run" pointer per concurrency group.

Each group holds at most one in-flight run id plus the runs that were superseded
and asked to cancel but have not released yet. :class:`InMemoryConcurrencyStore`
serves a single process; :class:`FileConcurrencyStore` keeps the same state in a
JSON file guarded by an exclusive ``flock`` so separate CLI processes on one host
agree on it.

Claims and cancel requests carry the time their run claimed the group. With
``stale_after`` set, entries older than that belong to runs that died without
releasing (killed, lost host) and are dropped.
"""

import fcntl
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from cigate_common.io import (
    FileOperationError,
    ensure_dir,
    safe_read_json,
    safe_write_json,
)
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

STATE_FILE = "concurrency.json"


class ConcurrencyStore(ABC):
    """Storage for concurrency group ownership."""

    @abstractmethod
    def claim(
        self,
        group: str,
        run_id: str,
        exclusive: bool = False,
        stale_after: float | None = None,
    ) -> tuple[bool, str | None]:
        """Make ``run_id`` the group's in-flight run.

        A non-exclusive claim supersedes the in-flight run, which is asked to
        cancel in the same step.

        Parameters
        ----------
        group : str
            Concurrency group key
        run_id : str
            Claiming run
        exclusive : bool
            Only claim when no other run is in flight
        stale_after : float | None
            Age in seconds past which an earlier claim is abandoned

        Returns
        -------
        tuple[bool, str | None]
            Whether the claim succeeded, and the run that was in flight before
        """

    @abstractmethod
    def is_cancel_requested(self, group: str, run_id: str) -> bool:
        """Check whether ``run_id`` was asked to stop."""

    @abstractmethod
    def is_live(
        self,
        group: str,
        run_id: str,
        stale_after: float | None = None,
    ) -> bool:
        """Whether ``run_id`` holds the group or has yet to release after a cancel."""

    @abstractmethod
    def in_flight(self, group: str) -> str | None:
        """Get the group's in-flight run id."""

    @abstractmethod
    def release(self, group: str, run_id: str) -> None:
        """Drop ``run_id``'s claim and any cancel request addressed to it."""


def _entry(groups: dict[str, Any], group: str) -> dict[str, Any]:
    entry = groups.setdefault(group, {"run_id": None, "cancelled": {}})
    cancelled = entry.get("cancelled")
    if not isinstance(cancelled, dict):
        entry["cancelled"] = {r: None for r in cancelled or []}
    return entry


def _prune(
    entry: dict[str, Any],
    group: str,
    stale_after: float | None,
    now: float,
) -> None:
    if stale_after is None:
        return
    claimed_at = entry.get("claimed_at")
    if entry["run_id"] is not None and claimed_at is not None:
        if now - claimed_at > stale_after:
            logger.warning(
                "Dropping stale claim of run %s on %s (%.0fs old)",
                entry["run_id"],
                group,
                now - claimed_at,
            )
            entry["run_id"] = None
            entry.pop("claimed_at", None)
    for run_id, since in list(entry["cancelled"].items()):
        if since is not None and now - since > stale_after:
            logger.warning("Forgetting stale run %s on %s", run_id, group)
            del entry["cancelled"][run_id]


def _claim(
    groups: dict[str, Any],
    group: str,
    run_id: str,
    exclusive: bool,
    stale_after: float | None,
) -> tuple[bool, str | None]:
    now = time.time()
    entry = _entry(groups, group)
    _prune(entry, group, stale_after, now)
    previous = entry["run_id"]
    if previous == run_id:
        return True, None
    if exclusive and previous is not None:
        return False, previous
    if previous is not None:
        entry["cancelled"][previous] = entry.get("claimed_at")
    entry["run_id"] = run_id
    entry["claimed_at"] = now
    return True, previous


def _is_live(
    groups: dict[str, Any],
    group: str,
    run_id: str,
    stale_after: float | None,
) -> bool:
    if group not in groups:
        return False
    entry = _entry(groups, group)
    _prune(entry, group, stale_after, time.time())
    return entry["run_id"] == run_id or run_id in entry["cancelled"]


def _is_cancel_requested(groups: dict[str, Any], group: str, run_id: str) -> bool:
    return run_id in (groups.get(group) or {}).get("cancelled", ())


def _release(groups: dict[str, Any], group: str, run_id: str) -> None:
    if group not in groups:
        return
    entry = _entry(groups, group)
    if entry["run_id"] == run_id:
        entry["run_id"] = None
        entry.pop("claimed_at", None)
    entry["cancelled"].pop(run_id, None)
    if entry["run_id"] is None and not entry["cancelled"]:
        del groups[group]


class InMemoryConcurrencyStore(ConcurrencyStore):
    """Thread-safe store for runs within one process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._groups: dict[str, Any] = {}

    def claim(self, group, run_id, exclusive=False, stale_after=None):
        with self._lock:
            return _claim(self._groups, group, run_id, exclusive, stale_after)

    def is_cancel_requested(self, group, run_id):
        with self._lock:
            return _is_cancel_requested(self._groups, group, run_id)

    def is_live(self, group, run_id, stale_after=None):
        with self._lock:
            return _is_live(self._groups, group, run_id, stale_after)

    def in_flight(self, group):
        with self._lock:
            return self._groups.get(group, {}).get("run_id")

    def release(self, group, run_id):
        with self._lock:
            _release(self._groups, group, run_id)


class FileConcurrencyStore(ConcurrencyStore):
    """Store backed by a JSON file under the cigate state directory.

    Parameters
    ----------
    state_dir : Path
        Directory holding ``concurrency.json`` and its lock file
    """

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = ensure_dir(Path(state_dir))
        self.state_file = self.state_dir / STATE_FILE
        self.lock_file = self.state_dir / f"{STATE_FILE}.lock"
        self._lock = threading.Lock()

    @contextmanager
    def _locked(self) -> Iterator[dict[str, Any]]:
        """Hold the cross-process lock and yield the mutable group table."""
        with self._lock, self.lock_file.open("a+") as lock_fd:
            fcntl.flock(lock_fd.fileno(), fcntl.LOCK_EX)
            try:
                groups = self._read()
                before = repr(groups)
                yield groups
                if repr(groups) != before:
                    safe_write_json(self.state_file, {"groups": groups})
            finally:
                fcntl.flock(lock_fd.fileno(), fcntl.LOCK_UN)

    def _read(self) -> dict[str, Any]:
        if not self.state_file.exists():
            return {}
        try:
            groups = safe_read_json(self.state_file).get("groups", {})
        except FileOperationError as e:
            logger.warning("Ignoring unreadable concurrency state: %s", e)
            return {}
        return groups if isinstance(groups, dict) else {}

    def claim(self, group, run_id, exclusive=False, stale_after=None):
        with self._locked() as groups:
            return _claim(groups, group, run_id, exclusive, stale_after)

    def is_cancel_requested(self, group, run_id):
        with self._locked() as groups:
            return _is_cancel_requested(groups, group, run_id)

    def is_live(self, group, run_id, stale_after=None):
        with self._locked() as groups:
            return _is_live(groups, group, run_id, stale_after)

    def in_flight(self, group):
        with self._locked() as groups:
            return groups.get(group, {}).get("run_id")

    def release(self, group, run_id):
        with self._locked() as groups:
            _release(groups, group, run_id)
