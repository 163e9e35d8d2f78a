"""One live run per concurrency group."""

import time
from collections.abc import Callable

from cigate.common.errors import ConcurrencyRejectedError, RunCancelledError
from cigate.concurrency.store import ConcurrencyStore
from cigate.concurrency.token import CancellationToken
from cigate.models import (
    CancellationPolicy,
    ConcurrencySpec,
    ProtectedConflict,
    RunIdentity,
)
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)


class RunLease:
    """Ownership of a concurrency group for the duration of a run.

    Use as a context manager; the claim is released on exit whatever the outcome.

    Attributes
    ----------
    identity : RunIdentity
        The owning run
    token : CancellationToken
        Set when a newer run of the same group asks this one to stop
    superseded : str | None
        Run id that was in flight when this lease was taken
    parent : CancellationToken | None
        Run-wide token the lease token inherits cancellation from
    """

    def __init__(
        self,
        store: ConcurrencyStore,
        identity: RunIdentity,
        superseded: str | None = None,
        parent: CancellationToken | None = None,
    ) -> None:
        self.store = store
        self.identity = identity
        self.superseded = superseded
        self.token = CancellationToken(probe=self._cancel_requested, parent=parent)
        self.released = False

    def _cancel_requested(self) -> bool:
        return self.store.is_cancel_requested(
            self.identity.group_key,
            self.identity.run_id,
        )

    def release(self) -> None:
        """Give up the group. Safe to call more than once."""
        if self.released:
            return
        self.store.release(self.identity.group_key, self.identity.run_id)
        self.released = True
        logger.debug("Released group %s", self.identity.group_key)

    def __enter__(self) -> "RunLease":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class ConcurrencyDeduplicator:
    """Apply a group's cancellation policy when a run starts.

    Under ``always-cancel`` a new run takes the group, asks the in-flight run to
    stop and waits until that run has released before returning, so two runs of
    a group never execute stages at the same time. Under
    ``protect-default-branch`` an in-flight run on a protected branch is never
    cancelled: the new run waits for it (``queue``) or is refused (``reject``).
    Unprotected branches behave as ``always-cancel``.

    Every wait is bounded by ``queue_timeout``.

    Parameters
    ----------
    store : ConcurrencyStore
        Shared group state
    spec : ConcurrencySpec
        Policy, queueing limits and stale claim age
    """

    def __init__(self, store: ConcurrencyStore, spec: ConcurrencySpec) -> None:
        self.store = store
        self.spec = spec

    def is_protected(self, identity: RunIdentity) -> bool:
        """Whether the run's branch is shielded from cancellation."""
        return (
            self.spec.policy is CancellationPolicy.PROTECT_DEFAULT_BRANCH
            and identity.branch in self.spec.protected_branches
        )

    def acquire(
        self,
        identity: RunIdentity,
        token: CancellationToken | None = None,
    ) -> RunLease:
        """Take the group for ``identity``.

        Parameters
        ----------
        identity : RunIdentity
            The run taking the group
        token : CancellationToken | None
            Run-wide token; cancelling it aborts a wait and is inherited by the
            lease's token

        Returns
        -------
        RunLease
            Lease carrying the run's cancellation token

        Raises
        ------
        ConcurrencyRejectedError
            If a protected run holds the group and the run is rejected, or a
            wait times out
        RunCancelledError
            If the run is cancelled or superseded while waiting
        """
        if self.is_protected(identity):
            return self._acquire_protected(identity, token)

        group = identity.group_key
        _, previous = self.store.claim(
            group,
            identity.run_id,
            stale_after=self.spec.stale_after,
        )
        if previous is None:
            logger.debug("Run %s claimed group %s", identity.run_id, group)
        else:
            logger.info(
                "Run %s supersedes run %s in group %s, waiting for it to stop",
                identity.run_id,
                previous,
                group,
            )
            try:
                self._wait(
                    identity,
                    token,
                    lambda: not self.store.is_live(
                        group,
                        previous,
                        stale_after=self.spec.stale_after,
                    ),
                    f"superseded run {previous}",
                )
            except BaseException:
                self.store.release(group, identity.run_id)
                raise
        return RunLease(self.store, identity, superseded=previous, parent=token)

    def _acquire_protected(
        self,
        identity: RunIdentity,
        token: CancellationToken | None,
    ) -> RunLease:
        group = identity.group_key
        holder: str | None = None

        def try_claim() -> bool:
            nonlocal holder
            claimed, holder = self.store.claim(
                group,
                identity.run_id,
                exclusive=True,
                stale_after=self.spec.stale_after,
            )
            return claimed

        if not try_claim():
            if self.spec.on_protected_conflict is ProtectedConflict.REJECT:
                msg = f"Run {holder} is in flight on protected group {group}"
                raise ConcurrencyRejectedError(msg)
            logger.info(
                "Queueing run %s behind run %s in %s",
                identity.run_id,
                holder,
                group,
            )
            self._wait(identity, token, try_claim, f"run {holder}")

        logger.debug("Run %s claimed protected group %s", identity.run_id, group)
        return RunLease(self.store, identity, parent=token)

    def _wait(
        self,
        identity: RunIdentity,
        token: CancellationToken | None,
        done: Callable[[], bool],
        what: str,
    ) -> None:
        group = identity.group_key
        deadline = time.monotonic() + self.spec.queue_timeout
        while not done():
            if token is not None:
                token.raise_if_cancelled()
            if self.store.is_cancel_requested(group, identity.run_id):
                self.store.release(group, identity.run_id)
                msg = f"Run {identity.run_id} was superseded while waiting"
                raise RunCancelledError(msg)
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                msg = (
                    f"Timed out after {self.spec.queue_timeout:.0f}s waiting for "
                    f"{what} in group {group}"
                )
                raise ConcurrencyRejectedError(msg)
            time.sleep(min(self.spec.poll_interval, remaining))
