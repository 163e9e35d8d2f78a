"""Cooperative cancellation token."""

import threading
from collections.abc import Callable

from cigate.common.errors import RunCancelledError

SUPERSEDED = "superseded by a newer run"


class CancellationToken:
    """Signal that a run should stop at its next suspension point.

    The token is set locally via :meth:`cancel`, when ``parent`` is cancelled
    (for example by a signal handler), or when ``probe`` reports that a newer
    run asked for this one to stop.

    Parameters
    ----------
    probe : Callable[[], bool] | None
        Called on each check; returning True cancels the token
    parent : CancellationToken | None
        Token whose cancellation propagates to this one
    """

    def __init__(
        self,
        probe: Callable[[], bool] | None = None,
        parent: "CancellationToken | None" = None,
    ) -> None:
        self._event = threading.Event()
        self._probe = probe
        self._parent = parent
        self.reason = ""

    def cancel(self, reason: str = "cancelled") -> None:
        """Request cancellation."""
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        if not self._event.is_set():
            if self._parent is not None and self._parent.cancelled:
                self.cancel(self._parent.reason)
            elif self._probe is not None and self._probe():
                self.cancel(SUPERSEDED)
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise :class:`RunCancelledError` if cancellation was requested."""
        if self.cancelled:
            raise RunCancelledError(self.reason)

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds, waking early on local cancellation.

        Returns
        -------
        bool
            True if the token is cancelled after waiting
        """
        if timeout > 0:
            self._event.wait(timeout)
        return self.cancelled
