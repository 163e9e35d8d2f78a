"""Turn termination signals into run cancellation.

A runner service stops a job with SIGTERM and a user at a terminal presses
Ctrl+C. Either way the run must still tear its instance down, so the first signal
cancels the run's token and lets the run unwind; a second one interrupts at once.
"""

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from cigate.concurrency import CancellationToken
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def cancel_on_signals(
    token: CancellationToken,
    signals: tuple[signal.Signals, ...] = DEFAULT_SIGNALS,
) -> Iterator[CancellationToken]:
    """Cancel ``token`` when one of ``signals`` arrives inside the block.

    Previous handlers are restored on exit. Handlers can only be installed from
    the main thread; elsewhere the block runs without them.

    Parameters
    ----------
    token : CancellationToken
        The run-wide token
    signals : tuple[signal.Signals, ...]
        Signals to handle

    Yields
    ------
    CancellationToken
        ``token``
    """
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread, signal handlers not installed")
        yield token
        return

    def handler(signum, frame=None):  # noqa: ARG001
        name = signal.Signals(signum).name
        if token.cancelled:
            logger.warning("Received %s again, interrupting", name)
            raise KeyboardInterrupt
        logger.warning("Received %s, cancelling run and tearing down", name)
        token.cancel(f"received {name}")

    previous = {sig: signal.getsignal(sig) for sig in signals}
    for sig in signals:
        signal.signal(sig, handler)
    try:
        yield token
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)
