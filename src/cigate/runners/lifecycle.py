"""Ephemeral runner lifecycle: provision, claim, guaranteed teardown."""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from cigate.common.errors import (
    CigateError,
    ProvisioningError,
    TeardownError,
)
from cigate.concurrency.token import CancellationToken
from cigate.models import InstanceState, RunnerInstance, RunnerSpec
from cigate.runners.base import RunnerPlatform
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)


class InstanceLifecycleManager:
    """Drive one runner instance through its lifecycle.

    An instance that reached ``REQUESTED`` is always torn down: :meth:`provision`
    releases it itself when readiness fails, and :meth:`lease` releases it after use.
    When :meth:`RunnerPlatform.start` fails there is no handle and nothing to
    release.

    Parameters
    ----------
    platform : RunnerPlatform
        Platform that hosts the runner
    spec : RunnerSpec
        Default profile, backend and provisioning limits
    token : CancellationToken | None
        Checked between readiness polls
    """

    def __init__(
        self,
        platform: RunnerPlatform,
        spec: RunnerSpec,
        token: CancellationToken | None = None,
    ) -> None:
        self.platform = platform
        self.spec = spec
        self.token = token or CancellationToken()
        self.instance: RunnerInstance | None = None
        self.teardown_error: TeardownError | None = None

    def provision(self, spec: RunnerSpec | None = None) -> RunnerInstance:
        """Start a runner and wait until it is ready.

        Parameters
        ----------
        spec : RunnerSpec | None
            Overrides the manager's default spec

        Returns
        -------
        RunnerInstance
            Instance in the ``READY`` state

        Raises
        ------
        ProvisioningError
            If the platform refuses the request or the runner never becomes ready
        RunCancelledError
            If the run is cancelled while waiting

        Whatever interrupts the readiness wait, the started runner is released
        before the exception propagates.
        """
        spec = spec or self.spec
        self.token.raise_if_cancelled()

        logger.info("Requesting %s runner on %s", spec.profile, spec.backend)
        try:
            handle = self.platform.start(spec)
        except ProvisioningError:
            raise
        except Exception as e:
            msg = f"Runner start failed: {e}"
            raise ProvisioningError(msg) from e

        instance = RunnerInstance(
            label=handle,
            profile=spec.profile,
            backend=spec.backend,
        )
        self.instance = instance

        try:
            self._wait_ready(instance, spec)
        except BaseException as e:
            # Interrupts included: the handle exists, so the runner must be stopped.
            logger.warning("Runner %s not usable, releasing it: %r", handle, e)
            instance.transition(InstanceState.FAILED)
            self.release(instance)
            raise

        instance.transition(InstanceState.READY)
        logger.info("Runner %s is ready", handle)
        return instance

    def _wait_ready(self, instance: RunnerInstance, spec: RunnerSpec) -> None:
        deadline = time.monotonic() + spec.provision_timeout
        while True:
            self.token.raise_if_cancelled()
            try:
                if self.platform.is_ready(instance.label):
                    return
            except CigateError:
                raise
            except Exception as e:
                msg = f"Readiness check failed for {instance.label}: {e}"
                raise ProvisioningError(msg) from e

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                msg = (
                    f"Runner {instance.label} not ready after "
                    f"{spec.provision_timeout:.0f}s"
                )
                raise ProvisioningError(msg)
            logger.debug("Runner %s not ready yet", instance.label)
            self.token.wait(min(spec.poll_interval, remaining))

    def claim(self, instance: RunnerInstance) -> RunnerInstance:
        """Mark a ready instance as in use by this run."""
        if instance.state is not InstanceState.READY:
            msg = f"Runner {instance.label} is {instance.state.value}, not ready"
            raise ProvisioningError(msg)
        instance.transition(InstanceState.IN_USE)
        return instance

    def teardown(self, instance: RunnerInstance) -> None:
        """Release an instance.

        Stopped instances are left alone, so calling this twice is safe.

        Raises
        ------
        TeardownError
            If the platform could not release the runner
        """
        if instance.state is InstanceState.STOPPED:
            logger.debug("Runner %s already stopped", instance.label)
            return

        instance.transition(InstanceState.TEARING_DOWN)
        logger.info("Tearing down runner %s", instance.label)
        try:
            self.platform.stop(instance.label)
        except Exception as e:
            instance.transition(InstanceState.FAILED)
            if isinstance(e, TeardownError):
                raise
            msg = f"Runner stop failed for {instance.label}: {e}"
            raise TeardownError(msg) from e
        instance.transition(InstanceState.STOPPED)
        logger.info("Runner %s stopped", instance.label)

    def release(self, instance: RunnerInstance) -> None:
        """Tear down, keeping a failure on :attr:`teardown_error` instead of raising."""
        try:
            self.teardown(instance)
        except TeardownError as e:
            self.teardown_error = e
            logger.error("Teardown of %s failed: %s", instance.label, e)

    @contextmanager
    def lease(self, spec: RunnerSpec | None = None) -> Iterator[RunnerInstance]:
        """Provision and claim an instance for the duration of the block.

        Teardown runs on normal exit, on error and on cancellation. A teardown
        failure is logged and kept on :attr:`teardown_error` rather than raised,
        so it never masks the block's own outcome.
        """
        instance = self.provision(spec)
        try:
            yield self.claim(instance)
        finally:
            self.release(instance)
