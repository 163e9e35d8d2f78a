"""Command executor.

Provides unified subprocess execution with environment management, timeouts and
consistent error handling. Git queries and build targets both go through this class.
"""

import contextlib
import os
import signal
import subprocess
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from cigate.common.errors import CommandError
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

EXIT_TIMEOUT = 124
EXIT_NOT_FOUND = 127
EXIT_CANCELLED = 130

CANCEL_POLL_INTERVAL = 0.5
TERMINATE_GRACE = 10.0


class CommandExecutor:
    """Centralized command executor.

    Output is captured when requested, otherwise it is passed straight through to the
    parent's stdout/stderr so build-target logs land in the CI job log.

    Examples
    --------
    >>> executor = CommandExecutor()
    >>> result = executor.execute(["git", "rev-parse", "HEAD"], capture_output=True)
    """

    def __init__(
        self,
        base_env: dict[str, str] | None = None,
        poll_interval: float = CANCEL_POLL_INTERVAL,
        terminate_grace: float = TERMINATE_GRACE,
    ) -> None:
        self._base_env = dict(os.environ) if base_env is None else dict(base_env)
        self.poll_interval = poll_interval
        self.terminate_grace = terminate_grace

    def build_environment(
        self,
        env_overrides: dict[str, str] | None = None,
    ) -> dict[str, str] | None:
        """Build command environment with overrides.

        Returns None if no overrides (subprocess uses default environment).
        """
        if not env_overrides:
            return None
        command_env = self._base_env.copy()
        command_env.update(env_overrides)
        return command_env

    def execute(
        self,
        cmd: list[str] | str,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
        check: bool = True,
        timeout: float | None = None,
        capture_output: bool = False,
        cancelled: Callable[[], bool] | None = None,
        **kwargs: Any,
    ) -> subprocess.CompletedProcess[str]:
        """Execute a command.

        Parameters
        ----------
        cmd : list[str] or str
            Command to execute (strings are split on whitespace)
        cwd : Path, optional
            Working directory
        env : dict[str, str], optional
            Environment variables to add/override
        check : bool
            Whether to raise on a non-zero exit
        timeout : float, optional
            Timeout in seconds
        capture_output : bool
            Capture stdout/stderr instead of passing them through
        cancelled : Callable[[], bool], optional
            Polled while the command runs; when it returns True the command's
            process group is terminated and the result exits with 130. Only
            supported for pass-through output.
        **kwargs : Any
            Additional arguments passed to subprocess

        Returns
        -------
        subprocess.CompletedProcess[str]
            Result of command execution

        Raises
        ------
        CommandError
            If the command fails and ``check`` is True
        """
        if isinstance(cmd, str):
            cmd = cmd.split()
        if cancelled is not None and capture_output:
            msg = "Cancellable commands cannot capture output"
            raise ValueError(msg)

        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd)
        command_env = self.build_environment(env)

        try:
            if cancelled is None:
                result = subprocess.run(  # noqa: S603
                    cmd,
                    cwd=cwd,
                    env=command_env,
                    capture_output=capture_output,
                    text=True,
                    timeout=timeout,
                    check=False,
                    **kwargs,
                )
            else:
                result = self._run_cancellable(
                    cmd,
                    cwd,
                    command_env,
                    timeout,
                    cancelled,
                    **kwargs,
                )
        except subprocess.TimeoutExpired as e:
            error_msg = f"Command timed out after {timeout}s: {' '.join(cmd)}"
            if check:
                raise CommandError(error_msg, EXIT_TIMEOUT) from e
            return subprocess.CompletedProcess(cmd, EXIT_TIMEOUT, "", str(e))
        except FileNotFoundError as e:
            error_msg = f"Command not found: {cmd[0]}"
            if check:
                raise CommandError(error_msg, EXIT_NOT_FOUND) from e
            return subprocess.CompletedProcess(cmd, EXIT_NOT_FOUND, "", str(e))

        if check and result.returncode != 0:
            error_msg = f"Command failed (exit {result.returncode}): {' '.join(cmd)}"
            if result.stderr:
                error_msg += f"\n{result.stderr.strip()}"
            raise CommandError(error_msg, result.returncode)

        return result

    def _run_cancellable(
        self,
        cmd: list[str],
        cwd: Path | None,
        env: dict[str, str] | None,
        timeout: float | None,
        cancelled: Callable[[], bool],
        **kwargs: Any,
    ) -> subprocess.CompletedProcess[str]:
        # Own process group, so make and the test binaries it spawns stop together.
        proc = subprocess.Popen(  # noqa: S603
            cmd,
            cwd=cwd,
            env=env,
            text=True,
            start_new_session=True,
            **kwargs,
        )
        deadline = None if timeout is None else time.monotonic() + timeout
        try:
            while True:
                try:
                    returncode = proc.wait(timeout=self.poll_interval)
                    return subprocess.CompletedProcess(cmd, returncode)
                except subprocess.TimeoutExpired:
                    pass
                if cancelled():
                    logger.warning("Stopping %s: run cancelled", " ".join(cmd))
                    self._terminate(proc)
                    return subprocess.CompletedProcess(cmd, EXIT_CANCELLED)
                if deadline is not None and time.monotonic() >= deadline:
                    self._terminate(proc)
                    raise subprocess.TimeoutExpired(cmd, timeout)
        except BaseException:
            if proc.poll() is None:
                self._terminate(proc)
            raise

    def _terminate(self, proc: subprocess.Popen) -> None:
        """SIGTERM the command's process group, then SIGKILL after the grace period."""
        with contextlib.suppress(ProcessLookupError):
            os.killpg(proc.pid, signal.SIGTERM)
        try:
            proc.wait(timeout=self.terminate_grace)
        except subprocess.TimeoutExpired:
            with contextlib.suppress(ProcessLookupError):
                os.killpg(proc.pid, signal.SIGKILL)
            proc.wait()
