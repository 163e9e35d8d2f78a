"""Build target execution."""

import shlex
from abc import ABC, abstractmethod
from pathlib import Path

from cigate.common.errors import CommandError
from cigate.common.process import CommandExecutor
from cigate.concurrency.token import CancellationToken
from cigate.models import RunnerInstance, Stage
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

DEFAULT_COMMAND_TEMPLATE = "make {target}"


class TargetExecutor(ABC):
    """Runs a stage's build target on the run's instance."""

    @abstractmethod
    def run(
        self,
        stage: Stage,
        instance: RunnerInstance | None,
        token: CancellationToken | None = None,
    ) -> int:
        """Run the target and return its exit code (0 is success).

        A target still running when ``token`` is cancelled should be stopped.
        """


class CommandTargetExecutor(TargetExecutor):
    """Run build targets as shell commands.

    Parameters
    ----------
    repo_root : Path
        Working directory for the command
    command_template : str
        Command line with ``{target}`` and ``{stage}`` placeholders
    command_executor : CommandExecutor | None
        Executor used to spawn the command
    """

    def __init__(
        self,
        repo_root: Path,
        command_template: str = DEFAULT_COMMAND_TEMPLATE,
        command_executor: CommandExecutor | None = None,
    ) -> None:
        self.repo_root = Path(repo_root)
        self.command_template = command_template
        self.command_executor = command_executor or CommandExecutor()

    def build_command(self, stage: Stage) -> list[str]:
        """Render the command line for a stage."""
        return shlex.split(
            self.command_template.format(target=stage.target, stage=stage.name),
        )

    def build_env(
        self,
        stage: Stage,
        instance: RunnerInstance | None,
    ) -> dict[str, str]:
        """Stage environment plus the runner identity."""
        env = {k: str(v) for k, v in stage.env.items()}
        if instance is not None:
            env["CIGATE_RUNNER_LABEL"] = instance.label
            env["CIGATE_RUNNER_PROFILE"] = instance.profile
        return env

    def run(
        self,
        stage: Stage,
        instance: RunnerInstance | None,
        token: CancellationToken | None = None,
    ) -> int:
        cmd = self.build_command(stage)
        logger.info("Running %s: %s", stage.name, " ".join(cmd))
        try:
            result = self.command_executor.execute(
                cmd,
                cwd=self.repo_root,
                env=self.build_env(stage, instance),
                check=False,
                timeout=stage.timeout,
                cancelled=None if token is None else lambda: token.cancelled,
            )
        except CommandError as e:
            logger.error("Target %s could not run: %s", stage.target, e)
            return e.returncode if e.returncode is not None else 1
        return result.returncode


class DryRunTargetExecutor(TargetExecutor):
    """Record the targets that would run without running them."""

    def __init__(self) -> None:
        self.targets: list[str] = []

    def run(
        self,
        stage: Stage,
        instance: RunnerInstance | None,
        token: CancellationToken | None = None,
    ) -> int:
        self.targets.append(stage.target)
        logger.info("[dry-run] would run target %s for %s", stage.target, stage.name)
        return 0
