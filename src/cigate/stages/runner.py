"""Ordered, gated stage execution."""

import time
from collections.abc import Iterable, Mapping

from cigate.common.errors import StageExecutionError
from cigate.concurrency.token import CancellationToken
from cigate.models import RunnerInstance, Stage, StageResult, StageStatus
from cigate.stages.executor import TargetExecutor
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)


class StageRunner:
    """Execute stages in declaration order.

    For each stage:

    1. A closed gate skips it.
    2. A required producer that did not succeed skips it.
    3. A cancelled run marks it and every later stage cancelled.
    4. Otherwise its target runs; a failure is recorded and the next stage proceeds.
       A target interrupted by cancellation is marked cancelled, not failed.

    Parameters
    ----------
    executor : TargetExecutor
        Runs build targets
    token : CancellationToken | None
        Checked before each stage starts
    """

    def __init__(
        self,
        executor: TargetExecutor,
        token: CancellationToken | None = None,
    ) -> None:
        self.executor = executor
        self.token = token or CancellationToken()
        self.errors: list[StageExecutionError] = []

    def run(
        self,
        stages: Iterable[Stage],
        gates: Mapping[str, bool],
        instance: RunnerInstance | None = None,
    ) -> list[StageResult]:
        """Run every stage and return one result per stage, in order."""
        results: dict[str, StageResult] = {}
        cancelled = False

        for stage in stages:
            gate = gates.get(stage.name, False)
            if not cancelled and self.token.cancelled:
                cancelled = True
                logger.warning(
                    "Run cancelled before %s: %s",
                    stage.name,
                    self.token.reason,
                )

            if cancelled:
                result = StageResult(
                    stage.name,
                    StageStatus.CANCELLED,
                    gate,
                    "run cancelled",
                )
            elif not gate:
                result = StageResult(
                    stage.name,
                    StageStatus.SKIPPED,
                    gate,
                    "gate closed",
                )
            else:
                result = self._blocked_by_producer(stage, results)
                if result is None:
                    result = self._execute(stage, instance)

            results[stage.name] = result
            logger.info("Stage %s: %s", stage.name, result.status.value)

        return list(results.values())

    def _blocked_by_producer(
        self,
        stage: Stage,
        results: Mapping[str, StageResult],
    ) -> StageResult | None:
        for producer in stage.requires:
            upstream = results.get(producer)
            if upstream is None or upstream.status is not StageStatus.SUCCESS:
                return StageResult(
                    stage.name,
                    StageStatus.SKIPPED,
                    True,
                    f"requires {producer}",
                )
        return None

    def _execute(self, stage: Stage, instance: RunnerInstance | None) -> StageResult:
        started = time.monotonic()
        try:
            returncode = self.executor.run(stage, instance, token=self.token)
        except Exception as e:
            error = StageExecutionError(stage.name, str(e))
            self.errors.append(error)
            logger.error("%s", error)
            return StageResult(
                stage.name,
                StageStatus.FAILURE,
                True,
                str(error),
                duration=time.monotonic() - started,
            )

        duration = time.monotonic() - started
        if returncode != 0 and self.token.cancelled:
            logger.warning("Stage %s interrupted: %s", stage.name, self.token.reason)
            return StageResult(
                stage.name,
                StageStatus.CANCELLED,
                True,
                "run cancelled",
                duration=duration,
                returncode=returncode,
            )
        if returncode != 0:
            error = StageExecutionError(
                stage.name,
                f"target {stage.target} exited {returncode}",
            )
            self.errors.append(error)
            logger.error("%s", error)
            return StageResult(
                stage.name,
                StageStatus.FAILURE,
                True,
                str(error),
                duration=duration,
                returncode=returncode,
            )
        return StageResult(
            stage.name,
            StageStatus.SUCCESS,
            True,
            duration=duration,
            returncode=0,
        )
