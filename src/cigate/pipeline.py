"""End-to-end pipeline run.

A run is one sequential control flow:

1. detect changes and resolve gates
2. stop early when nothing relevant changed
3. take the concurrency group
4. provision the runner instance
5. run stages on it, tearing it down afterwards
6. derive the outcome and notify failing observation points
"""

from cigate.changes import ChangeSetEvaluator, GitChangeSource, detect_changes
from cigate.common.errors import (
    ConcurrencyRejectedError,
    ProvisioningError,
    RunCancelledError,
)
from cigate.concurrency import (
    CancellationToken,
    ConcurrencyDeduplicator,
    ConcurrencyStore,
    RunLease,
)
from cigate.gating import GateDecision, GateResolver
from cigate.models import (
    ChangeSet,
    PipelineDefinition,
    RunIdentity,
    RunOutcome,
    RunReport,
    StageResult,
    StageStatus,
    Trigger,
)
from cigate.notify import (
    POINT_INSTANCE,
    POINT_STAGES,
    FailureNotifier,
    LoggingSink,
    NotificationSink,
)
from cigate.runners import InstanceLifecycleManager, RunnerPlatform
from cigate.stages import StageRunner, TargetExecutor
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)


class PipelineRun:
    """Wire the orchestration components together for one run.

    Parameters
    ----------
    definition : PipelineDefinition
        The pipeline to run
    identity : RunIdentity
        Run id, workflow and ref (used for concurrency and links)
    platform : RunnerPlatform
        Hosts the run's instance
    executor : TargetExecutor
        Runs build targets on the instance
    store : ConcurrencyStore
        Shared concurrency group state
    sink : NotificationSink | None
        Failure notification destination; logs when omitted
    change_source : GitChangeSource | None
        Lists changed paths; without one every component is unknown
    token : CancellationToken | None
        Run-wide token; cancelling it (for example from a signal handler) stops
        the run at its next suspension point and still tears the runner down
    """

    def __init__(
        self,
        definition: PipelineDefinition,
        identity: RunIdentity,
        platform: RunnerPlatform,
        executor: TargetExecutor,
        store: ConcurrencyStore,
        sink: NotificationSink | None = None,
        change_source: GitChangeSource | None = None,
        token: CancellationToken | None = None,
    ) -> None:
        self.definition = definition
        self.identity = identity
        self.platform = platform
        self.executor = executor
        self.store = store
        self.change_source = change_source
        self.token = token or CancellationToken()
        self.evaluator = ChangeSetEvaluator(definition.components)
        self.resolver = GateResolver(
            shared_component=definition.shared_component,
            approval_label=definition.approval_label,
        )
        self.deduplicator = ConcurrencyDeduplicator(store, definition.concurrency)
        self.sink = sink or LoggingSink()

    def plan(
        self,
        trigger: Trigger,
        base: str | None = None,
        head: str | None = None,
    ) -> tuple[ChangeSet, GateDecision]:
        """Compute the change set and gates without side effects on runners."""
        if self.change_source is None:
            change_set = self.evaluator.unknown(
                base=base,
                head=head,
                reason="no change source",
            )
        else:
            change_set = detect_changes(
                self.change_source,
                self.evaluator,
                base,
                head,
            )
        decision = self.resolver.resolve(change_set, trigger, self.definition.stages)
        return change_set, decision

    def execute(
        self,
        trigger: Trigger,
        base: str | None = None,
        head: str | None = None,
    ) -> RunReport:
        """Run the pipeline.

        Parameters
        ----------
        trigger : Trigger
            What started the run
        base : str | None
            Base revision for change detection
        head : str | None
            Head revision for change detection

        Returns
        -------
        RunReport
            Gates, stage results, lifecycle trace and outcomes
        """
        report = RunReport(identity=self.identity, trigger=trigger)
        change_set, decision = self.plan(trigger, base, head)
        report.change_set = change_set
        report.gates = dict(decision.gates)
        report.any_changed = decision.any_changed

        if not decision.should_start:
            reason = "not approved" if not decision.approved else "no relevant changes"
            logger.info("Run %s not started: %s", self.identity.run_id, reason)
            report.stage_results = self._mark_all(StageStatus.SKIPPED, decision, reason)
            report.outcome = RunOutcome.SKIPPED
            return report

        try:
            lease = self.deduplicator.acquire(self.identity, token=self.token)
        except (ConcurrencyRejectedError, RunCancelledError) as e:
            logger.warning("Run %s not started: %s", self.identity.run_id, e)
            report.errors.append(str(e))
            report.stage_results = self._mark_all(
                StageStatus.CANCELLED,
                decision,
                "concurrency group busy"
                if isinstance(e, ConcurrencyRejectedError)
                else "run cancelled",
            )
            report.outcome = RunOutcome.CANCELLED
            return report

        report.started = True
        with lease:
            instance_detail = self._run_leased(report, decision, lease)

        report.outcome = self._overall_outcome(report, lease)
        self._notify(report, instance_detail)
        logger.info("Run %s finished: %s", self.identity.run_id, report.outcome.value)
        return report

    def _run_leased(
        self,
        report: RunReport,
        decision: GateDecision,
        lease: RunLease,
    ) -> str:
        """Provision, run stages and tear down; return the instance failure detail."""
        manager = InstanceLifecycleManager(
            self.platform,
            self.definition.runner,
            token=lease.token,
        )
        try:
            instance = manager.provision()
        except ProvisioningError as e:
            report.instance = manager.instance
            report.errors.append(str(e))
            report.lifecycle_outcome = RunOutcome.FAILURE
            report.stage_results = self._mark_all(
                StageStatus.SKIPPED,
                decision,
                "instance not provisioned",
            )
            report.stage_outcome = RunOutcome.SKIPPED
            return str(e)
        except RunCancelledError as e:
            report.instance = manager.instance
            report.errors.append(f"cancelled: {e}")
            report.lifecycle_outcome = self._teardown_outcome(manager)
            report.stage_results = self._mark_all(
                StageStatus.CANCELLED,
                decision,
                "run cancelled",
            )
            report.stage_outcome = RunOutcome.CANCELLED
            return self._teardown_detail(manager)

        report.instance = instance
        stage_runner = StageRunner(self.executor, token=lease.token)
        try:
            manager.claim(instance)
            report.stage_results = stage_runner.run(
                self.definition.stages,
                decision.gates,
                instance,
            )
        finally:
            manager.release(instance)

        report.errors.extend(str(e) for e in stage_runner.errors)
        report.lifecycle_outcome = self._teardown_outcome(manager)
        if manager.teardown_error is not None:
            report.errors.append(str(manager.teardown_error))
        report.stage_outcome = self._stage_outcome(report.stage_results)
        return self._teardown_detail(manager)

    @staticmethod
    def _teardown_detail(manager: InstanceLifecycleManager) -> str:
        return "" if manager.teardown_error is None else str(manager.teardown_error)

    @staticmethod
    def _teardown_outcome(manager: InstanceLifecycleManager) -> RunOutcome:
        if manager.teardown_error is not None:
            return RunOutcome.FAILURE
        return RunOutcome.SUCCESS

    @staticmethod
    def _stage_outcome(results: list[StageResult]) -> RunOutcome:
        statuses = {r.status for r in results}
        if StageStatus.FAILURE in statuses:
            return RunOutcome.FAILURE
        if StageStatus.CANCELLED in statuses:
            return RunOutcome.CANCELLED
        return RunOutcome.SUCCESS

    @staticmethod
    def _overall_outcome(report: RunReport, lease: RunLease) -> RunOutcome:
        if lease.token.cancelled or report.stage_outcome is RunOutcome.CANCELLED:
            return RunOutcome.CANCELLED
        if RunOutcome.FAILURE in (report.stage_outcome, report.lifecycle_outcome):
            return RunOutcome.FAILURE
        return RunOutcome.SUCCESS

    def _mark_all(
        self,
        status: StageStatus,
        decision: GateDecision,
        reason: str,
    ) -> list[StageResult]:
        return [
            StageResult(s.name, status, decision.gate(s.name), reason)
            for s in self.definition.stages
        ]

    def _notify(self, report: RunReport, instance_detail: str) -> None:
        definition = self.definition
        title = definition.notify.title if definition.notify else definition.name
        notifier = FailureNotifier(self.sink, self.identity, title=title)
        failed = [
            r.name for r in report.stage_results if r.status is StageStatus.FAILURE
        ]
        sent = [
            notifier.observe(
                POINT_STAGES,
                report.stage_outcome,
                f"Failed: {', '.join(failed)}." if failed else "",
            ),
            notifier.observe(
                POINT_INSTANCE,
                report.lifecycle_outcome,
                instance_detail,
            ),
        ]
        report.notifications = [n for n in sent if n is not None]
