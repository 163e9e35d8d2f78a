"""Rendering of plans and run reports as text, JSON or GitHub step outputs."""

import json
from pathlib import Path

from cigate.gating import GateDecision
from cigate.models import ChangeSet, RunReport
from cigate_cli.core.constants import STATUS_ICONS, EnvVars, Icons
from cigate_cli.core.output import OutputStrategy
from cigate_common.env import read_str


def _flag(value: bool) -> str:
    return "true" if value else "false"


def plan_output_lines(change_set: ChangeSet, decision: GateDecision) -> list[str]:
    """``key=value`` lines describing component changes and stage gates."""
    lines = [
        f"{name}_changed={_flag(change_set.is_changed(name))}"
        for name in change_set.states
    ]
    lines.extend(
        f"{stage}_gate={_flag(gate)}" for stage, gate in decision.gates.items()
    )
    lines.append(f"any_changed={_flag(decision.any_changed)}")
    lines.append(f"should_start={_flag(decision.should_start)}")
    return lines


def report_output_lines(report: RunReport) -> list[str]:
    """``key=value`` lines describing a finished run."""
    lines = [f"{stage}_gate={_flag(gate)}" for stage, gate in report.gates.items()]
    lines.extend(f"{r.name}_status={r.status.value}" for r in report.stage_results)
    lines.append(f"any_changed={_flag(report.any_changed)}")
    if report.instance is not None:
        lines.append(f"runner_label={report.instance.label}")
    lines.append(f"lifecycle_outcome={report.lifecycle_outcome.value}")
    lines.append(f"stage_outcome={report.stage_outcome.value}")
    lines.append(f"outcome={report.outcome.value}")
    return lines


def write_github_output(
    lines: list[str],
    output: OutputStrategy,
    path: str | None = None,
) -> None:
    """Append lines to ``$GITHUB_OUTPUT``, or print them when it is unset."""
    target = path or read_str(EnvVars.GITHUB_OUTPUT)
    if not target:
        for line in lines:
            output.result(line)
        return
    with Path(target).open("a", encoding="utf-8") as f:
        f.writelines(f"{line}\n" for line in lines)
    output.info(f"Wrote {len(lines)} output(s) to {target}")


def to_json(data: dict) -> str:
    return json.dumps(data, indent=2, sort_keys=False)


def render_plan(
    output: OutputStrategy,
    change_set: ChangeSet,
    decision: GateDecision,
) -> None:
    """Print a change set and the resulting gates."""
    output.section("Change set", Icons.MAGNIFYING)
    if change_set.reason:
        output.warning(f"All components treated as changed: {change_set.reason}")
    for name, state in change_set.states.items():
        output.plain(f"  {name:<24} {state.value}")
    for path in change_set.changed_paths:
        output.detail(path)

    output.subsection("Gates", Icons.LIST)
    for stage, gate in decision.gates.items():
        icon = Icons.SUCCESS if gate else Icons.SKIPPED
        output.plain(f"  {icon} {stage:<24} {'run' if gate else 'skip'}")

    output.plain("")
    if decision.should_start:
        output.success("Run would start")
    elif not decision.approved:
        output.warning("Run would not start: label is not the approval label")
    else:
        output.warning("Run would not start: no relevant changes")


def render_report(output: OutputStrategy, report: RunReport) -> None:
    """Print a run report."""
    output.section(f"Run {report.identity.run_id}", Icons.REPORT)
    output.plain(f"Trigger: {report.trigger.kind.value} on {report.trigger.ref}")
    output.plain(f"Link: {report.identity.link}")

    if report.instance is not None:
        output.plain(
            f"Runner: {report.instance.label} ({report.instance.backend}/"
            f"{report.instance.profile}) {report.instance.state.value}",
        )
        for state, at in report.instance.trace:
            output.debug(f"{at.isoformat()} {state.value}")

    output.subsection("Stages", Icons.TEST)
    for result in report.stage_results:
        icon = STATUS_ICONS.get(result.status.value, Icons.UNKNOWN)
        line = f"  {icon} {result.name:<24} {result.status.value}"
        if result.reason:
            line += f" ({result.reason})"
        output.plain(line)
        if result.duration:
            output.detail(f"{result.name}: {result.duration:.1f}s")

    for error in report.errors:
        output.info(f"error: {error}")
    for notification in report.notifications:
        output.info(f"notified [{notification.point}]: {notification.message}")

    output.plain("")
    outcome = report.outcome.value
    if outcome == "success":
        output.success(f"Run succeeded ({report.identity.link})")
    elif outcome == "skipped":
        output.success("Run skipped: nothing to do")
    elif outcome == "cancelled":
        output.warning("Run cancelled")
    else:
        output.error(f"Run failed ({report.identity.link})", to_stderr=False)
