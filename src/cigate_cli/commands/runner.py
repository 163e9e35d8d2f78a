"""Manual runner lifecycle commands."""

import click

from cigate.models import InstanceState, RunnerInstance, RunnerSpec
from cigate.runners import (
    InstanceLifecycleManager,
    LocalRunnerPlatform,
    RunnerPlatform,
    SlabRunnerPlatform,
)
from cigate_cli.core.constants import EnvVars, Icons
from cigate_cli.core.decorators import handle_exceptions
from cigate_cli.core.formatting import write_github_output
from cigate_common.env import read_str


def _platform(local: bool) -> RunnerPlatform:
    if local:
        return LocalRunnerPlatform()
    return SlabRunnerPlatform.from_env(
        repository=read_str(EnvVars.GITHUB_REPOSITORY, default=""),
        run_id=read_str(EnvVars.GITHUB_RUN_ID, default=""),
    )


@click.group(name="runner")
@click.pass_context
def group(ctx: click.Context) -> None:
    """Start and stop ephemeral runners by hand."""


@group.command()
@click.option("--profile", required=True, help="Capability profile (e.g. cpu-big)")
@click.option("--backend", default="aws", show_default=True, help="Cloud backend")
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Seconds to wait for readiness [default: runner.provision_timeout]",
)
@click.option("--local", is_flag=True, help="Use this host as the runner")
@click.option(
    "--github-output",
    default=None,
    help="Also write label=<runner> to this file [default: $GITHUB_OUTPUT]",
)
@click.pass_context
@handle_exceptions
def start(
    ctx: click.Context,
    profile: str,
    backend: str,
    timeout: float | None,
    local: bool,
    github_output: str | None,
) -> None:
    """Provision a runner and print its label."""
    cigate_ctx = ctx.obj
    output = cigate_ctx.output
    defaults = cigate_ctx.config["runner"]
    spec = RunnerSpec(
        profile=profile,
        backend=backend,
        provision_timeout=timeout or float(defaults["provision_timeout"]),
        poll_interval=float(defaults["poll_interval"]),
    )

    output.section(f"Starting {backend}/{profile} runner", Icons.ROCKET)
    instance = InstanceLifecycleManager(_platform(local), spec).provision()
    output.success(f"Runner ready: {instance.label}")
    if github_output or read_str(EnvVars.GITHUB_OUTPUT):
        write_github_output([f"label={instance.label}"], output, github_output)


@group.command()
@click.argument("label")
@click.option("--local", is_flag=True, help="The runner is this host")
@click.pass_context
@handle_exceptions
def stop(ctx: click.Context, label: str, local: bool) -> None:
    """Release the runner LABEL. Releasing an unknown runner is not an error."""
    output = ctx.obj.output
    platform = _platform(local)
    instance = RunnerInstance(
        label=label,
        profile="unknown",
        backend=platform.name,
        state=InstanceState.IN_USE,
    )
    InstanceLifecycleManager(platform, RunnerSpec(profile="unknown")).teardown(instance)
    output.success(f"Runner {label} stopped")
