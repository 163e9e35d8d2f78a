"""Load and validate pipeline definitions from YAML."""

from pathlib import Path
from typing import Any

from cigate.common.errors import PipelineConfigError
from cigate.models import (
    CancellationPolicy,
    Component,
    ConcurrencySpec,
    NotifySpec,
    PipelineDefinition,
    ProtectedConflict,
    RunnerSpec,
    Stage,
)
from cigate_common.constants import DEFAULT_SHARED_COMPONENT
from cigate_common.io import FileOperationError, safe_read_yaml
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

NEGATION_PREFIX = "!"


def load_pipeline(
    path: Path,
    defaults: dict[str, Any] | None = None,
) -> PipelineDefinition:
    """Load a pipeline definition file.

    Parameters
    ----------
    path : Path
        YAML file to load
    defaults : dict[str, Any] | None
        Merged project configuration supplying fallback limits

    Returns
    -------
    PipelineDefinition
        Validated definition

    Raises
    ------
    PipelineConfigError
        If the file cannot be read or the definition is invalid
    """
    try:
        data = safe_read_yaml(Path(path))
    except FileOperationError as e:
        raise PipelineConfigError(str(e)) from e
    definition = parse_pipeline(data, defaults)
    logger.debug(
        "Loaded pipeline %s from %s: %d component(s), %d stage(s)",
        definition.name,
        path,
        len(definition.components),
        len(definition.stages),
    )
    return definition


def parse_pipeline(
    data: dict[str, Any],
    defaults: dict[str, Any] | None = None,
) -> PipelineDefinition:
    """Validate a parsed pipeline mapping into a :class:`PipelineDefinition`."""
    defaults = defaults or {}
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        msg = "Pipeline 'name' must be a non-empty string"
        raise PipelineConfigError(msg)

    components = _parse_components(data.get("components") or {})
    component_names = {c.name for c in components}
    stages = _parse_stages(data.get("stages"), component_names)

    shared = data.get("shared_component", None)
    if shared is None:
        shared = (
            DEFAULT_SHARED_COMPONENT
            if DEFAULT_SHARED_COMPONENT in component_names
            else None
        )
    elif shared not in component_names:
        msg = f"Shared component '{shared}' is not a declared component"
        raise PipelineConfigError(msg)

    approval_label = data.get("approval_label")
    if approval_label is not None and not isinstance(approval_label, str):
        msg = "'approval_label' must be a string"
        raise PipelineConfigError(msg)

    return PipelineDefinition(
        name=name.strip(),
        components=components,
        stages=stages,
        runner=_parse_runner(data.get("runner"), defaults.get("runner", {})),
        concurrency=_parse_concurrency(
            data.get("concurrency") or {},
            defaults.get("concurrency", {}),
        ),
        notify=_parse_notify(data.get("notify"), defaults.get("notify", {}), name),
        shared_component=shared,
        approval_label=approval_label,
    )


def split_globs(patterns: list[Any]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Split a glob list into include and ``!``-prefixed exclude globs."""
    include: list[str] = []
    exclude: list[str] = []
    for pattern in patterns:
        if not isinstance(pattern, str) or not pattern.strip():
            msg = f"Invalid glob: {pattern!r}"
            raise PipelineConfigError(msg)
        pattern = pattern.strip()
        if pattern.startswith(NEGATION_PREFIX):
            exclude.append(pattern[len(NEGATION_PREFIX):])
        else:
            include.append(pattern)
    return tuple(dict.fromkeys(include)), tuple(dict.fromkeys(exclude))


def _parse_components(raw: Any) -> tuple[Component, ...]:
    if not isinstance(raw, dict):
        msg = "'components' must be a mapping of name to globs"
        raise PipelineConfigError(msg)

    components = []
    for name, spec in raw.items():
        if isinstance(spec, list):
            include, exclude = split_globs(spec)
        elif isinstance(spec, dict):
            include, negated = split_globs(list(spec.get("include") or []))
            explicit, _ = split_globs(
                [str(g).lstrip(NEGATION_PREFIX) for g in spec.get("exclude") or []],
            )
            exclude = tuple(dict.fromkeys(negated + explicit))
        else:
            msg = f"Component '{name}' must be a list of globs or a mapping"
            raise PipelineConfigError(msg)
        if not include:
            msg = f"Component '{name}' has no include globs"
            raise PipelineConfigError(msg)
        components.append(Component(name=str(name), include=include, exclude=exclude))
    return tuple(components)


def _as_names(value: Any, field_name: str, stage: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    msg = f"Stage '{stage}': '{field_name}' must be a string or list of strings"
    raise PipelineConfigError(msg)


def _parse_stages(raw: Any, component_names: set[str]) -> tuple[Stage, ...]:
    if not isinstance(raw, list) or not raw:
        msg = "'stages' must be a non-empty list"
        raise PipelineConfigError(msg)

    stages: list[Stage] = []
    seen: set[str] = set()
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            msg = f"Stage #{index + 1} must be a mapping"
            raise PipelineConfigError(msg)
        name = entry.get("name")
        target = entry.get("target")
        if not isinstance(name, str) or not name:
            msg = f"Stage #{index + 1} is missing a name"
            raise PipelineConfigError(msg)
        if name in seen:
            msg = f"Duplicate stage name: {name}"
            raise PipelineConfigError(msg)
        if not isinstance(target, str) or not target:
            msg = f"Stage '{name}' is missing a target"
            raise PipelineConfigError(msg)

        components = _as_names(entry.get("components"), "components", name)
        unknown = [c for c in components if c not in component_names]
        if unknown:
            msg = (
                f"Stage '{name}' references unknown component(s): "
                f"{', '.join(unknown)}"
            )
            raise PipelineConfigError(msg)

        requires = _as_names(entry.get("requires"), "requires", name)
        for producer in requires:
            if producer not in seen:
                msg = (
                    f"Stage '{name}' requires '{producer}', which must be declared "
                    "before it"
                )
                raise PipelineConfigError(msg)

        env = entry.get("env") or {}
        if not isinstance(env, dict):
            msg = f"Stage '{name}': 'env' must be a mapping"
            raise PipelineConfigError(msg)

        shared = entry.get("shared", True)
        if not isinstance(shared, bool):
            msg = f"Stage '{name}': 'shared' must be true or false"
            raise PipelineConfigError(msg)

        timeout = entry.get("timeout")
        if timeout is not None and (
            not isinstance(timeout, int | float) or timeout <= 0
        ):
            msg = f"Stage '{name}': 'timeout' must be a positive number"
            raise PipelineConfigError(msg)

        stages.append(
            Stage(
                name=name,
                target=target,
                components=components,
                requires=requires,
                produces=_as_names(entry.get("produces"), "produces", name),
                always=bool(entry.get("always", False)),
                shared=shared,
                env={str(k): _env_value(v) for k, v in env.items()},
                timeout=float(timeout) if timeout is not None else None,
                description=str(entry.get("description", "")),
            ),
        )
        seen.add(name)
    return tuple(stages)


def _env_value(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def _parse_runner(raw: Any, defaults: dict[str, Any]) -> RunnerSpec:
    if not isinstance(raw, dict) or not raw.get("profile"):
        msg = "'runner' must be a mapping with a 'profile'"
        raise PipelineConfigError(msg)
    try:
        return RunnerSpec(
            profile=str(raw["profile"]),
            backend=str(raw.get("backend", "aws")),
            provision_timeout=float(
                raw.get("provision_timeout", defaults.get("provision_timeout", 900)),
            ),
            poll_interval=float(
                raw.get("poll_interval", defaults.get("poll_interval", 10)),
            ),
        )
    except (TypeError, ValueError) as e:
        msg = f"Invalid runner settings: {e}"
        raise PipelineConfigError(msg) from e


def _parse_concurrency(
    raw: dict[str, Any],
    defaults: dict[str, Any],
) -> ConcurrencySpec:
    if not isinstance(raw, dict):
        msg = "'concurrency' must be a mapping"
        raise PipelineConfigError(msg)
    try:
        spec = ConcurrencySpec(
            policy=CancellationPolicy(
                raw.get("policy", CancellationPolicy.ALWAYS_CANCEL),
            ),
            protected_branches=tuple(
                raw.get("protected_branches")
                or defaults.get("protected_branches")
                or ConcurrencySpec().protected_branches,
            ),
            on_protected_conflict=ProtectedConflict(
                raw.get("on_protected_conflict", ProtectedConflict.QUEUE),
            ),
            queue_timeout=float(
                raw.get("queue_timeout", defaults.get("queue_timeout", 3600)),
            ),
            poll_interval=float(
                raw.get("poll_interval", defaults.get("poll_interval", 15)),
            ),
            stale_after=float(
                raw.get("stale_after", defaults.get("stale_after", 21600)),
            ),
        )
    except (TypeError, ValueError) as e:
        msg = f"Invalid concurrency settings: {e}"
        raise PipelineConfigError(msg) from e
    if spec.stale_after <= 0:
        msg = "'concurrency.stale_after' must be a positive number of seconds"
        raise PipelineConfigError(msg)
    return spec


def _parse_notify(
    raw: Any,
    defaults: dict[str, Any],
    pipeline_name: str,
) -> NotifySpec | None:
    if raw is None or raw is False:
        return None
    if raw is True:
        raw = {}
    if not isinstance(raw, dict):
        msg = "'notify' must be a mapping"
        raise PipelineConfigError(msg)
    return NotifySpec(
        title=str(raw.get("title", pipeline_name)),
        channel=raw.get("channel"),
        username=str(raw.get("username", defaults.get("username", "cigate"))),
        icon_url=raw.get("icon_url"),
        webhook_env=str(raw.get("webhook_env", "SLACK_WEBHOOK")),
    )
