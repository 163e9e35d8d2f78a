"""Tests for pipeline definition loading."""

from pathlib import Path

import pytest
import yaml

from cigate.common.errors import PipelineConfigError
from cigate.changes import ChangeSetEvaluator
from cigate.config import load_pipeline, parse_pipeline, split_globs
from cigate.gating import GateResolver
from cigate.models import CancellationPolicy, ProtectedConflict
from tests._helpers.builders import pr_trigger


class TestSplitGlobs:
    """Tests for split_globs function."""

    def test_negation_prefix(self):
        """Test !-prefixed globs become excludes."""
        include, exclude = split_globs(["tfhe/src/**", "!tfhe/src/c_api/**"])

        assert include == ("tfhe/src/**",)
        assert exclude == ("tfhe/src/c_api/**",)

    def test_deduplicates_in_order(self):
        """Test repeated globs are kept once, in first-seen order."""
        include, _ = split_globs(["b/**", "a/**", "b/**"])

        assert include == ("b/**", "a/**")

    @pytest.mark.parametrize("bad", ["", "   ", None, 3])
    def test_rejects_invalid(self, bad):
        """Test blank and non-string globs are refused."""
        with pytest.raises(PipelineConfigError, match="Invalid glob"):
            split_globs([bad])


class TestParsePipeline:
    """Tests for parse_pipeline function."""

    def test_minimal(self, minimal):
        """Test defaults are filled in for a minimal definition."""
        definition = parse_pipeline(minimal)

        assert definition.name == "CPU tests"
        assert definition.stage_names == ["boolean"]
        assert definition.get_stage("boolean").components == ("boolean",)
        assert definition.shared_component == "dependencies"
        assert definition.runner.backend == "aws"
        assert definition.runner.provision_timeout == 900
        assert definition.concurrency.policy is CancellationPolicy.ALWAYS_CANCEL
        assert definition.notify is None

    def test_defaults_from_project_config(self, minimal):
        """Test merged project config supplies runner and concurrency limits."""
        defaults = {
            "runner": {"provision_timeout": 60, "poll_interval": 2},
            "concurrency": {"queue_timeout": 30, "protected_branches": ["release"]},
        }

        definition = parse_pipeline(minimal, defaults)

        assert definition.runner.provision_timeout == 60
        assert definition.runner.poll_interval == 2
        assert definition.concurrency.queue_timeout == 30
        assert definition.concurrency.protected_branches == ("release",)

    def test_component_mapping_form(self, minimal):
        """Test components may be given as include/exclude mappings."""
        minimal["components"]["hlapi"] = {
            "include": ["tfhe/src/**", "!tfhe/src/js_on_wasm_api/**"],
            "exclude": ["tfhe/src/c_api/**"],
        }

        component = parse_pipeline(minimal).get_component("hlapi")

        assert component.include == ("tfhe/src/**",)
        assert component.exclude == (
            "tfhe/src/js_on_wasm_api/**",
            "tfhe/src/c_api/**",
        )

    def test_no_default_shared_component(self, minimal):
        """Test pipelines without a dependencies component have no shared one."""
        del minimal["components"]["dependencies"]

        assert parse_pipeline(minimal).shared_component is None

    def test_unknown_shared_component(self, minimal):
        """Test naming an undeclared shared component is an error."""
        minimal["shared_component"] = "toolchain"

        with pytest.raises(PipelineConfigError, match="toolchain"):
            parse_pipeline(minimal)

    def test_stage_fields(self, minimal):
        """Test requires, produces, always, shared, env and timeout are parsed."""
        minimal["stages"] = [
            {"name": "gen_keys", "target": "gen_key_cache", "produces": "key_cache"},
            {
                "name": "shortint",
                "target": "test_shortint_ci",
                "requires": ["gen_keys"],
                "env": {"BIG_TESTS_INSTANCE": True, "THREADS": 8},
                "timeout": 3600,
            },
            {"name": "safe", "target": "test_safe", "always": True, "shared": False},
        ]

        definition = parse_pipeline(minimal)
        shortint = definition.get_stage("shortint")

        assert definition.get_stage("gen_keys").produces == ("key_cache",)
        assert shortint.requires == ("gen_keys",)
        assert shortint.env == {"BIG_TESTS_INSTANCE": "TRUE", "THREADS": "8"}
        assert shortint.timeout == 3600.0
        assert definition.get_stage("safe").always
        assert not definition.get_stage("safe").shared
        assert shortint.shared

    def test_concurrency_and_notify(self, minimal):
        """Test policy enums and notify settings are parsed."""
        minimal["concurrency"] = {
            "policy": "protect-default-branch",
            "on_protected_conflict": "reject",
            "stale_after": 600,
        }
        minimal["notify"] = {"channel": "#gpu", "webhook_env": "GPU_WEBHOOK"}

        definition = parse_pipeline(minimal)

        policy = definition.concurrency.policy
        assert policy is CancellationPolicy.PROTECT_DEFAULT_BRANCH
        assert definition.concurrency.on_protected_conflict is ProtectedConflict.REJECT
        assert definition.concurrency.stale_after == 600.0
        assert definition.notify.title == "CPU tests"
        assert definition.notify.channel == "#gpu"
        assert definition.notify.webhook_env == "GPU_WEBHOOK"

    def test_notify_true(self, minimal):
        """Test notify: true enables notifications with defaults."""
        minimal["notify"] = True

        assert parse_pipeline(minimal).notify.webhook_env == "SLACK_WEBHOOK"


class TestValidation:
    """Tests for invalid pipeline definitions."""

    @pytest.mark.parametrize(
        ("mutate", "message"),
        [
            (lambda d: d.pop("name"), "name"),
            (lambda d: d.pop("runner"), "runner"),
            (lambda d: d.update(stages=[]), "non-empty list"),
            (lambda d: d.update(components=["a"]), "mapping of name"),
            (lambda d: d["components"].update(x=[]), "no include globs"),
            (lambda d: d["components"].update(x="a/**"), "list of globs"),
            (lambda d: d["stages"][0].pop("target"), "missing a target"),
            (lambda d: d["stages"][0].pop("name"), "missing a name"),
            (lambda d: d["stages"].append(dict(d["stages"][0])), "Duplicate"),
            (lambda d: d["stages"][0].update(components=["nope"]), "unknown"),
            (lambda d: d["stages"][0].update(requires="later"), "declared before"),
            (lambda d: d["stages"][0].update(env=["A=1"]), "'env'"),
            (lambda d: d["stages"][0].update(timeout=0), "positive"),
            (lambda d: d["stages"][0].update(shared="no"), "'shared'"),
            (lambda d: d.update(concurrency={"stale_after": 0}), "stale_after"),
            (lambda d: d["stages"][0].update(components=[1]), "list of strings"),
            (lambda d: d.update(concurrency={"policy": "sometimes"}), "concurrency"),
            (lambda d: d.update(approval_label=5), "approval_label"),
            (lambda d: d.update(notify="yes"), "notify"),
        ],
    )
    def test_invalid(self, minimal, mutate, message):
        """Test each malformed definition raises PipelineConfigError."""
        mutate(minimal)

        with pytest.raises(PipelineConfigError, match=message):
            parse_pipeline(minimal)


class TestLoadPipeline:
    """Tests for load_pipeline function."""

    def test_loads_file(self, tmp_path: Path, minimal):
        """Test a YAML file on disk is loaded."""
        path = tmp_path / "cpu.yaml"
        path.write_text(yaml.safe_dump(minimal))

        assert load_pipeline(path).name == "CPU tests"

    def test_missing_file(self, tmp_path: Path):
        """Test a missing file raises PipelineConfigError."""
        with pytest.raises(PipelineConfigError, match="does not exist"):
            load_pipeline(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        """Test unparseable YAML raises PipelineConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("stages: [unclosed")

        with pytest.raises(PipelineConfigError, match="Invalid YAML"):
            load_pipeline(path)

    def test_fast_tests_example(self, pipelines_dir: Path):
        """Test the bundled CPU fast-tests pipeline loads."""
        definition = load_pipeline(pipelines_dir / "aws_fast_tests.yaml")

        assert definition.stage_names[0] == "csprng"
        assert definition.get_stage("shortint").requires == ("gen_keys",)
        assert definition.get_stage("safe_deserialization").always
        assert definition.shared_component == "dependencies"

    def test_fast_tests_dependency_change(self, pipelines_dir: Path):
        """Test a Cargo.toml change skips the standalone crates."""
        definition = load_pipeline(pipelines_dir / "aws_fast_tests.yaml")
        change_set = ChangeSetEvaluator(definition.components).evaluate(
            ["tfhe/Cargo.toml"],
        )
        resolver = GateResolver(shared_component=definition.shared_component)

        decision = resolver.resolve(change_set, pr_trigger(), definition.stages)

        assert not decision.gate("csprng")
        assert not decision.gate("zk_pok")
        assert not decision.gate("versionable")
        assert decision.gate("boolean")
        assert decision.gate("integer")
        assert decision.gate("user_docs")

    def test_gpu_example(self, pipelines_dir: Path):
        """Test the bundled GPU pipeline loads with its protected policy."""
        definition = load_pipeline(pipelines_dir / "gpu_signed_integer_h100.yaml")

        assert definition.approval_label == "approved"
        assert definition.runner.backend == "hyperstack"
        policy = definition.concurrency.policy
        assert policy is CancellationPolicy.PROTECT_DEFAULT_BRANCH
