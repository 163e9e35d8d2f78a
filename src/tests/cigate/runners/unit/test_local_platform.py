"""Tests for LocalRunnerPlatform."""

from cigate.models import RunnerSpec
from cigate.runners import LocalRunnerPlatform


class TestLocalRunnerPlatform:
    """Tests for LocalRunnerPlatform."""

    def test_start_is_ready_stop(self):
        """Test a started handle is ready until stopped."""
        platform = LocalRunnerPlatform()

        handle = platform.start(RunnerSpec(profile="cpu-small"))

        assert handle.startswith("local-")
        assert platform.is_ready(handle)
        platform.stop(handle)
        assert not platform.is_ready(handle)

    def test_labels_are_unique(self):
        """Test each start returns a new label."""
        platform = LocalRunnerPlatform()
        spec = RunnerSpec(profile="cpu-small")

        assert platform.start(spec) != platform.start(spec)

    def test_stop_unknown_handle(self):
        """Test stopping an unknown handle is a no-op."""
        LocalRunnerPlatform().stop("missing")
