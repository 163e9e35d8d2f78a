"""Tests for FailureNotifier."""

import pytest

from cigate.models import RunOutcome
from cigate.notify import POINT_INSTANCE, POINT_STAGES, FailureNotifier
from tests._helpers.builders import make_identity
from tests._helpers.fakes import RecordingSink

LINK = "https://github.com/zama-ai/tfhe-rs/actions/runs/100"


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


class TestObserve:
    """Tests for FailureNotifier.observe."""

    def test_failure_sends_one_notification(self, sink: RecordingSink):
        """Test a failing point produces a notification with the run link."""
        notifier = FailureNotifier(sink, make_identity(), title="CPU tests")

        notification = notifier.observe(POINT_STAGES, RunOutcome.FAILURE)

        assert sink.sent == [notification]
        assert notification.link == LINK
        assert notification.run_id == "100"
        assert notification.message == (
            "CPU tests (stages) finished with status: failure."
        )

    @pytest.mark.parametrize(
        "outcome",
        [RunOutcome.SUCCESS, RunOutcome.SKIPPED, RunOutcome.CANCELLED],
    )
    def test_non_failures_are_silent(self, sink: RecordingSink, outcome):
        """Test success, skipped and cancelled outcomes never notify."""
        notifier = FailureNotifier(sink, make_identity())

        assert notifier.observe(POINT_STAGES, outcome) is None
        assert sink.sent == []

    def test_at_most_one_per_point(self, sink: RecordingSink):
        """Test repeated failures at one point notify once."""
        notifier = FailureNotifier(sink, make_identity())

        notifier.observe(POINT_INSTANCE, RunOutcome.FAILURE)
        assert notifier.observe(POINT_INSTANCE, RunOutcome.FAILURE) is None

        assert len(sink.sent) == 1

    def test_points_are_independent(self, sink: RecordingSink):
        """Test both points can notify within one run."""
        notifier = FailureNotifier(sink, make_identity())

        notifier.observe(POINT_STAGES, RunOutcome.FAILURE)
        notifier.observe(POINT_INSTANCE, RunOutcome.FAILURE, "teardown failed")

        assert [n.point for n in sink.sent] == [POINT_STAGES, POINT_INSTANCE]
        assert sink.sent[1].message.endswith("teardown failed")
        assert sink.sent[1].message.startswith("Instance finished")

    def test_unknown_point(self, sink: RecordingSink):
        """Test an undeclared point is a programming error."""
        with pytest.raises(ValueError, match="Unknown observation point"):
            FailureNotifier(sink, make_identity()).observe("deploy", RunOutcome.FAILURE)

    def test_delivery_failure_is_swallowed(self):
        """Test a failing sink does not raise and still counts as sent."""
        sink = RecordingSink(fail=True)
        notifier = FailureNotifier(sink, make_identity())

        notification = notifier.observe(POINT_STAGES, RunOutcome.FAILURE)

        assert notification is not None
        assert POINT_STAGES in notifier.sent
