"""Best-effort failure notification per observation point."""

from cigate.models import Notification, RunIdentity, RunOutcome
from cigate.notify.sinks import NotificationSink
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

POINT_STAGES = "stages"
POINT_INSTANCE = "instance"
POINTS = (POINT_STAGES, POINT_INSTANCE)


class FailureNotifier:
    """Emit one notification per failing observation point.

    Delivery is best effort: sink errors are logged and never change the run's
    outcome.

    Parameters
    ----------
    sink : NotificationSink
        Delivery target
    identity : RunIdentity
        Run the notifications refer to
    title : str
        Prefix for messages, usually the pipeline's display name
    """

    def __init__(
        self,
        sink: NotificationSink,
        identity: RunIdentity,
        title: str = "",
    ) -> None:
        self.sink = sink
        self.identity = identity
        self.title = title
        self.sent: dict[str, Notification] = {}

    def build(self, point: str, outcome: RunOutcome, detail: str = "") -> Notification:
        """Build the notification for one point."""
        label = f"{self.title} ({point})" if self.title else point.capitalize()
        message = f"{label} finished with status: {outcome.value}."
        if detail:
            message = f"{message} {detail}"
        return Notification(
            point=point,
            status=outcome,
            message=message,
            link=self.identity.link,
            run_id=self.identity.run_id,
        )

    def observe(
        self,
        point: str,
        outcome: RunOutcome,
        detail: str = "",
    ) -> Notification | None:
        """Record a point's outcome and notify if it failed.

        Parameters
        ----------
        point : str
            ``"stages"`` or ``"instance"``
        outcome : RunOutcome
            The point's outcome
        detail : str
            Extra context appended to the message

        Returns
        -------
        Notification | None
            The notification handed to the sink, or None when nothing was sent
        """
        if point not in POINTS:
            msg = f"Unknown observation point: {point}"
            raise ValueError(msg)
        if outcome is not RunOutcome.FAILURE or point in self.sent:
            return None

        notification = self.build(point, outcome, detail)
        self.sent[point] = notification
        try:
            self.sink.send(notification)
        except Exception as e:
            logger.warning("Failed to deliver %s notification: %s", point, e)
        return notification
