"""Failure notification."""

from cigate.notify.notifier import (
    POINT_INSTANCE,
    POINT_STAGES,
    FailureNotifier,
)
from cigate.notify.sinks import (
    LoggingSink,
    NotificationSink,
    SlackWebhookSink,
    sink_from_spec,
)

__all__ = [
    "POINT_INSTANCE",
    "POINT_STAGES",
    "FailureNotifier",
    "LoggingSink",
    "NotificationSink",
    "SlackWebhookSink",
    "sink_from_spec",
]
