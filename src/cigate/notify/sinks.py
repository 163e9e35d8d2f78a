"""Notification sinks."""

from abc import ABC, abstractmethod
from typing import Any

import requests

from cigate.common.errors import NotificationError
from cigate.models import Notification, NotifySpec, RunOutcome
from cigate_common.env import read_str
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

REQUEST_TIMEOUT = 15

STATUS_COLORS = {
    RunOutcome.SUCCESS: "good",
    RunOutcome.FAILURE: "danger",
    RunOutcome.CANCELLED: "warning",
    RunOutcome.SKIPPED: "#cccccc",
}


class NotificationSink(ABC):
    """Destination for failure notifications."""

    @abstractmethod
    def send(self, notification: Notification) -> None:
        """Deliver a notification.

        Raises
        ------
        NotificationError
            If delivery failed
        """


class LoggingSink(NotificationSink):
    """Write notifications to the log. Used when no webhook is configured."""

    def send(self, notification: Notification) -> None:
        logger.warning(
            "[%s] %s: %s (%s)",
            notification.point,
            notification.status.value,
            notification.message,
            notification.link,
        )


class SlackWebhookSink(NotificationSink):
    """Post notifications to a Slack incoming webhook.

    Parameters
    ----------
    webhook_url : str
        Incoming webhook URL
    channel : str | None
        Channel override
    username : str
        Bot display name
    icon_url : str | None
        Bot avatar URL
    title : str
        Attachment title, usually the pipeline's display name
    """

    def __init__(
        self,
        webhook_url: str,
        channel: str | None = None,
        username: str = "cigate",
        icon_url: str | None = None,
        title: str = "",
    ) -> None:
        self.webhook_url = webhook_url
        self.channel = channel
        self.username = username
        self.icon_url = icon_url
        self.title = title

    def build_payload(self, notification: Notification) -> dict[str, Any]:
        """Build the webhook JSON body."""
        payload: dict[str, Any] = {
            "username": self.username,
            "attachments": [
                {
                    "color": STATUS_COLORS.get(notification.status, "danger"),
                    "title": self.title or notification.point,
                    "title_link": notification.link,
                    "text": f"{notification.message} ({notification.link})",
                    "fallback": notification.message,
                },
            ],
        }
        if self.channel:
            payload["channel"] = self.channel
        if self.icon_url:
            payload["icon_url"] = self.icon_url
        return payload

    def send(self, notification: Notification) -> None:
        try:
            resp = requests.post(
                self.webhook_url,
                json=self.build_payload(notification),
                timeout=REQUEST_TIMEOUT,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            msg = f"Slack webhook delivery failed: {e}"
            raise NotificationError(msg) from e
        logger.debug("Sent %s notification to Slack", notification.point)


def sink_from_spec(spec: NotifySpec | None) -> NotificationSink:
    """Pick a Slack sink when the webhook variable is set, else log to the file."""
    if spec is None:
        return LoggingSink()
    webhook = read_str(spec.webhook_env)
    if not webhook:
        logger.debug("%s not set, notifications go to the log", spec.webhook_env)
        return LoggingSink()
    return SlackWebhookSink(
        webhook_url=webhook,
        channel=spec.channel or read_str("SLACK_CHANNEL"),
        username=read_str("SLACK_USERNAME") or spec.username,
        icon_url=spec.icon_url or read_str("SLACK_ICON"),
        title=spec.title,
    )
