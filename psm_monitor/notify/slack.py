"""Slack incoming-webhook notifier."""

import structlog

from psm_monitor.fetch.client import HttpFetcher


logger = structlog.get_logger()

# Slack answers a delivered webhook message with this exact body
SLACK_OK_BODY = b"ok"


class NotifierError(Exception):
    """Raised when a notifier cannot be used."""


def check_slack_response(body: bytes) -> str | None:
    """Reject any webhook response other than ``ok``."""
    if body.strip() != SLACK_OK_BODY:
        return f"unexpected webhook response: {body[:100]!r}"
    return None


class SlackNotifier:
    """Posts report text to a Slack incoming webhook."""

    def __init__(self, http_client: HttpFetcher, webhook_url: str | None) -> None:
        """Initialize the notifier.

        Args:
            http_client: Retrying HTTP client.
            webhook_url: Incoming webhook URL.

        Raises:
            NotifierError: If no webhook URL is configured.
        """
        if not webhook_url:
            msg = "SLACK_WEBHOOK_URL is not configured"
            raise NotifierError(msg)

        self._http = http_client
        self._webhook_url = webhook_url
        self._log = logger.bind(component="notify", channel="slack")

    def send(self, text: str) -> None:
        """Post one message.

        Args:
            text: Slack mrkdwn text.

        Raises:
            HttpFailedError: If delivery failed after all retries.
        """
        self._http.post(
            self._webhook_url,
            {"text": text},
            validator=check_slack_response,
        )
        self._log.info("slack_message_sent", chars=len(text))
