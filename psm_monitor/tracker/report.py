"""Periodic fee report: windowed averages formatted for Slack."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

import structlog

from psm_monitor.tracker.constants import (
    DAY_WINDOW_DAYS,
    MISSING_FEE_TEXT,
    NETWORKS,
    REPORT_TOKEN,
    WEEK_WINDOW_DAYS,
)
from psm_monitor.tracker.models import FeeAverages
from psm_monitor.tracker.store import FeeStore


logger = structlog.get_logger()


class Notifier(Protocol):
    """Delivers a formatted report to a messaging channel."""

    def send(self, text: str) -> None:
        """Deliver one message."""
        ...


def _format_fee(value: float | None) -> str:
    if value is None:
        return MISSING_FEE_TEXT
    return f"`{value:.2f}$`"


def format_window(title: str, averages: FeeAverages) -> str:
    """Format one averaging window as a Slack mrkdwn block.

    Args:
        title: Heading line.
        averages: Averages of the window.

    Returns:
        Multi-line block ending in a newline.
    """
    lines = [f"{title}:"]
    for network in NETWORKS:
        fee = averages.range_for(network)
        lines.append(
            f"> {network.label}: {_format_fee(fee.low)} - {_format_fee(fee.high)}"
        )
    return "\n".join(lines) + "\n"


def format_report(day: FeeAverages, week: FeeAverages) -> str:
    """Format the daily and weekly averages into one message.

    Args:
        day: Averages over the last day.
        week: Averages over the last week.

    Returns:
        Message text.
    """
    return format_window(
        f"{REPORT_TOKEN} daily average fee", day
    ) + format_window(f"{REPORT_TOKEN} weekly average fee", week)


class FeeReporter:
    """Computes the 24h and 7d averages and hands them to a notifier."""

    def __init__(
        self,
        store: FeeStore,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        """Initialize the reporter.

        Args:
            store: Open fee store.
            notifier: Message delivery; None only builds the text.
            clock: Returns the current time.
        """
        self._store = store
        self._notifier = notifier
        self._clock = clock
        self._log = logger.bind(component="report")

    def build(self) -> str:
        """Compute both windows and format the message.

        Returns:
            Message text.
        """
        now = self._clock()
        day = self._store.average_last_days(DAY_WINDOW_DAYS, now)
        week = self._store.average_last_days(WEEK_WINDOW_DAYS, now)

        self._log.info(
            "report_built",
            day_samples=day.samples,
            week_samples=week.samples,
        )
        return format_report(day, week)

    def report(self) -> str:
        """Build the message and deliver it.

        Returns:
            The delivered text.
        """
        text = self.build()
        if self._notifier is not None:
            self._notifier.send(text)
            self._log.info("report_sent")
        return text
