"""Cursor-following paginator for the block event feed."""

from typing import Any

import structlog
from pydantic import ValidationError

from psm_monitor.events.constants import (
    BLOCK_EVENTS_PATH,
    DEFAULT_MAX_PAGES,
    LATEST_EVENTS_PATH,
)
from psm_monitor.events.models import (
    DrainError,
    DrainErrorClass,
    DrainResult,
    EventsPage,
)
from psm_monitor.fetch.client import HttpFetcher
from psm_monitor.fetch.errors import HttpFailedError
from psm_monitor.fetch.redact import redact_url_secrets


logger = structlog.get_logger()


class EventPaginator:
    """Drains a paginated event feed by following ``meta.links.next``.

    Pages are fetched strictly one after another through the retry
    controller and their ``data`` items are appended in arrival order.
    A failing page stops the drain and the events gathered so far are
    returned; nothing is raised to the caller.
    """

    def __init__(
        self,
        http_client: HttpFetcher,
        event_server: str,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        """Initialize the paginator.

        Args:
            http_client: Retrying HTTP client.
            event_server: Base URL of the event server (with trailing slash).
            max_pages: Maximum pages followed in one drain.
        """
        if max_pages < 1:
            msg = f"max_pages must be positive, got {max_pages}"
            raise ValueError(msg)

        self._http = http_client
        self._event_server = event_server
        self._max_pages = max_pages
        self._log = logger.bind(component="events")

    def fetch_block_events(self, block_number: int) -> DrainResult:
        """Drain all events of one block.

        Args:
            block_number: Block height.

        Returns:
            Drain result with the block's events.
        """
        path = BLOCK_EVENTS_PATH.format(block_number=block_number)
        return self.drain(self._event_server + path)

    def fetch_latest_events(self) -> DrainResult:
        """Drain all events of the latest block.

        Returns:
            Drain result with the latest block's events.
        """
        return self.drain(self._event_server + LATEST_EVENTS_PATH)

    def drain(self, url: str) -> DrainResult:
        """Follow the feed cursor from a starting URL until it is exhausted.

        Args:
            url: First page URL.

        Returns:
            All events in page order; ``error`` is set if the drain
            stopped before the cursor emptied.
        """
        log = self._log.bind(start_url=redact_url_secrets(url))
        events: list[dict[str, Any]] = []
        visited: set[str] = set()
        pages = 0
        cursor = url

        while cursor:
            if pages >= self._max_pages:
                return self._stop(
                    log,
                    events,
                    pages,
                    DrainErrorClass.PAGINATION_EXCEEDED,
                    f"Stopped after {pages} pages without reaching the end",
                    cursor,
                )

            if cursor in visited:
                return self._stop(
                    log,
                    events,
                    pages,
                    DrainErrorClass.CURSOR_REPEATED,
                    "Feed cursor points to a page already fetched",
                    cursor,
                )
            visited.add(cursor)

            try:
                body = self._http.get(cursor)
            except HttpFailedError as e:
                return self._stop(
                    log,
                    events,
                    pages,
                    DrainErrorClass.HTTP_FAILED,
                    str(e),
                    cursor,
                )

            try:
                page = EventsPage.model_validate_json(body)
            except ValidationError as e:
                return self._stop(
                    log,
                    events,
                    pages,
                    DrainErrorClass.PARSE,
                    f"Invalid feed page: {e.error_count()} validation errors",
                    cursor,
                )

            events.extend(page.data)
            pages += 1
            cursor = page.next_cursor

        log.info("events_drained", pages=pages, events=len(events))
        return DrainResult(events=events, pages=pages)

    def _stop(  # noqa: PLR0913
        self,
        log: structlog.stdlib.BoundLogger,
        events: list[dict[str, Any]],
        pages: int,
        error_class: DrainErrorClass,
        message: str,
        cursor: str,
    ) -> DrainResult:
        """Build a partial drain result and log why the drain stopped."""
        safe_cursor = redact_url_secrets(cursor)
        log.warning(
            "events_drain_stopped",
            error_class=error_class.value,
            pages=pages,
            events=len(events),
            cursor=safe_cursor,
        )
        return DrainResult(
            events=events,
            pages=pages,
            error=DrainError(
                error_class=error_class,
                message=message,
                cursor=safe_cursor,
            ),
        )
