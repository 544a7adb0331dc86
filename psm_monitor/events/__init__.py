"""Paginated block event feed."""

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
from psm_monitor.events.paginator import EventPaginator


__all__ = [
    "BLOCK_EVENTS_PATH",
    "DEFAULT_MAX_PAGES",
    "LATEST_EVENTS_PATH",
    "DrainError",
    "DrainErrorClass",
    "DrainResult",
    "EventPaginator",
    "EventsPage",
]
