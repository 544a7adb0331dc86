"""Observability module for logging."""

from psm_monitor.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    timed_task,
)


__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "timed_task",
]
