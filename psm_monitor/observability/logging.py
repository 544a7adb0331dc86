"""Structured logging configuration."""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

import structlog


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the monitor.

    Sets up structlog with timestamps, log levels, and context binding,
    rendering either JSON lines or colored console output.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    # httpx logs every request through the standard library at INFO
    logging.basicConfig(format="%(message)s", stream=output, level=level)
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def bind_run_context(run_id: str, command: str | None = None) -> None:
    """Bind run context to all subsequent log messages.

    Args:
        run_id: Unique run identifier.
        command: CLI command being executed.
    """
    structlog.contextvars.bind_contextvars(run_id=run_id)
    if command is not None:
        structlog.contextvars.bind_contextvars(command=command)


def clear_run_context() -> None:
    """Clear run context from log messages."""
    structlog.contextvars.unbind_contextvars("run_id", "command")


@contextmanager
def timed_task(name: str) -> Iterator[None]:
    """Log the wall-clock cost of a scheduled task when it finishes.

    The completion line is written even if the task raises.

    Args:
        name: Task name, e.g. ``track`` or ``report``.
    """
    log = structlog.get_logger().bind(component="scheduler", task=name)
    start_ns = time.perf_counter_ns()
    succeeded = False
    try:
        yield
        succeeded = True
    finally:
        cost_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        log.info(
            "scheduled_task_complete",
            cost_ms=round(cost_ms, 3),
            succeeded=succeeded,
        )
