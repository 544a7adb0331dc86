"""Metrics collection for the HTTP fetch layer."""

from dataclasses import dataclass, field
from typing import ClassVar

from psm_monitor.fetch.models import AttemptKind


@dataclass
class FetchMetrics:
    """Metrics for HTTP fetch operations.

    Singleton class that tracks request counts, attempts, retries,
    and terminal failures.
    """

    http_requests_total: int = 0
    http_attempts_total: int = 0
    http_retry_total: int = 0
    http_failed_total: int = 0
    http_status_total: dict[int, int] = field(default_factory=dict)
    http_attempt_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    http_duration_ms_total: float = 0.0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self) -> None:
        """Record a logical request entering the retry controller."""
        self.http_requests_total += 1

    def record_attempt(
        self,
        kind: AttemptKind,
        status_code: int | None,
        bytes_received: int,
        duration_ms: float,
    ) -> None:
        """Record one finished attempt.

        Args:
            kind: Attempt classification.
            status_code: HTTP status code, if a response arrived.
            bytes_received: Number of body bytes received.
            duration_ms: Attempt duration in milliseconds.
        """
        self.http_attempts_total += 1
        self.http_bytes_total += bytes_received
        self.http_duration_ms_total += duration_ms

        if status_code is not None:
            self.http_status_total[status_code] = (
                self.http_status_total.get(status_code, 0) + 1
            )

        if kind != AttemptKind.SUCCESS:
            key = kind.value
            self.http_attempt_failures_total[key] = (
                self.http_attempt_failures_total.get(key, 0) + 1
            )

    def record_retry(self) -> None:
        """Record a retry attempt."""
        self.http_retry_total += 1

    def record_failure(self) -> None:
        """Record a logical request that exhausted its retry budget."""
        self.http_failed_total += 1

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_requests_total": self.http_requests_total,
            "http_attempts_total": self.http_attempts_total,
            "http_retry_total": self.http_retry_total,
            "http_failed_total": self.http_failed_total,
            "http_status_total": dict(self.http_status_total),
            "http_attempt_failures_total": dict(self.http_attempt_failures_total),
            "http_bytes_total": self.http_bytes_total,
            "http_duration_ms_total": self.http_duration_ms_total,
        }

    @property
    def avg_attempt_duration_ms(self) -> float:
        """Calculate average attempt duration.

        Returns:
            Average duration in milliseconds.
        """
        if self.http_attempts_total == 0:
            return 0.0
        return self.http_duration_ms_total / self.http_attempts_total
