"""Error types for the HTTP fetch layer."""

from psm_monitor.fetch.models import AttemptOutcome


class FetchError(Exception):
    """Base exception for fetch layer errors."""


class AttemptDeadlineError(FetchError):
    """Raised inside an attempt whose total time exceeded the timeout."""

    def __init__(self, timeout_seconds: float) -> None:
        """Initialize the error.

        Args:
            timeout_seconds: The per-attempt budget that was exceeded.
        """
        self.timeout_seconds = timeout_seconds
        super().__init__(f"attempt exceeded total timeout of {timeout_seconds}s")


class HttpFailedError(FetchError):
    """Raised when a logical call exhausts its retry budget.

    This is the only error surfaced past the retry controller. The
    individual attempt failures are logged; the final one is kept on
    the exception for callers that want to inspect it.

    Attributes:
        url: Redacted URL of the failed call.
        req_id: Correlation id shared by all attempt log lines.
        attempts: Number of attempts made.
        last_outcome: Outcome of the final attempt.
    """

    def __init__(
        self,
        url: str,
        req_id: int,
        attempts: int,
        last_outcome: AttemptOutcome | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            url: Redacted URL of the failed call.
            req_id: Correlation id of the call.
            attempts: Number of attempts made.
            last_outcome: Outcome of the final attempt.
        """
        self.url = url
        self.req_id = req_id
        self.attempts = attempts
        self.last_outcome = last_outcome
        super().__init__(
            f"net: http request failed after {attempts} attempts: {url}"
        )
