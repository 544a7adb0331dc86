"""Data models for the HTTP fetch layer."""

import random
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from psm_monitor.fetch.constants import DEFAULT_MAX_ATTEMPTS


class AttemptKind(str, Enum):
    """Classification of a single request attempt.

    - SUCCESS: HTTP 200 and the validator (if any) accepted the body
    - TRANSPORT_FAILURE: Connection, DNS, TLS, or timeout error
    - VALIDATION_FAILURE: HTTP 200 but the validator rejected the body
    - BAD_STATUS: Any status other than 200
    """

    SUCCESS = "SUCCESS"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    VALIDATION_FAILURE = "VALIDATION_FAILURE"
    BAD_STATUS = "BAD_STATUS"


class HttpRequest(BaseModel):
    """A single logical HTTP request.

    Built per call by a source or the paginator and discarded afterwards.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: Literal["GET", "POST"] = "GET"
    url: Annotated[str, Field(min_length=1, description="Target URL")]
    body: bytes | None = Field(default=None, description="Request body")
    content_type: str | None = Field(default=None, description="Content-Type header")

    @property
    def headers(self) -> dict[str, str]:
        """Headers implied by the request itself."""
        if self.content_type:
            return {"Content-Type": self.content_type}
        return {}


class AttemptOutcome(BaseModel):
    """Result of one attempt made by the request executor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: AttemptKind = Field(description="Classification of the attempt")
    body: bytes = Field(default=b"", description="Response body (success only)")
    status_code: int | None = Field(
        default=None, description="HTTP status code if a response arrived"
    )
    reason: str | None = Field(default=None, description="Failure reason")
    duration_ms: float = Field(default=0.0, ge=0.0)

    @property
    def is_success(self) -> bool:
        """Check if the attempt succeeded."""
        return self.kind == AttemptKind.SUCCESS


class RetryPolicy(BaseModel):
    """Configuration for retry behavior.

    Controls how many attempts one logical call may make and the delay
    between them. Uses exponential backoff:
    delay = base_delay_ms * (exponential_base ^ retry_index).
    The default base delay of 0 retries immediately.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: Annotated[int, Field(ge=1, le=10)] = DEFAULT_MAX_ATTEMPTS
    base_delay_ms: Annotated[int, Field(ge=0, le=60000)] = 0
    max_delay_ms: Annotated[int, Field(ge=0, le=300000)] = 30000
    exponential_base: Annotated[float, Field(ge=1.0, le=5.0)] = 2.0
    jitter_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.0

    def should_retry(self, outcome: AttemptOutcome, attempt: int) -> bool:
        """Determine if another attempt should be made.

        Every failure kind is retried until the budget runs out.

        Args:
            outcome: Outcome of the attempt that just finished.
            attempt: Attempt number that produced the outcome (1-indexed).

        Returns:
            True if another attempt should be made.
        """
        if outcome.is_success:
            return False
        return attempt < self.max_attempts

    def get_delay_ms(self, retry_index: int) -> int:
        """Calculate delay before the next attempt.

        Args:
            retry_index: Number of retries already made (0-indexed).

        Returns:
            Delay in milliseconds.
        """
        if self.base_delay_ms == 0:
            return 0

        delay = self.base_delay_ms * (self.exponential_base**retry_index)
        delay = min(delay, self.max_delay_ms)

        jitter = delay * self.jitter_factor * random.random()  # noqa: S311
        return int(delay + jitter)
