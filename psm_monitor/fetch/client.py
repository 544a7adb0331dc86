"""HTTP client with bounded retries and response validation."""

import json
import random
import time
from collections.abc import Callable
from io import BytesIO
from typing import Any

import httpx
import structlog
from pydantic import BaseModel

from psm_monitor.fetch.config import FetchConfig
from psm_monitor.fetch.constants import (
    CONTENT_TYPE_JSON,
    HTTP_STATUS_OK,
    MAX_LOGGED_PAYLOAD_CHARS,
    METHOD_GET,
    METHOD_POST,
    REQUEST_ID_BITS,
)
from psm_monitor.fetch.errors import AttemptDeadlineError, HttpFailedError
from psm_monitor.fetch.metrics import FetchMetrics
from psm_monitor.fetch.models import AttemptKind, AttemptOutcome, HttpRequest
from psm_monitor.fetch.redact import redact_url_secrets


logger = structlog.get_logger()

# Inspects a 200 body; a non-None return rejects it and forces a retry.
Validator = Callable[[bytes], str | Exception | None]


def create_http_client(config: FetchConfig) -> httpx.Client:
    """Create the pooled client shared by every call of a fetcher.

    Args:
        config: Fetch configuration.

    Returns:
        Configured httpx client.
    """
    return httpx.Client(
        timeout=httpx.Timeout(config.timeout_seconds),
        limits=httpx.Limits(
            max_connections=config.max_connections,
            max_keepalive_connections=config.max_keepalive_connections,
            keepalive_expiry=config.keepalive_expiry_seconds,
        ),
        headers={"User-Agent": config.user_agent},
    )


def encode_payload(payload: BaseModel | dict[str, Any] | list[Any]) -> bytes:
    """Serialize a request payload to compact JSON.

    Args:
        payload: Pydantic model or plain JSON-compatible value.

    Returns:
        UTF-8 encoded JSON.
    """
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(by_alias=True).encode("utf-8")
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


class HttpFetcher:
    """HTTP client with bounded retries and response validation.

    Every logical call is tagged with a random correlation id, tried
    up to ``retry_policy.max_attempts`` times, and either returns the
    body of the first accepted 200 response or raises HttpFailedError.
    The underlying connection pool is shared by all calls.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the HTTP fetcher.

        Args:
            config: Fetch configuration (defaults apply when omitted).
            client: Optional pre-built httpx client, mainly for tests.
            sleep: Sleep function used for backoff between attempts.
            clock: Monotonic clock used for the per-attempt deadline.
        """
        self._config = config or FetchConfig()
        self._client = client or create_http_client(self._config)
        self._sleep = sleep
        self._clock = clock
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    @property
    def config(self) -> FetchConfig:
        """Get the fetch configuration."""
        return self._config

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._client.close()

    def __enter__(self) -> "HttpFetcher":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def get(self, url: str, validator: Validator | None = None) -> bytes:
        """Issue a GET request with retries.

        Args:
            url: The URL to fetch.
            validator: Optional body check.

        Returns:
            Response body.

        Raises:
            HttpFailedError: If every attempt failed.
        """
        return self.request(HttpRequest(method=METHOD_GET, url=url), validator)

    def post(
        self,
        url: str,
        payload: BaseModel | dict[str, Any] | list[Any],
        validator: Validator | None = None,
    ) -> bytes:
        """Issue a JSON POST request with retries.

        Args:
            url: The URL to post to.
            payload: Request payload, serialized as JSON.
            validator: Optional body check.

        Returns:
            Response body.

        Raises:
            HttpFailedError: If every attempt failed.
        """
        request = HttpRequest(
            method=METHOD_POST,
            url=url,
            body=encode_payload(payload),
            content_type=CONTENT_TYPE_JSON,
        )
        return self.request(request, validator)

    def request(
        self,
        request: HttpRequest,
        validator: Validator | None = None,
    ) -> bytes:
        """Execute a request under the retry policy.

        Args:
            request: The request to execute.
            validator: Optional body check run on every 200 response.

        Returns:
            Body of the first accepted response.

        Raises:
            HttpFailedError: If the retry budget is exhausted.
        """
        policy = self._config.retry_policy
        req_id = random.getrandbits(REQUEST_ID_BITS)  # noqa: S311
        safe_url = redact_url_secrets(request.url)
        log = self._log.bind(req_id=req_id)

        log.info(
            "http_request",
            url=safe_url,
            method=request.method,
            data=self._describe_payload(request.body),
        )
        self._metrics.record_request()

        outcome: AttemptOutcome | None = None
        attempt = 0

        for attempt in range(1, policy.max_attempts + 1):
            if attempt > 1:
                self._metrics.record_retry()
                delay_ms = policy.get_delay_ms(attempt - 2)
                if delay_ms > 0:
                    self._sleep(delay_ms / 1000.0)

            outcome = self._execute_single(request)
            if outcome.is_success and validator is not None:
                outcome = self._validate(outcome, validator)

            self._metrics.record_attempt(
                outcome.kind,
                outcome.status_code,
                len(outcome.body),
                outcome.duration_ms,
            )

            if outcome.is_success:
                log.debug(
                    "http_attempt",
                    status="success",
                    attempt=attempt,
                    cost_ms=round(outcome.duration_ms, 2),
                )
                return outcome.body

            log.debug(
                "http_attempt",
                status="retry",
                attempt=attempt,
                cost_ms=round(outcome.duration_ms, 2),
                kind=outcome.kind.value,
                reason=outcome.reason,
            )

            if not policy.should_retry(outcome, attempt):
                break

        self._metrics.record_failure()
        log.error(
            "http_failed",
            url=safe_url,
            reason="retry exceeded",
            attempts=attempt,
        )
        raise HttpFailedError(
            url=safe_url,
            req_id=req_id,
            attempts=attempt,
            last_outcome=outcome,
        )

    def _execute_single(self, request: HttpRequest) -> AttemptOutcome:
        """Execute exactly one HTTP call.

        The whole attempt, body included, is bounded by
        ``timeout_seconds``. httpx applies its timeout to each phase
        separately, so the body is streamed and checked against the
        deadline after every chunk.

        Args:
            request: The request to send.

        Returns:
            Outcome of the attempt. Never raises for network errors.
        """
        start_ns = time.perf_counter_ns()
        deadline = self._clock() + self._config.timeout_seconds

        try:
            with self._client.stream(
                request.method,
                request.url,
                content=request.body,
                headers=request.headers,
            ) as response:
                if response.status_code != HTTP_STATUS_OK:
                    return AttemptOutcome(
                        kind=AttemptKind.BAD_STATUS,
                        status_code=response.status_code,
                        reason=f"invalid status code {response.status_code}",
                        duration_ms=_elapsed_ms(start_ns),
                    )
                body = self._read_body_with_deadline(response, deadline)
        except (httpx.HTTPError, httpx.InvalidURL, AttemptDeadlineError) as e:
            return AttemptOutcome(
                kind=AttemptKind.TRANSPORT_FAILURE,
                reason=str(e) or type(e).__name__,
                duration_ms=_elapsed_ms(start_ns),
            )

        return AttemptOutcome(
            kind=AttemptKind.SUCCESS,
            body=body,
            status_code=HTTP_STATUS_OK,
            duration_ms=_elapsed_ms(start_ns),
        )

    def _read_body_with_deadline(
        self, response: httpx.Response, deadline: float
    ) -> bytes:
        """Read a streamed response body before the attempt deadline.

        Args:
            response: Streaming HTTP response.
            deadline: Clock reading after which the attempt is abandoned.

        Returns:
            Response body bytes.

        Raises:
            AttemptDeadlineError: If the deadline passes mid-body.
        """
        buffer = BytesIO()

        if self._clock() > deadline:
            raise AttemptDeadlineError(self._config.timeout_seconds)

        for chunk in response.iter_bytes():
            buffer.write(chunk)
            if self._clock() > deadline:
                raise AttemptDeadlineError(self._config.timeout_seconds)

        return buffer.getvalue()

    def _validate(self, outcome: AttemptOutcome, validator: Validator) -> AttemptOutcome:
        """Run the caller's validator on a successful outcome.

        Args:
            outcome: Successful attempt outcome.
            validator: Body check.

        Returns:
            The same outcome, or a VALIDATION_FAILURE outcome.
        """
        try:
            rejection = validator(outcome.body)
        except Exception as e:  # noqa: BLE001
            rejection = e

        if rejection is None:
            return outcome

        return AttemptOutcome(
            kind=AttemptKind.VALIDATION_FAILURE,
            status_code=outcome.status_code,
            reason=str(rejection) or type(rejection).__name__,
            duration_ms=outcome.duration_ms,
        )

    def _describe_payload(self, body: bytes | None) -> str:
        """Render a request body for the request log line."""
        if body is None:
            return "nil"
        text = body.decode("utf-8", errors="replace")
        if len(text) > MAX_LOGGED_PAYLOAD_CHARS:
            return text[:MAX_LOGGED_PAYLOAD_CHARS] + "..."
        return text


def _elapsed_ms(start_ns: int) -> float:
    """Milliseconds elapsed since a perf_counter_ns reading."""
    return (time.perf_counter_ns() - start_ns) / 1_000_000
