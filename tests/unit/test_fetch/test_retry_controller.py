"""Unit tests for the retrying HTTP fetcher."""

import json
from collections.abc import Iterator

import httpx
import pytest
from structlog.testing import capture_logs

from psm_monitor.fetch.client import HttpFetcher, encode_payload
from psm_monitor.fetch.config import FetchConfig
from psm_monitor.fetch.errors import HttpFailedError
from psm_monitor.fetch.metrics import FetchMetrics
from psm_monitor.fetch.models import AttemptKind, RetryPolicy
from psm_monitor.sources.models import TriggerRequest
from tests.helpers.http import Handler, make_fetcher


URL = "https://node.example.com/wallet/getchainparameters"


@pytest.fixture(autouse=True)
def reset_metrics() -> Iterator[None]:
    """Reset fetch metrics around each test."""
    FetchMetrics.reset()
    yield
    FetchMetrics.reset()


def failing_then_ok(
    failures: int, body: bytes = b'{"ok":true}'
) -> tuple[Handler, list[httpx.Request]]:
    """Handler that returns 500 for the first ``failures`` calls."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) <= failures:
            return httpx.Response(500)
        return httpx.Response(200, content=body)

    return handler, calls


class TestSuccessfulCalls:
    """Tests for calls that eventually succeed."""

    def test_first_attempt_success(self) -> None:
        """Test a 200 on the first attempt returns its body."""
        handler, calls = failing_then_ok(0, b"hello")
        fetcher = make_fetcher(handler)

        assert fetcher.get(URL) == b"hello"
        assert len(calls) == 1

    @pytest.mark.parametrize("failures", [1, 2])
    def test_success_after_failures(self, failures: int) -> None:
        """Test the body of the first good attempt is returned."""
        handler, calls = failing_then_ok(failures, b"payload")
        fetcher = make_fetcher(handler)

        assert fetcher.get(URL) == b"payload"
        assert len(calls) == failures + 1

    def test_validator_rejection_then_accept(self) -> None:
        """Test a validator rejection forces another attempt."""
        bodies = iter([b"nope", b"nope", b"yes"])
        fetcher = make_fetcher(lambda _: httpx.Response(200, content=next(bodies)))

        def validator(body: bytes) -> str | None:
            return None if body == b"yes" else "not yet"

        assert fetcher.get(URL, validator=validator) == b"yes"

    def test_non_200_success_codes_are_failures(self) -> None:
        """Test that 204 counts as a failed attempt."""
        statuses = iter([204, 201, 200])
        fetcher = make_fetcher(lambda _: httpx.Response(next(statuses), content=b"x"))

        assert fetcher.get(URL) == b"x"


class TestExhaustion:
    """Tests for calls that exhaust the retry budget."""

    def test_exactly_three_attempts(self) -> None:
        """Test a permanently failing endpoint is tried exactly three times."""
        handler, calls = failing_then_ok(99)
        fetcher = make_fetcher(handler)

        with pytest.raises(HttpFailedError) as exc_info:
            fetcher.get(URL)

        assert len(calls) == 3
        assert exc_info.value.attempts == 3
        assert exc_info.value.last_outcome is not None
        assert exc_info.value.last_outcome.kind == AttemptKind.BAD_STATUS
        assert exc_info.value.last_outcome.status_code == 500

    def test_always_rejecting_validator(self) -> None:
        """Test a validator that never accepts exhausts the budget."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, content=b"{}")

        fetcher = make_fetcher(handler)

        with pytest.raises(HttpFailedError) as exc_info:
            fetcher.get(URL, validator=lambda _: ValueError("rejected"))

        assert len(calls) == 3
        outcome = exc_info.value.last_outcome
        assert outcome is not None
        assert outcome.kind == AttemptKind.VALIDATION_FAILURE
        assert outcome.reason == "rejected"

    def test_raising_validator_counts_as_rejection(self) -> None:
        """Test a validator that raises is treated as a rejection."""

        def validator(body: bytes) -> None:
            raise ValueError("boom")

        fetcher = make_fetcher(lambda _: httpx.Response(200, content=b"{}"))

        with pytest.raises(HttpFailedError):
            fetcher.get(URL, validator=validator)

    def test_transport_errors_are_retried(self) -> None:
        """Test connection errors are retried and then surfaced."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = make_fetcher(handler)

        with pytest.raises(HttpFailedError) as exc_info:
            fetcher.get(URL)

        assert len(calls) == 3
        assert exc_info.value.last_outcome is not None
        assert exc_info.value.last_outcome.kind == AttemptKind.TRANSPORT_FAILURE

    def test_custom_attempt_budget(self) -> None:
        """Test the attempt budget is configurable."""
        handler, calls = failing_then_ok(99)
        fetcher = make_fetcher(handler, max_attempts=5)

        with pytest.raises(HttpFailedError):
            fetcher.get(URL)

        assert len(calls) == 5

    def test_error_message(self) -> None:
        """Test the error names the attempts and the URL."""
        handler, _ = failing_then_ok(99)
        fetcher = make_fetcher(handler)

        with pytest.raises(HttpFailedError, match="failed after 3 attempts"):
            fetcher.get(URL)

    def test_url_secrets_redacted_in_error(self) -> None:
        """Test API keys never appear in the raised error."""
        handler, _ = failing_then_ok(99)
        fetcher = make_fetcher(handler)

        with pytest.raises(HttpFailedError) as exc_info:
            fetcher.get("https://api.example.com/gas?apikey=SECRET123")

        assert "SECRET123" not in str(exc_info.value)
        assert "SECRET123" not in exc_info.value.url

    def test_invalid_url_is_a_transport_failure(self) -> None:
        """Test a URL httpx cannot parse fails the call instead of escaping."""
        handler, calls = failing_then_ok(0)
        fetcher = make_fetcher(handler)

        with pytest.raises(HttpFailedError) as exc_info:
            fetcher.get("http://host:notaport/x")

        assert calls == []
        assert exc_info.value.attempts == 3
        assert exc_info.value.last_outcome is not None
        assert exc_info.value.last_outcome.kind == AttemptKind.TRANSPORT_FAILURE


class TestBackoff:
    """Tests for delays between attempts."""

    def test_no_sleep_by_default(self) -> None:
        """Test retries are immediate with the default policy."""
        sleeps: list[float] = []
        handler, _ = failing_then_ok(2)
        fetcher = make_fetcher(handler, sleep=sleeps.append)

        fetcher.get(URL)

        assert sleeps == []

    def test_exponential_backoff(self) -> None:
        """Test configured backoff doubles between retries."""
        sleeps: list[float] = []
        handler, _ = failing_then_ok(99)
        fetcher = make_fetcher(handler, base_delay_ms=100, sleep=sleeps.append)

        with pytest.raises(HttpFailedError):
            fetcher.get(URL)

        assert sleeps == [0.1, 0.2]


class TestPost:
    """Tests for JSON POST requests."""

    def test_post_sends_json(self) -> None:
        """Test POST bodies are JSON with a JSON content type."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"ok")

        fetcher = make_fetcher(handler)
        fetcher.post(URL, {"text": "hi"})

        request = seen[0]
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {"text": "hi"}

    def test_post_is_retried(self) -> None:
        """Test POST uses the same retry budget as GET."""
        handler, calls = failing_then_ok(2)
        fetcher = make_fetcher(handler)

        fetcher.post(URL, {"a": 1})

        assert len(calls) == 3
        assert all(call.content == b'{"a":1}' for call in calls)

    def test_encode_payload_model(self) -> None:
        """Test pydantic payloads are serialized with their field names."""
        payload = TriggerRequest(
            owner_address="Towner",
            contract_address="Tcontract",
            function_selector="balanceOf(address)",
        )

        decoded = json.loads(encode_payload(payload))

        assert decoded["owner_address"] == "Towner"
        assert decoded["visible"] is True


class TestLogging:
    """Tests for request log lines."""

    def test_attempts_share_correlation_id(self) -> None:
        """Test every line of one call carries the same req_id."""
        handler, _ = failing_then_ok(99)

        with capture_logs() as logs:
            fetcher = make_fetcher(handler)
            with pytest.raises(HttpFailedError) as exc_info:
                fetcher.get(URL)

        fetch_logs = [
            entry
            for entry in logs
            if entry["event"] in {"http_request", "http_attempt", "http_failed"}
        ]
        assert [entry["event"] for entry in fetch_logs] == [
            "http_request",
            "http_attempt",
            "http_attempt",
            "http_attempt",
            "http_failed",
        ]
        assert {entry["req_id"] for entry in fetch_logs} == {exc_info.value.req_id}

    def test_separate_calls_get_separate_ids(self) -> None:
        """Test each logical call draws its own correlation id."""
        with capture_logs() as logs:
            fetcher = make_fetcher(lambda _: httpx.Response(200, content=b"x"))
            for _ in range(5):
                fetcher.get(URL)

        ids = {entry["req_id"] for entry in logs if entry["event"] == "http_request"}
        assert len(ids) > 1

    def test_request_line_describes_payload(self) -> None:
        """Test the request line shows the POST body and nil for GET."""
        with capture_logs() as logs:
            fetcher = make_fetcher(lambda _: httpx.Response(200, content=b"x"))
            fetcher.get(URL)
            fetcher.post(URL, {"k": "v"})

        requests = [entry for entry in logs if entry["event"] == "http_request"]
        assert requests[0]["data"] == "nil"
        assert requests[1]["data"] == '{"k":"v"}'

    def test_failed_line_level(self) -> None:
        """Test exhaustion is logged at error level."""
        handler, _ = failing_then_ok(99)

        with capture_logs() as logs:
            fetcher = make_fetcher(handler)
            with pytest.raises(HttpFailedError):
                fetcher.get(URL)

        failed = [entry for entry in logs if entry["event"] == "http_failed"]
        assert failed[0]["log_level"] == "error"
        assert failed[0]["attempts"] == 3


class TestFetcherLifecycle:
    """Tests for client ownership."""

    def test_context_manager_closes_client(self) -> None:
        """Test leaving the context closes the pooled client."""
        client = httpx.Client(
            transport=httpx.MockTransport(lambda _: httpx.Response(200))
        )

        with HttpFetcher(client=client):
            pass

        assert client.is_closed


class FakeClock:
    """Monotonic clock advanced by the test."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def trickling_fetcher(
    clock: FakeClock, step_seconds: float, chunks: int | None = None
) -> HttpFetcher:
    """Fetcher whose server sends one byte per ``step_seconds``.

    With ``chunks`` unset the body never ends.
    """

    def trickle() -> Iterator[bytes]:
        sent = 0
        while chunks is None or sent < chunks:
            clock.now += step_seconds
            sent += 1
            yield b"a"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=trickle())

    config = FetchConfig(
        timeout_seconds=1.0, retry_policy=RetryPolicy(max_attempts=1)
    )
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpFetcher(config, client=client, sleep=lambda _: None, clock=clock)


class TestAttemptDeadline:
    """Tests for the total per-attempt timeout."""

    def test_trickling_body_is_abandoned(self) -> None:
        """Test a body that never finishes fails once the budget is spent."""
        clock = FakeClock()
        fetcher = trickling_fetcher(clock, step_seconds=0.5)

        with pytest.raises(HttpFailedError) as exc_info:
            fetcher.get(URL)

        outcome = exc_info.value.last_outcome
        assert outcome is not None
        assert outcome.kind == AttemptKind.TRANSPORT_FAILURE
        assert outcome.reason is not None
        assert "total timeout" in outcome.reason
        assert clock.now <= 1.5

    def test_slow_body_within_budget(self) -> None:
        """Test a body that completes inside the budget is returned."""
        clock = FakeClock()
        fetcher = trickling_fetcher(clock, step_seconds=0.2, chunks=4)

        assert fetcher.get(URL) == b"aaaa"

    def test_each_attempt_gets_a_fresh_budget(self) -> None:
        """Test the deadline is measured per attempt, not per call."""
        clock = FakeClock()
        bodies: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(1)
            clock.now += 0.9
            return httpx.Response(200, content=b"ok")

        config = FetchConfig(
            timeout_seconds=1.0, retry_policy=RetryPolicy(max_attempts=3)
        )
        client = httpx.Client(transport=httpx.MockTransport(handler))
        fetcher = HttpFetcher(
            config,
            client=client,
            sleep=lambda _: None,
            clock=clock,
        )

        def second_try_only(body: bytes) -> str | None:
            return None if len(bodies) == 2 else "not yet"

        assert fetcher.get(URL, validator=second_try_only) == b"ok"
        assert len(bodies) == 2
