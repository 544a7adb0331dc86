"""Unit tests for retry policy decisions."""

import pytest
from pydantic import ValidationError

from psm_monitor.fetch.config import FetchConfig
from psm_monitor.fetch.models import AttemptKind, AttemptOutcome, RetryPolicy


class TestRetryPolicy:
    """Tests for RetryPolicy model."""

    def test_default_values(self) -> None:
        """Test default retry policy values."""
        policy = RetryPolicy()

        assert policy.max_attempts == 3
        assert policy.base_delay_ms == 0
        assert policy.max_delay_ms == 30000
        assert policy.exponential_base == 2.0
        assert policy.jitter_factor == 0.0

    def test_attempts_must_be_positive(self) -> None:
        """Test a zero attempt budget is rejected."""
        with pytest.raises(ValidationError):
            RetryPolicy(max_attempts=0)

    def test_policy_is_frozen(self) -> None:
        """Test policies cannot be mutated after creation."""
        policy = RetryPolicy()

        with pytest.raises(ValidationError):
            policy.max_attempts = 5  # type: ignore[misc]


class TestShouldRetry:
    """Tests for retry decision logic."""

    @pytest.fixture
    def policy(self) -> RetryPolicy:
        """Create a standard retry policy."""
        return RetryPolicy(max_attempts=3)

    @pytest.mark.parametrize(
        "kind",
        [
            AttemptKind.TRANSPORT_FAILURE,
            AttemptKind.VALIDATION_FAILURE,
            AttemptKind.BAD_STATUS,
        ],
    )
    def test_failures_retried_within_budget(
        self, policy: RetryPolicy, kind: AttemptKind
    ) -> None:
        """Test every failure kind is retried while attempts remain."""
        outcome = AttemptOutcome(kind=kind, reason="failed")

        assert policy.should_retry(outcome, attempt=1) is True
        assert policy.should_retry(outcome, attempt=2) is True
        assert policy.should_retry(outcome, attempt=3) is False

    def test_success_not_retried(self, policy: RetryPolicy) -> None:
        """Test a successful outcome ends the call."""
        outcome = AttemptOutcome(kind=AttemptKind.SUCCESS, body=b"{}", status_code=200)

        assert policy.should_retry(outcome, attempt=1) is False


class TestDelayCalculation:
    """Tests for delay calculation."""

    def test_zero_base_delay(self) -> None:
        """Test the default policy retries immediately."""
        policy = RetryPolicy()

        assert policy.get_delay_ms(0) == 0
        assert policy.get_delay_ms(5) == 0

    def test_exponential_growth(self) -> None:
        """Test delays grow exponentially without jitter."""
        policy = RetryPolicy(base_delay_ms=100, exponential_base=2.0)

        assert policy.get_delay_ms(0) == 100
        assert policy.get_delay_ms(1) == 200
        assert policy.get_delay_ms(2) == 400

    def test_capped_at_max_delay(self) -> None:
        """Test delays never exceed max_delay_ms."""
        policy = RetryPolicy(base_delay_ms=1000, max_delay_ms=1500)

        assert policy.get_delay_ms(3) == 1500

    def test_jitter_bounds(self) -> None:
        """Test jitter only ever adds up to jitter_factor of the delay."""
        policy = RetryPolicy(base_delay_ms=1000, jitter_factor=0.5)

        for _ in range(20):
            delay = policy.get_delay_ms(0)
            assert 1000 <= delay <= 1500


class TestFetchConfig:
    """Tests for fetch configuration defaults."""

    def test_defaults(self) -> None:
        """Test the three second timeout and three attempt budget."""
        config = FetchConfig()

        assert config.timeout_seconds == 3.0
        assert config.retry_policy.max_attempts == 3

    def test_timeout_must_be_positive(self) -> None:
        """Test a zero timeout is rejected."""
        with pytest.raises(ValidationError):
            FetchConfig(timeout_seconds=0)
