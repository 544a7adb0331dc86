"""HTTP fetch layer with bounded retries and response validation.

This module provides the request engine used by every data source:
- One pooled httpx client shared by all calls
- Configurable retry budget, timeout, and backoff
- Caller-supplied response validators that can force a retry
- Correlation ids carried through all attempt log lines
- Metrics collection for observability
"""

from psm_monitor.fetch.client import HttpFetcher, Validator, encode_payload
from psm_monitor.fetch.config import FetchConfig
from psm_monitor.fetch.constants import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_STATUS_OK,
)
from psm_monitor.fetch.errors import AttemptDeadlineError, FetchError, HttpFailedError
from psm_monitor.fetch.metrics import FetchMetrics
from psm_monitor.fetch.models import (
    AttemptKind,
    AttemptOutcome,
    HttpRequest,
    RetryPolicy,
)
from psm_monitor.fetch.redact import redact_url_credentials, redact_url_secrets


__all__ = [
    # Client
    "HttpFetcher",
    "Validator",
    "encode_payload",
    # Config
    "FetchConfig",
    # Models
    "AttemptKind",
    "AttemptOutcome",
    "HttpRequest",
    "RetryPolicy",
    # Errors
    "AttemptDeadlineError",
    "FetchError",
    "HttpFailedError",
    # Constants
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_TIMEOUT_SECONDS",
    "HTTP_STATUS_OK",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_url_credentials",
    "redact_url_secrets",
]
