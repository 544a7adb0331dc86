"""Configuration models for the HTTP fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from psm_monitor.fetch.constants import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from psm_monitor.fetch.models import RetryPolicy


class FetchConfig(BaseModel):
    """Configuration for the HTTP fetch layer.

    Central configuration for all HTTP calls: the per-attempt timeout,
    the retry policy, and the connection pool limits.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    max_connections: Annotated[int, Field(ge=1, le=1000)] = 100
    max_keepalive_connections: Annotated[int, Field(ge=0, le=1000)] = 100
    keepalive_expiry_seconds: Annotated[float, Field(ge=0.0, le=600.0)] = 90.0
