"""Application settings powered by Pydantic BaseSettings."""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from psm_monitor.events.constants import DEFAULT_MAX_PAGES
from psm_monitor.fetch.config import FetchConfig
from psm_monitor.fetch.constants import DEFAULT_MAX_ATTEMPTS, DEFAULT_TIMEOUT_SECONDS
from psm_monitor.fetch.models import RetryPolicy
from psm_monitor.sources.constants import (
    CHAIN_BSC,
    CHAIN_ETHEREUM,
    CHAIN_POLYGON,
    DEFAULT_QUOTE_URL,
    DEFAULT_SOL_PRICE_URL,
)
from psm_monitor.tracker.constants import DEFAULT_BSC_GAS_PRICE_GWEI, DEFAULT_DB_PATH


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    full_node_url: str = Field(
        default="https://api.trongrid.io/", validation_alias="FULL_NODE_URL"
    )
    event_server_url: str = Field(
        default="https://api.trongrid.io/", validation_alias="EVENT_SERVER_URL"
    )
    quote_api_url: str = Field(default=DEFAULT_QUOTE_URL, validation_alias="QUOTE_API_URL")
    sol_price_url: str = Field(
        default=DEFAULT_SOL_PRICE_URL, validation_alias="SOL_PRICE_URL"
    )
    etherscan_api_key: str | None = Field(
        default=None, validation_alias="ETHERSCAN_API_KEY"
    )
    bscscan_api_key: str | None = Field(default=None, validation_alias="BSCSCAN_API_KEY")
    polygonscan_api_key: str | None = Field(
        default=None, validation_alias="POLYGONSCAN_API_KEY"
    )
    owlracle_api_key: str | None = Field(
        default=None, validation_alias="OWLRACLE_API_KEY"
    )
    slack_webhook_url: str | None = Field(
        default=None, validation_alias="SLACK_WEBHOOK_URL"
    )
    db_path: str = Field(default=DEFAULT_DB_PATH, validation_alias="MONITOR_DB_PATH")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    http_timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, gt=0.0, validation_alias="HTTP_TIMEOUT_SECONDS"
    )
    http_max_attempts: int = Field(
        default=DEFAULT_MAX_ATTEMPTS, ge=1, le=10, validation_alias="HTTP_MAX_ATTEMPTS"
    )
    http_backoff_ms: int = Field(
        default=0, ge=0, le=60000, validation_alias="HTTP_BACKOFF_MS"
    )
    events_max_pages: int = Field(
        default=DEFAULT_MAX_PAGES, ge=1, validation_alias="EVENTS_MAX_PAGES"
    )
    bsc_gas_price_gwei: float = Field(
        default=DEFAULT_BSC_GAS_PRICE_GWEI, ge=0.0, validation_alias="BSC_GAS_PRICE_GWEI"
    )

    @field_validator("full_node_url", "event_server_url")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        """API paths are appended directly to the base URLs."""
        return v if v.endswith("/") else v + "/"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the log level is a known level name."""
        level = v.upper()
        if level == "WARN":
            level = "WARNING"
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level

    @property
    def log_level_value(self) -> int:
        """Numeric logging level."""
        return int(logging.getLevelName(self.log_level))

    def explorer_api_keys(self) -> dict[str, str | None]:
        """Return explorer API keys keyed by chain name."""
        return {
            CHAIN_ETHEREUM: self.etherscan_api_key,
            CHAIN_BSC: self.bscscan_api_key,
            CHAIN_POLYGON: self.polygonscan_api_key,
        }

    def fetch_config(self) -> FetchConfig:
        """Build the fetch layer configuration."""
        return FetchConfig(
            timeout_seconds=self.http_timeout_seconds,
            retry_policy=RetryPolicy(
                max_attempts=self.http_max_attempts,
                base_delay_ms=self.http_backoff_ms,
            ),
        )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
