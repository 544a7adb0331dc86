"""Unit tests for environment settings."""

import logging

import pytest
from pydantic import ValidationError

from psm_monitor.settings.app import AppSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove settings variables inherited from the environment."""
    for name in (
        "FULL_NODE_URL",
        "EVENT_SERVER_URL",
        "ETHERSCAN_API_KEY",
        "SLACK_WEBHOOK_URL",
        "MONITOR_DB_PATH",
        "LOG_LEVEL",
        "HTTP_MAX_ATTEMPTS",
        "HTTP_TIMEOUT_SECONDS",
        "HTTP_BACKOFF_MS",
    ):
        monkeypatch.delenv(name, raising=False)


def load() -> AppSettings:
    """Load settings from the environment only."""
    return AppSettings(_env_file=None)  # type: ignore[call-arg]


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self) -> None:
        """Test the defaults match the public TronGrid setup."""
        settings = load()

        assert settings.full_node_url == "https://api.trongrid.io/"
        assert settings.event_server_url == "https://api.trongrid.io/"
        assert settings.db_path == "monitor.db"
        assert settings.slack_webhook_url is None
        assert settings.log_level == "INFO"

    def test_fetch_config(self) -> None:
        """Test the fetch config carries the three attempt budget."""
        config = load().fetch_config()

        assert config.timeout_seconds == 3.0
        assert config.retry_policy.max_attempts == 3
        assert config.retry_policy.base_delay_ms == 0


class TestOverrides:
    """Tests for environment overrides."""

    def test_trailing_slash_added(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test base URLs always end with a slash."""
        monkeypatch.setenv("FULL_NODE_URL", "https://node.example.com")

        assert load().full_node_url == "https://node.example.com/"

    def test_retry_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test retry budget, timeout, and backoff come from the environment."""
        monkeypatch.setenv("HTTP_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "10")
        monkeypatch.setenv("HTTP_BACKOFF_MS", "250")

        config = load().fetch_config()

        assert config.retry_policy.max_attempts == 5
        assert config.timeout_seconds == 10.0
        assert config.retry_policy.base_delay_ms == 250

    def test_explorer_keys(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test explorer keys are keyed by chain name."""
        monkeypatch.setenv("ETHERSCAN_API_KEY", "E")

        keys = load().explorer_api_keys()

        assert keys["Ethereum"] == "E"
        assert keys["BSC"] is None

    @pytest.mark.parametrize(
        ("raw", "level", "value"),
        [
            ("debug", "DEBUG", logging.DEBUG),
            ("WARN", "WARNING", logging.WARNING),
            ("error", "ERROR", logging.ERROR),
        ],
    )
    def test_log_level(
        self, monkeypatch: pytest.MonkeyPatch, raw: str, level: str, value: int
    ) -> None:
        """Test log levels are normalized."""
        monkeypatch.setenv("LOG_LEVEL", raw)

        settings = load()

        assert settings.log_level == level
        assert settings.log_level_value == value

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test unknown log levels are rejected."""
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError):
            load()

    def test_invalid_attempts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a zero attempt budget is rejected."""
        monkeypatch.setenv("HTTP_MAX_ATTEMPTS", "0")

        with pytest.raises(ValidationError):
            load()
