"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from spotboard.config.settings import Settings, get_settings


def test_defaults(monkeypatch):
    """Rate limiter and scheduler defaults match Hyperliquid limits."""
    monkeypatch.setenv("SUPABASE_URL", "http://localhost:54321")
    monkeypatch.setenv("SUPABASE_KEY", "test-key")

    settings = Settings(_env_file=None)

    assert settings.hyperliquid_api_url == "https://api.hyperliquid.xyz"
    assert settings.hypurrscan_api_url is None
    assert settings.rate_limit_weight_budget == 1200
    assert settings.rate_limit_interval_seconds == 60
    assert settings.rate_limit_max_concurrency == 5
    assert settings.rate_limit_max_retries == 5
    assert settings.rate_limit_base_delay_ms == 1000
    assert settings.sync_interval_seconds == 60
    assert settings.sync_scheduler_enabled is True
    assert settings.supabase_key.get_secret_value() == "test-key"


def test_env_overrides(monkeypatch):
    """Environment variables override defaults."""
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "k")
    monkeypatch.setenv("SYNC_INTERVAL_SECONDS", "120")
    monkeypatch.setenv("HYPURRSCAN_API_URL", "https://api.hypurrscan.io/")

    settings = Settings(_env_file=None)

    assert settings.sync_interval_seconds == 120
    assert settings.hypurrscan_api_url == "https://api.hypurrscan.io"


def test_missing_supabase_url(monkeypatch):
    """Supabase URL is required."""
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.setenv("SUPABASE_KEY", "k")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("supabase_url", "localhost:54321"),
        ("hyperliquid_api_url", "ftp://api.hyperliquid.xyz"),
        ("port", 0),
        ("rate_limit_weight_budget", 0),
        ("rate_limit_max_concurrency", 0),
    ],
)
def test_invalid_values_rejected(field, value):
    """Invalid values fail validation."""
    values = {"supabase_url": "http://localhost:54321", "supabase_key": "k", field: value}

    with pytest.raises(ValidationError):
        Settings(_env_file=None, **values)


def test_get_settings_cached():
    """get_settings returns one cached instance."""
    assert get_settings() is get_settings()
