"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Spotboard configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Application
    app_name: str = Field(default="Spotboard", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # Database - Supabase
    supabase_url: str = Field(description="Supabase project URL")
    supabase_key: SecretStr = Field(description="Supabase API key")
    postgres_schema: str = Field(
        default="public", description="PostgreSQL schema for Spotboard tables"
    )

    # External APIs
    hyperliquid_api_url: str = Field(
        default="https://api.hyperliquid.xyz",
        description="Hyperliquid API base URL",
    )
    hypurrscan_api_url: str | None = Field(
        default=None,
        description="Hypurrscan API base URL (secondary deploy listing, disabled if unset)",
    )
    request_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout for a single upstream request"
    )

    # Rate limiter
    rate_limit_weight_budget: int = Field(
        default=1200, ge=1, description="Request weight allowed per window"
    )
    rate_limit_interval_seconds: float = Field(
        default=60.0, gt=0, description="Length of a weight window"
    )
    rate_limit_max_concurrency: int = Field(
        default=5, ge=1, description="Maximum simultaneous upstream requests"
    )
    rate_limit_max_retries: int = Field(
        default=5, ge=0, description="Retries after an HTTP 429"
    )
    rate_limit_base_delay_ms: int = Field(
        default=1000, ge=0, description="Base backoff delay, doubled per retry"
    )

    # Token sync scheduler
    sync_scheduler_enabled: bool = Field(
        default=True, description="Enable the periodic token sync job"
    )
    sync_interval_seconds: int = Field(
        default=60, ge=1, description="Seconds between token sync runs"
    )

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Validate Supabase URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Supabase URL must start with http:// or https://")
        return v

    @field_validator("hyperliquid_api_url", "hypurrscan_api_url")
    @classmethod
    def validate_api_url(cls, v: str | None) -> str | None:
        """Validate upstream URL format and strip trailing slash."""
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("API URL must start with http:// or https://")
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]  # Values from env
