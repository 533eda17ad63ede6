"""
threadhub.settings - Centralized Configuration

Single source of truth for threadhub configuration.
Loads from .env files and environment variables using pydantic-settings.

Usage:
    >>> from threadhub.settings import get_settings
    >>> settings = get_settings()
    >>> settings.request_timeout_seconds
    30.0
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ThreadhubSettings(BaseSettings):
    """threadhub configuration loaded from .env / environment variables.

    All THREADHUB_* prefixed env vars are loaded automatically.
    The database URL uses the standard DATABASE_URL name via an alias.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="THREADHUB_",
        extra="ignore",
        populate_by_name=True,
    )

    # -- Environment -----------------------------------------------------------
    env: str = "development"

    # -- Database --------------------------------------------------------------
    database_url: str = Field(
        default="postgresql+asyncpg://localhost/threadhub_dev",
        alias="DATABASE_URL",
    )
    db_pool_size: int = Field(default=10, gt=0)
    db_max_overflow: int = Field(default=20, ge=0)
    db_echo: bool = False

    # -- API Server ------------------------------------------------------------
    # Defaults to loopback; set THREADHUB_API_HOST=0.0.0.0 for container use.
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Thread pipeline -------------------------------------------------------
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    provider_call_timeout_seconds: float = Field(default=30.0, gt=0)
    default_page_size: int = Field(default=50, gt=0)
    gmail_batch_size: int = Field(default=50, gt=0, le=100)
    graph_base_url: str = "https://graph.microsoft.com/v1.0"
    graph_messages_per_thread: int = Field(default=100, gt=0)
    graph_max_concurrency: int = Field(default=4, gt=0)
    reply_tracker_page_size: int = Field(default=20, gt=0)

    # -- Credential encryption -------------------------------------------------
    encryption_key_id: str = "key_v1"
    encryption_keys: dict[str, str] = {}

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("graph_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def _call_timeout_within_request(self) -> ThreadhubSettings:
        # The per-call guard must not fire before the request deadline.
        if self.provider_call_timeout_seconds < self.request_timeout_seconds:
            raise ValueError(
                "provider_call_timeout_seconds must be at least request_timeout_seconds"
            )
        return self


# ---------------------------------------------------------------------------
# Singleton accessor
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_settings() -> ThreadhubSettings:
    """Return the cached ThreadhubSettings singleton."""
    return ThreadhubSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
