"""DevPath settings.

Read from DEVPATH_* environment variables or a .env file. The GitHub
token is a SecretStr so it never shows up in logs or reprs.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment. Development enables docs and auto-reload."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Runtime settings for the career engine API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="DEVPATH_",
    )

    # Service
    app_name: str = "DevPath Career Engine"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False  # FastAPI debug tracebacks
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Browser origins allowed to call the API (the DevPath web app)
    cors_origins: list[str] = Field(default=["http://localhost:3000", "http://127.0.0.1:3000"])

    # One Redis holds the GitHub cache, the profile store and rate limit windows
    redis_url: str = "redis://localhost:6379/0"

    # GitHub REST API; a token raises the upstream rate limit
    github_api_base: str = "https://api.github.com"
    github_cache_ttl: int = 3600  # seconds a fetched profile stays cached
    github_token: SecretStr | None = None
    github_timeout_seconds: float = 30.0
    github_max_retries: int = 3

    # Per-IP limits: analyze/sync per day, everything else per minute
    rate_limit_analyze_per_day: int = 10
    rate_limit_requests_per_minute: int = 30

    # Serve /metrics
    metrics_enabled: bool = True

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        return v.lower()

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()
