"""Integration settings with pydantic-settings.

Requires: INTEGRATION_CLIENT_ID, INTEGRATION_CLIENT_SECRET,
ENTROLYTICS_INTEGRATION_SECRET, REDIS_URL

Usage:
    from marketplace_integration.config import get_settings

    settings = get_settings()
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Integration backend settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Required ===

    integration_client_id: str = Field(
        ...,
        min_length=1,
        description="OAuth client ID of the marketplace integration",
    )
    integration_client_secret: str = Field(
        ...,
        min_length=1,
        description="Client secret; signs inbound JWTs and webhook bodies",
    )
    entrolytics_integration_secret: str = Field(
        ...,
        min_length=1,
        description="Bearer secret for the Entrolytics analytics API",
    )
    redis_url: str = Field(
        ...,
        description="Redis connection URL",
        examples=["redis://redis:6379/0"],
    )

    # === Optional fields with defaults ===

    entrolytics_api_url: str = Field(
        default="https://ng.entrolytics.click",
        description="Base URL of the Entrolytics analytics backend",
    )
    vercel_api_url: str = Field(
        default="https://api.vercel.com",
        description="Base URL of the Vercel REST API",
    )
    http_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for outbound HTTP calls",
    )

    # Logging configuration
    service_name: str = Field(
        default="marketplace-integration",
        description="Service name for structured logging",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("entrolytics_api_url", "vercel_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Validates required env vars on first call.
    Raises ValidationError if any required variable is missing.
    """
    return Settings()
