"""
Module: settings.py
Description: Runtime settings using pydantic-settings.

Holds the process-wide defaults every sink falls back to when its own
configuration leaves a value out. Loaded from environment variables
(prefix RELAY_) with validation. Supports .env files for local
development.
"""

import re

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="event-relay", description="Application name")
    app_version: str = Field(default="0.3.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    # Retry defaults
    default_max_retries: int = Field(
        default=20,
        ge=0,
        description="Retries after the first attempt when a sink sets no retry policy"
    )
    default_backoff_unit_ms: int = Field(
        default=5_000,
        ge=0,
        description="Delay before the first retry, in milliseconds"
    )
    default_backoff_factor: int = Field(
        default=2,
        ge=1,
        description="Multiplier applied to the delay on each further retry"
    )
    default_max_backoff_ms: int = Field(
        default=100_000,
        ge=0,
        description="Upper bound for a single retry delay, in milliseconds"
    )

    # Webhook defaults
    default_webhook_timeout_ms: int = Field(
        default=30_000,
        ge=1,
        description="HTTP timeout for webhook requests, in milliseconds"
    )

    @field_validator('app_name')
    @classmethod
    def validate_app_name(cls, v: str) -> str:
        """App name ends up in the User-Agent header, keep it token-safe."""
        if not re.match(r'^[A-Za-z0-9._-]+$', v):
            raise ValueError(
                "app_name must contain only letters, numbers, dots, hyphens, and underscores"
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @model_validator(mode='after')
    def validate_backoff_bounds(self) -> "Settings":
        """The default backoff unit may not exceed the default cap."""
        if self.default_backoff_unit_ms > self.default_max_backoff_ms:
            raise ValueError("default_backoff_unit_ms must not exceed default_max_backoff_ms")
        return self

    @property
    def user_agent(self) -> str:
        """User-Agent sent by HTTP based sinks."""
        return f"{self.app_name}/{self.app_version}"


# Global settings instance
settings = Settings()
