"""Environment-based configuration using pydantic-settings.

Example:
    >>> from outcomekit.config import get_settings
    >>> settings = get_settings()
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # OUTCOMEKIT_CAPTURE_TRACEBACKS=false
    # OUTCOMEKIT_LOG_LEVEL=DEBUG
    # OUTCOMEKIT_LOG_FORMAT=json
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OUTCOMEKIT_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"
    colors: bool | None = Field(default=None, description="Force ANSI colours; None auto-detects a TTY")

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class OutcomeSettings(BaseSettings):
    """Root settings, loaded from OUTCOMEKIT_* environment variables and `.env`.

    Example environment variables:
        OUTCOMEKIT_CAPTURE_TRACEBACKS=false
        OUTCOMEKIT_LOG_CAPTURED_EXCEPTIONS=false
        OUTCOMEKIT_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="OUTCOMEKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    capture_tracebacks: bool = Field(default=True, description="Keep formatted tracebacks in ErrorTrace.details")
    log_captured_exceptions: bool = Field(
        default=True,
        description="Emit a debug log entry when a catching combinator converts an exception",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> OutcomeSettings:
    """Get the global settings instance (cached)."""
    return OutcomeSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
