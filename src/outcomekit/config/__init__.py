"""Configuration management using pydantic-settings."""

from .settings import LoggingSettings, OutcomeSettings, clear_settings_cache, get_settings

__all__ = [
    "LoggingSettings",
    "OutcomeSettings",
    "clear_settings_cache",
    "get_settings",
]
