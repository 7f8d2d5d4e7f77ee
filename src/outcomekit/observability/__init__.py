"""Structured logging for outcomekit."""

from .logging import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    LogEntry,
    LogRenderer,
    NoOpRenderer,
    configure_from_settings,
    configure_logging,
    get_logger,
    log_context,
)

__all__ = [
    "BoundLogger", "LogEntry", "get_logger", "log_context",
    "configure_logging", "configure_from_settings",
    "LogRenderer", "ConsoleRenderer", "JsonRenderer", "NoOpRenderer",
]
