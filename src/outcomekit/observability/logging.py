"""Structured logging with bound context.

Console lines for development, JSON lines for production. The library itself
only emits DEBUG events (captured exceptions, aborted computations,
short-circuited aggregates), so nothing shows up until the level is lowered.

Quick Start:
    >>> from outcomekit.observability import configure_logging, get_logger
    >>> configure_logging(format="console", level="DEBUG")
    >>> log = get_logger("billing").bind(invoice_id=42)
    >>> log.info("invoice settled", amount=99.5)

    # Or from OUTCOMEKIT_LOG_* settings:
    >>> configure_from_settings()
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from functools import partialmethod
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

import orjson

from ..errors.types import JsonDict, JsonValue

if TYPE_CHECKING:
    from types import TracebackType

    from ..config import OutcomeSettings

# Fields added by log_context(), visible to every logger in the current context
_scoped_fields: ContextVar[JsonDict] = ContextVar("outcomekit_log_fields", default={})
_active_renderer: ContextVar[LogRenderer | None] = ContextVar("outcomekit_log_renderer", default=None)
_threshold: ContextVar[int] = ContextVar("outcomekit_log_level", default=logging.INFO)

_EXC_KEY = "exc_info"


@dataclass(slots=True, frozen=True)
class LogEntry:
    timestamp: float
    level: str
    event: str
    fields: JsonDict

    def moment(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=UTC)


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class BoundLogger:
    """Immutable logger carrying key-value context; bind() derives a new one.

    `level=None` defers to the configured threshold at every call, so loggers
    created at import time follow a later configure_logging().

    Example:
        >>> log = BoundLogger({"service": "api"}).bind(path="/users")
        >>> log.info("request received")
    """

    context: JsonDict = field(default_factory=dict)
    renderer: LogRenderer | None = None
    level: int | None = None

    def bind(self, **kw: JsonValue) -> BoundLogger:
        return BoundLogger({**self.context, **kw}, self.renderer, self.level)

    def unbind(self, *keys: str) -> BoundLogger:
        kept = {k: v for k, v in self.context.items() if k not in keys}
        return BoundLogger(kept, self.renderer, self.level)

    def is_enabled_for(self, level: int) -> bool:
        return level >= (_threshold.get() if self.level is None else self.level)

    def log(self, level: int, event: str, **kw: JsonValue) -> None:
        if self.is_enabled_for(level):
            fields = {**_scoped_fields.get(), **self.context, **kw}
            entry = LogEntry(time.time(), logging.getLevelName(level).lower(), event, fields)
            (self.renderer or _current_renderer()).render(entry)

    debug = partialmethod(log, logging.DEBUG)
    info = partialmethod(log, logging.INFO)
    warning = partialmethod(log, logging.WARNING)
    error = partialmethod(log, logging.ERROR)

    def exception(self, event: str, **kw: JsonValue) -> None:
        """ERROR entry carrying the traceback of the exception being handled."""
        exc = sys.exc_info()[1]
        if exc is not None:
            kw[_EXC_KEY] = "".join(traceback.format_exception(exc)).rstrip()
        self.log(logging.ERROR, event, **kw)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


class Ansi(StrEnum):
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


_LEVEL_STYLE = {"debug": Ansi.DIM, "info": Ansi.GREEN, "warning": Ansi.YELLOW, "error": Ansi.RED}


@dataclass(slots=True)
class ConsoleRenderer:
    """One line per entry: `HH:MM:SS.mmm [level] event key=value ...`.

    Colours are auto-detected from the stream unless forced with `colors`.
    """

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def _paint(self, text: str, style: Ansi) -> str:
        return f"{style}{text}{Ansi.RESET}" if self.colors else text

    def render(self, entry: LogEntry) -> None:
        pairs = sorted((k, v) for k, v in entry.fields.items() if k != _EXC_KEY)
        line = " ".join([
            self._paint(entry.moment().strftime("%H:%M:%S.%f")[:-3], Ansi.DIM),
            self._paint(f"[{entry.level}]", _LEVEL_STYLE.get(entry.level, Ansi.DIM)),
            self._paint(entry.event, Ansi.BOLD),
            *(f"{self._paint(k, Ansi.CYAN)}={self._value(v)}" for k, v in pairs),
        ])
        self.output.write(line + "\n")
        if (exc_text := entry.fields.get(_EXC_KEY)) is not None:
            self.output.write(self._paint(str(exc_text), Ansi.RED) + "\n")

    def _value(self, v: object) -> str:
        match v:
            case str():
                return self._paint(f'"{v}"', Ansi.YELLOW)
            case bool() | int() | float() | None:
                return self._paint(orjson.dumps(v).decode(), Ansi.BLUE)
            case dict() | list() | tuple():
                return self._paint(f"<{type(v).__name__} of {len(v)}>", Ansi.DIM)
        return repr(v)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines, one object per entry."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        record = {"timestamp": entry.moment().isoformat(), "level": entry.level, "event": entry.event}
        payload = orjson.dumps({**record, **entry.fields}, option=orjson.OPT_NON_STR_KEYS, default=repr)
        self.output.write(payload.decode() + "\n")


class NoOpRenderer:
    """Discards every entry."""

    __slots__ = ()

    def render(self, entry: LogEntry) -> None:
        return None


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────


def configure_logging(
    format: str = "console",  # noqa: A002
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Install the renderer and threshold used by loggers without their own.

    `format` is "console", "json" or "none".
    """
    renderers = {
        "console": lambda: ConsoleRenderer(output or sys.stderr, colors),
        "json": lambda: JsonRenderer(output or sys.stdout),
        "none": NoOpRenderer,
    }
    if format not in renderers:
        raise ValueError(f"Unknown format: {format!r}; expected one of {', '.join(renderers)}")
    renderer: LogRenderer = renderers[format]()
    _threshold.set(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
    _active_renderer.set(renderer)
    return renderer


def configure_from_settings(settings: OutcomeSettings | None = None, *, output: TextIO | None = None) -> LogRenderer:
    """Apply the OUTCOMEKIT_LOG_* settings (or an explicit settings object)."""
    if settings is None:
        from ..config import get_settings
        settings = get_settings()
    cfg = settings.logging
    return configure_logging(cfg.format, cfg.level, output=output, colors=cfg.colors)


def get_logger(name: str | None = None, **initial_context: JsonValue) -> BoundLogger:
    """Logger with optional initial context; `name` is recorded under 'logger'."""
    if name:
        initial_context["logger"] = name
    return BoundLogger(initial_context)


def _current_renderer() -> LogRenderer:
    renderer = _active_renderer.get()
    if renderer is None:
        renderer = ConsoleRenderer()
        _active_renderer.set(renderer)
    return renderer


class log_context:
    """Add fields to every entry logged inside the `with` block (async-safe)."""

    __slots__ = ("_fields", "_token")

    def __init__(self, **fields: JsonValue) -> None:
        self._fields = fields
        self._token = None

    def __enter__(self) -> log_context:
        self._token = _scoped_fields.set({**_scoped_fields.get(), **self._fields})
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None,
                 tb: TracebackType | None) -> None:
        if self._token is not None:
            _scoped_fields.reset(self._token)
            self._token = None
