"""Serialisable failure payloads built from captured exceptions.

`trace_from_exc` is a ready-made `error_transform` for the catching
combinators: instead of keeping the live exception as the failure value, it
stores a frozen pydantic `ErrorTrace` that can be logged, compared or dumped
to JSON.

Example:
    >>> outcome = attempt(lambda: int("x"), trace_from_exc)
    >>> outcome.error_or_none().error_code
    'INVALID_VALUE'
    >>> outcome.map_error(lambda t: t.with_operation("parse_port")).error_or_none().root_operation
    'parse_port'
"""

from __future__ import annotations

import traceback
from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, computed_field, field_serializer

from ..config import get_settings
from .errors import classify_exception

JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], dict[str, Any]]
JsonDict = dict[str, Any]
JsonMapping = dict[str, JsonValue]

_EMPTY_META: JsonDict = {}


class ErrorContext(BaseModel):
    """One operation on the path a failure travelled through."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid", revalidate_instances="never")

    operation: Annotated[str, Field(min_length=1)]
    location: str = Field(default="", repr=False)
    metadata: JsonDict = Field(default_factory=dict, repr=False)

    def __str__(self) -> str:
        loc = f" at {self.location}" if self.location else ""
        meta = f" ({', '.join(f'{k}={v}' for k, v in self.metadata.items())})" if self.metadata else ""
        return f"{self.operation}{loc}{meta}"

    def __hash__(self) -> int:
        return hash((self.operation, self.location, tuple(sorted(self.metadata.items()))))


_EMPTY_CONTEXTS: tuple[ErrorContext, ...] = ()


class ErrorTrace(BaseModel):
    """Immutable failure payload: message, classification and operation trail."""

    model_config = ConfigDict(
        frozen=True, str_strip_whitespace=True, extra="ignore", revalidate_instances="never",
        json_schema_extra={"title": "Error Trace", "description": "Captured exception with provenance"},
    )

    message: Annotated[str, Field(min_length=1)]
    error_code: str | None = None
    exception_type: str | None = None
    contexts: tuple[ErrorContext, ...] = _EMPTY_CONTEXTS
    details: str | None = Field(default=None, repr=False)

    @field_serializer("contexts")
    def _serialize_contexts(self, v: tuple[ErrorContext, ...]) -> list[JsonDict]:
        return [ctx.model_dump() for ctx in v]

    @computed_field
    @property
    def root_operation(self) -> str | None:
        """First operation recorded on the trace."""
        return self.contexts[0].operation if self.contexts else None

    def __hash__(self) -> int:
        return hash((self.message, self.error_code, self.exception_type, self.contexts))

    def with_operation(self, operation: str, location: str = "", **metadata: JsonValue) -> ErrorTrace:
        """Return a new trace with one more operation appended."""
        ctx = ErrorContext.model_construct(operation=operation, location=location, metadata=metadata or _EMPTY_META)
        return self.model_copy(update={"contexts": (*self.contexts, ctx)})

    def with_code(self, code: str) -> ErrorTrace:
        return self.model_copy(update={"error_code": code})

    def format(self, *, include_details: bool = False) -> str:
        """Human-readable rendering."""
        parts = [self.message]
        if self.error_code:
            parts.append(f" [{self.error_code}]")
        if self.contexts:
            parts.append("\nContext trace:\n" + "\n".join(f"  - {ctx}" for ctx in self.contexts))
        if include_details and self.details:
            parts.append(f"\nDetails:\n{self.details}")
        return "".join(parts)

    __str__ = format


def trace_from_exc(exc: BaseException, operation: str | None = None) -> ErrorTrace:
    """Build an ErrorTrace from an exception. Usable directly as `error_transform`.

    The traceback is kept in `details` when `capture_tracebacks` is enabled.
    """
    details = (
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        if get_settings().capture_tracebacks else None
    )
    trace = ErrorTrace(
        message=str(exc) or type(exc).__name__,
        error_code=classify_exception(exc).value,
        exception_type=type(exc).__name__,
        details=details,
    )
    return trace.with_operation(operation) if operation else trace


_ErrorTraceAdapter: TypeAdapter[ErrorTrace] = TypeAdapter(ErrorTrace)


def validate_trace(data: JsonDict | str | bytes) -> ErrorTrace:
    """Validate a dumped trace (dict or JSON) back into an ErrorTrace."""
    if isinstance(data, (str, bytes)):
        return _ErrorTraceAdapter.validate_json(data)
    return _ErrorTraceAdapter.validate_python(data)
