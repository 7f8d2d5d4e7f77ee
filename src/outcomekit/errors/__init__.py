"""Error handling for outcomekit.

- ErrorCode/classify_exception: coarse classification of captured exceptions
- OutcomeError and subclasses: the few places the algebra raises
- ErrorTrace/ErrorContext: serialisable failure payloads (pydantic)
"""

from .errors import (
    ErrorCode,
    NonExhaustiveError,
    OutcomeAssertionError,
    OutcomeError,
    OutcomeFailedError,
    classify_exception,
)
from .types import ErrorContext, ErrorTrace, JsonDict, JsonMapping, JsonValue, trace_from_exc, validate_trace

__all__ = [
    # Exceptions
    "OutcomeError", "OutcomeFailedError", "OutcomeAssertionError", "NonExhaustiveError",
    # Classification
    "ErrorCode", "classify_exception",
    # Failure payloads
    "ErrorContext", "ErrorTrace", "trace_from_exc", "validate_trace",
    # JSON aliases
    "JsonDict", "JsonMapping", "JsonValue",
]
