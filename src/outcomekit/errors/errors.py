"""Exceptions raised by the outcome algebra and exception classification.

Domain failures travel as data inside outcomes; the exceptions here are the
few places where the algebra deliberately raises.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import Any


class ErrorCode(StrEnum):
    """Coarse classification of captured exceptions."""
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    PARSE_ERROR = "PARSE_ERROR"
    INVALID_VALUE = "INVALID_VALUE"
    TYPE_ERROR = "TYPE_ERROR"
    UNKNOWN = "UNKNOWN"


# Ordered for priority: first pattern found in "<ExcType> <message>" wins
_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "connection": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "permission": ErrorCode.PERMISSION_DENIED,
    "forbidden": ErrorCode.PERMISSION_DENIED,
    "notfound": ErrorCode.NOT_FOUND,
    "not found": ErrorCode.NOT_FOUND,
    "keyerror": ErrorCode.NOT_FOUND,
    "parse": ErrorCode.PARSE_ERROR,
    "json": ErrorCode.PARSE_ERROR,
    "decode": ErrorCode.PARSE_ERROR,
    "typeerror": ErrorCode.TYPE_ERROR,
    "validation": ErrorCode.INVALID_VALUE,
    "value": ErrorCode.INVALID_VALUE,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code via pattern matching on name/message."""
    return _classify_cached(f"{type(exc).__name__} {exc}")


class OutcomeError(Exception):
    """Base class for exceptions raised by outcomekit."""


class OutcomeFailedError(OutcomeError):
    """Raised by value_or_raise() when the failure value is not an exception."""

    def __init__(self, error: Any) -> None:
        self.error = error
        super().__init__(f"Outcome failed with: {error!r}")


class OutcomeAssertionError(OutcomeError, AssertionError):
    """Raised by assert_success()/assert_failure() on the unexpected branch."""

    def __init__(self, message: str, outcome: Any) -> None:
        self.outcome = outcome
        super().__init__(f"{message}: {outcome!r}")


class NonExhaustiveError(OutcomeError):
    """Raised by Matcher.run() when no case matched and there is no fallback."""

    def __init__(self, error: Any) -> None:
        self.error = error
        super().__init__("Not all error cases were handled")
