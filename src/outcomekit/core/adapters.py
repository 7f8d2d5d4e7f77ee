"""Bridges from raising or awaitable-returning code into outcomes.

- attempt: call a function, exceptions become failures
- wrap: decorator form of attempt
- from_async / from_async_catching: normalise an awaitable into an AsyncOutcome
- assert_success / assert_failure: test-oriented narrowing
"""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, ParamSpec, TypeVar

from ..errors import OutcomeAssertionError
from .helpers import Kind, kind_of
from .outcome import AnyOutcome, AsyncOutcome, ErrorTransform, Outcome, _attempt, _lift

P = ParamSpec("P")
T = TypeVar("T")


def attempt(fn: Callable[[], Any], error_transform: ErrorTransform | None = None) -> AnyOutcome:
    """Call `fn` and wrap what it returns; a raised exception becomes a failure.

    A returned Outcome/AsyncOutcome is passed through, an awaitable becomes an
    AsyncOutcome whose exceptions are caught as well. `error_transform` maps
    the caught exception to the failure value (default: the exception itself).

    Example:
        >>> attempt(lambda: int("42"))
        success(42)
        >>> attempt(lambda: int("x"), lambda exc: "not a number")
        failure('not a number')
    """
    return _attempt(fn, error_transform)


def wrap(fn: Callable[P, Any], error_transform: ErrorTransform | None = None) -> Callable[P, AnyOutcome]:
    """Turn `fn` into a function returning outcomes. Nothing runs until it is called.

    Usable as a decorator:
        >>> @wrap
        ... def parse(raw: str) -> int:
        ...     return int(raw)
        >>> parse("7")
        success(7)
    """

    @functools.wraps(fn)
    def wrapped(*args: P.args, **kwargs: P.kwargs) -> AnyOutcome:
        return _attempt(lambda: fn(*args, **kwargs), error_transform)

    return wrapped


def from_async(source: Awaitable[Any] | Callable[[], Awaitable[Any]]) -> AsyncOutcome[Any, Any]:
    """Normalise an awaitable (or a function returning one) into an AsyncOutcome.

    The awaitable may resolve to a bare value, an Outcome or an AsyncOutcome.
    Exceptions are not caught.
    """
    return _promote(_lift(source if callable(source) else lambda: source))


def from_async_catching(
    source: Awaitable[Any] | Callable[[], Awaitable[Any]],
    error_transform: ErrorTransform | None = None,
) -> AsyncOutcome[Any, Any]:
    """Like `from_async`, but exceptions become failures via `error_transform`."""
    return _promote(_attempt(source if callable(source) else lambda: source, error_transform))


def _promote(outcome: AnyOutcome) -> AsyncOutcome[Any, Any]:
    return outcome if kind_of(outcome) is Kind.ASYNC else AsyncOutcome.settled(outcome)  # type: ignore[return-value,arg-type]


def assert_success(outcome: Outcome[T, Any]) -> T:
    """Raise OutcomeAssertionError unless `outcome` is a success; return its value."""
    if not outcome.is_success():
        raise OutcomeAssertionError("Expected a successful outcome, but got a failure instead", outcome)
    return outcome._value  # type: ignore[return-value]


def assert_failure(outcome: Outcome[Any, T]) -> T:
    """Raise OutcomeAssertionError unless `outcome` is a failure; return its error."""
    if not outcome.is_failure():
        raise OutcomeAssertionError("Expected a failed outcome, but got a success instead", outcome)
    return outcome._value  # type: ignore[return-value]
