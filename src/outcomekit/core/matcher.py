"""Exhaustive matching on the error of a failed outcome.

Example:
    >>> class NotFound(Exception): ...
    >>> class Invalid(Exception): ...
    >>> message = (
    ...     failure(NotFound("user 7")).match()
    ...     .when(NotFound, lambda e: f"missing: {e}")
    ...     .when(Invalid, "EMPTY", lambda e: "bad input")
    ...     .run()
    ... )
    >>> message
    'missing: user 7'
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Generic, TypeVar

from ..errors import NonExhaustiveError
from .helpers import is_async_fn, resolved

E = TypeVar("E")

_UNSET: Any = object()


class Matcher(Generic[E]):
    """Collects (case, handler) pairs and runs the first one matching the error.

    A case is either a class, matched with isinstance, or a literal value,
    matched with ==. Cases are tried in registration order.
    """

    __slots__ = ("_error", "_cases", "_default")

    def __init__(self, error: E) -> None:
        self._error = error
        self._cases: list[tuple[object, Callable[[Any], Any]]] = []
        self._default: Callable[[Any], Any] = _UNSET

    def when(self, case: object, *rest: Any) -> Matcher[E]:
        """Register `handler` for one or more cases: when(A, B, ..., handler)."""
        if not rest or not callable(rest[-1]):
            raise TypeError("when() expects one or more cases followed by a handler")
        *cases, handler = (case, *rest)
        self._cases.extend((c, handler) for c in cases)
        return self

    def otherwise(self, handler: Callable[[E], Any]) -> Matcher[E]:
        """Register the fallback handler. Only one is allowed."""
        if self._default is not _UNSET:
            raise ValueError("already registered an 'otherwise' handler")
        self._default = handler
        return self

    def run(self) -> Any:
        """Run the first matching handler, else the fallback.

        Raises:
            NonExhaustiveError: no case matched and no fallback was registered
        """
        is_async = any(is_async_fn(handler) for _, handler in self._cases)
        for case, handler in self._cases:
            if _matches(case, self._error):
                return _promote(handler(self._error), is_async)
        if self._default is not _UNSET:
            return _promote(self._default(self._error), is_async)
        raise NonExhaustiveError(self._error)


def _promote(out: Any, is_async: bool) -> Any:
    return resolved(out) if is_async and not inspect.isawaitable(out) else out


def _matches(case: object, error: object) -> bool:
    if isinstance(case, type) and isinstance(error, case):
        return True
    return case is error or case == error
