"""Runtime shape detection for values flowing through the outcome algebra.

Every combinator callback may hand back one of several shapes (bare value,
Outcome, AsyncOutcome, awaitable, generator). Instead of overloads, each
combinator classifies the return value once with `shape_of` and dispatches
on the resulting tag.
"""

from __future__ import annotations

import inspect
from enum import Enum
from typing import Any, Callable, NoReturn


class Kind(Enum):
    """Runtime tag carried by the two outcome containers."""
    SYNC = "sync"
    ASYNC = "async"


class Shape(Enum):
    """What a callback (or a computation step) produced."""
    VALUE = "value"
    OUTCOME = "outcome"
    ASYNC_OUTCOME = "async_outcome"
    AWAITABLE = "awaitable"
    GENERATOR = "generator"
    ASYNC_GENERATOR = "async_generator"


def kind_of(value: object) -> Kind | None:
    """Outcome container tag, looked up on the type so proxies can't fake it."""
    return getattr(type(value), "_kind", None)


def shape_of(value: object) -> Shape:
    """Classify a value for dispatch. Outcome tags win over awaitability."""
    match kind_of(value):
        case Kind.SYNC: return Shape.OUTCOME
        case Kind.ASYNC: return Shape.ASYNC_OUTCOME
    if inspect.isgenerator(value):
        return Shape.GENERATOR
    if inspect.isasyncgen(value):
        return Shape.ASYNC_GENERATOR
    if inspect.isawaitable(value):
        return Shape.AWAITABLE
    return Shape.VALUE


def is_async_fn(fn: Callable[..., Any] | None) -> bool:
    """True for coroutine functions, including partials and async __call__."""
    if fn is None:
        return False
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(getattr(fn, "__call__", None))


def is_computation(value: object) -> bool:
    """True for suspended generator-based computations (sync or async)."""
    return inspect.isgenerator(value) or inspect.isasyncgen(value)


async def resolved(value: Any) -> Any:
    """Coroutine returning `value` as-is; promotes a sync result to awaitable."""
    return value


def assert_unreachable(value: NoReturn) -> NoReturn:
    """Mark a branch that exhaustive matching should make impossible."""
    raise AssertionError(f"Unreachable case reached with value: {value!r}")
