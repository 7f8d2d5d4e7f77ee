"""Combine many outcomes into one: `all_of` / `all_of_catching`.

Items may be any mix of bare values, zero-argument producers, Outcomes,
AsyncOutcomes, awaitables and computations. They are evaluated left to
right. The result is a success holding the values in input order, or the
first failure by input index.

- Fully synchronous input stops at the first failure: later producers are
  never invoked.
- Input holding any awaitable, AsyncOutcome or coroutine function is
  asynchronous from the start. Producers after a known failure are still
  skipped, but pending siblings are awaited concurrently and their values
  discarded.

Example:
    >>> all_of(1, lambda: success(2), success(3))
    success([1, 2, 3])
    >>> all_of(success(1), failure("nope"), lambda: print("never runs"))
    failure('nope')
"""

from __future__ import annotations

import asyncio
from typing import Any

from ..observability import get_logger
from .helpers import Kind, Shape, is_async_fn, kind_of, shape_of
from .outcome import AnyOutcome, AsyncOutcome, Outcome, _attempt, _lift, success

_log = get_logger("outcomekit.aggregate")


def all_of(*items: Any) -> AnyOutcome:
    """Aggregate items eagerly; exceptions from producers or awaitables propagate."""
    return _aggregate(items, catching=False)


def all_of_catching(*items: Any) -> AnyOutcome:
    """Like `all_of`, but exceptions from producers and awaitables become failures."""
    return _aggregate(items, catching=True)


def _is_async_item(item: object) -> bool:
    match shape_of(item):
        case Shape.ASYNC_OUTCOME | Shape.AWAITABLE | Shape.ASYNC_GENERATOR:
            return True
        case Shape.VALUE:
            return callable(item) and is_async_fn(item)  # type: ignore[arg-type]
        case _:
            return False


def _aggregate(items: tuple[Any, ...], *, catching: bool) -> AnyOutcome:
    produce = _attempt if catching else _lift
    is_async = any(_is_async_item(item) for item in items)
    has_failure = False
    collected: list[AnyOutcome] = []

    for index, item in enumerate(items):
        match shape_of(item):
            case Shape.OUTCOME:
                outcome = item
            case Shape.ASYNC_OUTCOME:
                collected.append(item)
                continue
            case Shape.AWAITABLE:
                collected.append(
                    AsyncOutcome.from_awaitable_catching(item) if catching else AsyncOutcome.from_awaitable(item)
                )
                continue
            case Shape.GENERATOR | Shape.ASYNC_GENERATOR:
                if has_failure:
                    continue
                outcome = produce(lambda item=item: item)
            case _ if callable(item):
                if has_failure:
                    continue
                outcome = produce(item)
            case _:
                outcome = success(item)

        if kind_of(outcome) is Kind.ASYNC:
            is_async = True
        elif not outcome._is_ok and not has_failure:
            has_failure = True
            _log.debug("aggregate short-circuited", index=index, pending=is_async)
            if not is_async:
                return outcome
        collected.append(outcome)

    if is_async:
        return AsyncOutcome(_gather(collected))
    return success([outcome._value for outcome in collected])  # type: ignore[union-attr]


async def _gather(collected: list[AnyOutcome]) -> Outcome[Any, Any]:
    """Await pending items concurrently, then pick the first failure by index."""
    pending = [i for i, outcome in enumerate(collected) if kind_of(outcome) is Kind.ASYNC]
    settled = await asyncio.gather(*(collected[i] for i in pending), return_exceptions=True)
    outcomes: list[Any] = list(collected)
    for i, result in zip(pending, settled):
        if isinstance(result, BaseException):
            raise result
        outcomes[i] = result
    for outcome in outcomes:
        if not outcome._is_ok:
            return outcome
    return success([outcome._value for outcome in outcomes])
