"""Generator-based sequencing of outcomes (do-notation).

A computation is a generator that yields outcomes and gets the unwrapped
success value sent back. The first failure closes the generator (so its
`finally` blocks run) and becomes the result of the whole run.

    >>> def checkout(cart_id: int):
    ...     cart = yield from load_cart(cart_id)        # Outcome
    ...     total = yield price(cart)                  # AsyncOutcome works too
    ...     return total * 1.2
    >>> run(checkout, 7)

The run stays synchronous as long as every yielded outcome is synchronous.
The first AsyncOutcome (or raw awaitable) switches the driver to an async
loop, and the result becomes an AsyncOutcome.

Async generators are supported for computations that need `await` between
steps. Python does not allow `return value` inside them, so yielding a plain
value (not an outcome or awaitable) completes the computation with it.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Generator
from typing import Any, Callable

from ..observability import get_logger
from .helpers import Kind, Shape, is_computation, kind_of, shape_of
from .outcome import AnyOutcome, AsyncOutcome, ErrorTransform, Outcome, _capture, _flatten, _settle, failure, success

Computation = Generator[Any, Any, Any] | AsyncGenerator[Any, Any]

_log = get_logger("outcomekit.sequencing")


def run(computation: Computation | Callable[..., Computation], *args: Any, **kwargs: Any) -> AnyOutcome:
    """Drive a computation to its final outcome.

    Accepts a generator, an async generator, or a function returning one
    (called with `args`/`kwargs`; pass a bound method to run against an
    object). Exceptions raised by the computation propagate.
    """
    return interpret(_start(computation, args, kwargs))


def run_catching(
    computation: Computation | Callable[..., Computation],
    *args: Any,
    error_transform: ErrorTransform | None = None,
    **kwargs: Any,
) -> AnyOutcome:
    """Like `run`, but any exception raised while stepping becomes a failure.

    Failures yielded by the computation short-circuit exactly as with `run`.
    """
    try:
        gen = _start(computation, args, kwargs)
    except Exception as exc:
        return failure(_capture(exc, error_transform))
    return interpret_catching(gen, error_transform)


def interpret(computation: Computation) -> AnyOutcome:
    """Step a started computation until it completes or yields a failure."""
    if shape_of(computation) is Shape.ASYNC_GENERATOR:
        return AsyncOutcome(_drive_async_gen(computation))  # type: ignore[arg-type]
    return _drive(computation)  # type: ignore[arg-type]


def interpret_catching(computation: Computation, error_transform: ErrorTransform | None = None) -> AnyOutcome:
    try:
        result = interpret(computation)
    except Exception as exc:
        return failure(_capture(exc, error_transform))
    if kind_of(result) is Kind.ASYNC:
        return AsyncOutcome.from_awaitable_catching(result, error_transform)
    return result


# ═══════════════════════════════════════════════════════════════════════════════
# Drivers
# ═══════════════════════════════════════════════════════════════════════════════


def _start(computation: object, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Computation:
    if is_computation(computation):
        if args or kwargs:
            raise TypeError("arguments can only be passed along with a generator function")
        return computation  # type: ignore[return-value]
    if callable(computation):
        gen = computation(*args, **kwargs)
        if is_computation(gen):
            return gen
        raise TypeError(f"{computation!r} returned {type(gen).__name__}, expected a generator")
    raise TypeError(f"expected a generator or generator function, got {type(computation).__name__}")


def _drive(gen: Generator[Any, Any, Any]) -> AnyOutcome:
    """Synchronous loop; hands over to `_drive_from` on the first async step."""
    sent: Any = None
    while True:
        try:
            yielded = gen.send(sent)
        except StopIteration as stop:
            return _flatten(stop.value)
        step = _flatten(yielded)
        if kind_of(step) is Kind.ASYNC:
            return AsyncOutcome(_drive_from(gen, step))  # type: ignore[arg-type]
        if not step._is_ok:  # type: ignore[union-attr]
            return _abort(gen, step)  # type: ignore[arg-type]
        sent = step._value  # type: ignore[union-attr]


async def _drive_from(gen: Generator[Any, Any, Any], pending: AsyncOutcome[Any, Any]) -> Outcome[Any, Any]:
    outcome = await pending
    while True:
        if not outcome._is_ok:
            return _abort(gen, outcome)
        try:
            yielded = gen.send(outcome._value)
        except StopIteration as stop:
            return await _settle(_flatten(stop.value))
        outcome = await _settle(_flatten(yielded))


async def _drive_async_gen(agen: AsyncGenerator[Any, Any]) -> Outcome[Any, Any]:
    sent: Any = None
    try:
        while True:
            try:
                yielded = await agen.asend(sent)
            except StopAsyncIteration:
                return success()
            if shape_of(yielded) is Shape.VALUE:
                return success(yielded)
            outcome = await _settle(_flatten(yielded))
            if not outcome._is_ok:
                _log.debug("computation aborted", error_type=type(outcome._value).__name__)
                return outcome
            sent = outcome._value
    finally:
        await agen.aclose()


def _abort(gen: Generator[Any, Any, Any], outcome: Outcome[Any, Any]) -> Outcome[Any, Any]:
    """Close the generator so its cleanup runs, then surface the failure."""
    _log.debug("computation aborted", error_type=type(outcome._value).__name__)
    gen.close()
    return outcome
