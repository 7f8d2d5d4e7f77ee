"""Outcome/AsyncOutcome containers for success-or-failure values.

An `Outcome` holds exactly one of a success value or a failure value. An
`AsyncOutcome` is an Outcome that is not available yet: it wraps an awaitable
resolving to an Outcome and exposes the same combinator names, so a chain
reads the same whether it is synchronous or not.

Combinators flatten what their callbacks return:
- bare value        -> success(value)
- Outcome           -> taken as-is
- AsyncOutcome      -> taken as-is (the chain becomes async)
- awaitable         -> AsyncOutcome resolving to the flattened value
- generator         -> driven by the sequencing interpreter

Promotion rule: when a callback is a coroutine function the combinator always
returns an AsyncOutcome, even when the callback is skipped, so the shape of
the result only depends on the callback, never on the branch taken.

Example:
    >>> success(5).map(lambda x: x * 2)
    success(10)
    >>> failure("boom").recover(lambda e: f"fallback after {e}")
    success('fallback after boom')
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Generator, Generic, TypeAlias, TypeVar, Union

from ..config import get_settings
from ..errors import OutcomeFailedError
from ..observability import get_logger
from .helpers import Kind, Shape, is_async_fn, kind_of, resolved, shape_of
from .matcher import Matcher

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")

AnyOutcome: TypeAlias = Union["Outcome[Any, Any]", "AsyncOutcome[Any, Any]"]
ErrorTransform: TypeAlias = Callable[[Exception], Any]

_OK = True
_ERR = False

_log = get_logger("outcomekit.core")


class Outcome(Generic[T, E]):
    """Immutable success-or-failure container.

    Never construct directly; use `success()` / `failure()`. Every combinator
    returns a new Outcome (or the same instance when it is a no-op), or an
    AsyncOutcome when the work turns asynchronous.

    Hashing follows the payload, like a tuple: an Outcome holding a list or
    dict (including every `all_of` success) compares fine but raises
    TypeError on `hash()`.

    Examples:
        >>> success(42).value_or_none()
        42
        >>> failure("fail").map(lambda x: x * 2).error_or_none()
        'fail'
        >>> success(5).map(lambda x: success(x * 2) if x > 0 else failure("neg"))
        success(10)
    """

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)
    _kind = Kind.SYNC

    def __init__(self, value: T | E, is_ok: bool) -> None:
        self._value = value
        self._is_ok = is_ok

    # ─── Discriminants ───────────────────────────────────────────────

    def is_success(self) -> bool:
        """Check if Outcome is the Success branch."""
        return self._is_ok

    def is_failure(self) -> bool:
        """Check if Outcome is the Failure branch."""
        return not self._is_ok

    # ─── Value Extraction ──────────────────────────────────────────────

    def value_or_none(self) -> T | None:
        return self._value if self._is_ok else None  # type: ignore[return-value]

    def error_or_none(self) -> E | None:
        return self._value if not self._is_ok else None  # type: ignore[return-value]

    def value_or_default(self, default: U) -> T | U:
        """Success value, or `default` on failure."""
        return self._value if self._is_ok else default  # type: ignore[return-value]

    def value_or_else(self, on_failure: Callable[[E], U]) -> T | U | Awaitable[T | U]:
        """Success value, or `on_failure(error)`. Async `on_failure` makes the result awaitable."""
        if self._is_ok:
            return resolved(self._value) if is_async_fn(on_failure) else self._value  # type: ignore[return-value]
        return on_failure(self._value)  # type: ignore[arg-type]

    def value_or_raise(self) -> T:
        """Success value, or raise the failure.

        Escape hatch for code that does not work with outcomes. An exception
        error is raised as-is; any other error value is wrapped in
        OutcomeFailedError.
        """
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        if isinstance(self._value, BaseException):
            raise self._value
        raise OutcomeFailedError(self._value)

    def to_pair(self) -> tuple[T | None, E | None]:
        """Convert to (value, error) pair; exactly one side is populated."""
        return (self._value, None) if self._is_ok else (None, self._value)  # type: ignore[return-value]

    def fold(self, on_success: Callable[[T], U], on_failure: Callable[[E], F]) -> U | F | Awaitable[U | F]:
        """Collapse both branches to one value. Only the matching callback runs."""
        is_async = is_async_fn(on_success) or is_async_fn(on_failure)
        out = on_success(self._value) if self._is_ok else on_failure(self._value)  # type: ignore[arg-type]
        return resolved(out) if is_async and not inspect.isawaitable(out) else out

    def match(self) -> Matcher[E]:
        """Start matching on the error of a failure. See `Matcher`."""
        if self._is_ok:
            raise ValueError("match() needs a failure outcome; narrow with is_failure() first")
        return Matcher(self._value)  # type: ignore[arg-type]

    # ─── Transformations ───────────────────────────────────────────────

    def map(self, transform: Callable[[T], Any]) -> AnyOutcome:
        """Transform the success value, flattening nested outcomes.

        Failures pass through untouched and `transform` is never called.

        Example:
            >>> success(2).map(lambda x: failure("too small") if x < 3 else x)
            failure('too small')
        """
        if self._is_ok:
            return _lift(lambda: transform(self._value))  # type: ignore[arg-type]
        return AsyncOutcome.settled(self) if is_async_fn(transform) else self

    def map_catching(
        self,
        transform: Callable[[T], Any],
        error_transform: ErrorTransform | None = None,
    ) -> AnyOutcome:
        """Like `map`, but exceptions raised by `transform` become failures."""
        if self._is_ok:
            return _attempt(lambda: transform(self._value), error_transform)  # type: ignore[arg-type]
        return AsyncOutcome.settled(self) if is_async_fn(transform) else self

    def map_error(self, transform: Callable[[E], F]) -> AnyOutcome:
        """Replace the failure value. Successes pass through."""
        if self._is_ok:
            return AsyncOutcome.settled(self) if is_async_fn(transform) else self
        new_error = transform(self._value)  # type: ignore[arg-type]
        if inspect.isawaitable(new_error):
            return AsyncOutcome(_fail_with(new_error))
        return failure(new_error)

    def recover(self, transform: Callable[[E], Any]) -> AnyOutcome:
        """Turn a failure into whatever `transform(error)` produces.

        The original failure is resolved; only failures produced by
        `transform` itself can surface afterwards.
        """
        if self._is_ok:
            return AsyncOutcome.settled(self) if is_async_fn(transform) else self
        return _lift(lambda: transform(self._value))  # type: ignore[arg-type]

    def recover_catching(
        self,
        transform: Callable[[E], Any],
        error_transform: ErrorTransform | None = None,
    ) -> AnyOutcome:
        """Like `recover`, but exceptions raised by `transform` become failures."""
        if self._is_ok:
            return AsyncOutcome.settled(self) if is_async_fn(transform) else self
        return _attempt(lambda: transform(self._value), error_transform)  # type: ignore[arg-type]

    # ─── Side Effects ────────────────────────────────────────────────────

    def on_success(self, action: Callable[[T], Any]) -> AnyOutcome:
        """Call `action(value)` for side effects; exceptions are not caught."""
        if not self._is_ok:
            return AsyncOutcome.settled(self) if is_async_fn(action) else self
        return self._after(action(self._value))  # type: ignore[arg-type]

    def on_failure(self, action: Callable[[E], Any]) -> AnyOutcome:
        """Call `action(error)` for side effects; exceptions are not caught."""
        if self._is_ok:
            return AsyncOutcome.settled(self) if is_async_fn(action) else self
        return self._after(action(self._value))  # type: ignore[arg-type]

    def _after(self, side_effect: object) -> AnyOutcome:
        if inspect.isawaitable(side_effect):
            return AsyncOutcome(_then_return(side_effect, self))
        return self

    # ─── Dunder Methods ──────────────────────────────────────────────────

    __bool__ = lambda self: self._is_ok  # noqa: E731
    __hash__ = lambda self: hash((self._is_ok, self._value))  # noqa: E731
    __repr__ = lambda self: f"{'success' if self._is_ok else 'failure'}({self._value!r})"  # noqa: E731
    __str__ = __repr__

    def __eq__(self, other: object) -> bool:
        return self._is_ok == other._is_ok and self._value == other._value if isinstance(other, Outcome) else NotImplemented

    def __iter__(self) -> Generator[Outcome[T, E], Any, T]:
        """Do-notation hook: `value = yield from outcome` inside a computation."""
        return (yield self)


class AsyncOutcome(Generic[T, E]):
    """An Outcome that is not available yet.

    Wraps an awaitable resolving to an Outcome. The first await drives the
    awaitable inline, so a chain whose callbacks never suspend never yields
    to the event loop. If the awaitable does suspend, the rest of it is
    handed to a task and every awaiter waits on that task through
    `asyncio.shield`: cancelling one consumer never cancels the shared work,
    and every await of the same instance yields the same Outcome.

    Example:
        >>> async def fetch() -> int:
        ...     return 21
        >>> chained = from_async(fetch()).map(lambda x: x * 2)
        >>> await chained
        success(42)
    """

    __slots__ = ("_source", "_future", "_outcome", "_error")
    _kind = Kind.ASYNC

    def __init__(self, source: Awaitable[Outcome[T, E]] | None) -> None:
        self._source = source
        self._future: asyncio.Future[Outcome[T, E]] | None = None
        self._outcome: Outcome[T, E] | None = None
        self._error: BaseException | None = None

    def __await__(self) -> Generator[Any, Any, Outcome[T, E]]:
        if self._source is not None:
            self._start()
        if self._outcome is not None:
            return self._outcome
        if self._future is None:
            raise self._error  # type: ignore[misc]
        return (yield from asyncio.shield(self._future).__await__())

    def _start(self) -> None:
        """Drive the source until it completes or first suspends."""
        steps = self._source.__await__()  # type: ignore[union-attr]
        self._source = None
        try:
            signal = steps.send(None)
        except StopIteration as stop:
            self._outcome = stop.value
        except BaseException as exc:
            self._error = exc
        else:
            self._future = asyncio.ensure_future(_Resume(steps, signal))

    def __iter__(self) -> Generator[AsyncOutcome[T, E], Any, T]:
        """Do-notation hook: `value = yield from async_outcome` inside a computation."""
        return (yield self)

    def __repr__(self) -> str:
        if self._outcome is not None:
            return f"AsyncOutcome({self._outcome!r})"
        done = self._future is not None and self._future.done()
        return f"AsyncOutcome(<{'resolved' if done else 'pending'}>)"

    # ─── Constructors ──────────────────────────────────────────────────

    @classmethod
    def settled(cls, outcome: Outcome[T, E]) -> AsyncOutcome[T, E]:
        """Wrap an already-known Outcome; awaiting it never suspends."""
        inst = cls(None)
        inst._outcome = outcome
        return inst

    @classmethod
    def success(cls, value: T = None) -> AsyncOutcome[T, Any]:  # type: ignore[assignment]
        return cls.settled(success(value))

    @classmethod
    def failure(cls, error: E) -> AsyncOutcome[Any, E]:
        return cls.settled(failure(error))

    @classmethod
    def from_awaitable(cls, awaitable: Awaitable[Any]) -> AsyncOutcome[Any, Any]:
        """Normalise an awaitable of a bare value, Outcome or AsyncOutcome. Exceptions propagate."""
        if kind_of(awaitable) is Kind.ASYNC:
            return awaitable  # type: ignore[return-value]

        async def settle() -> Outcome[Any, Any]:
            return await _normalize(await awaitable)

        return cls(settle())

    @classmethod
    def from_awaitable_catching(
        cls,
        awaitable: Awaitable[Any],
        error_transform: ErrorTransform | None = None,
    ) -> AsyncOutcome[Any, Any]:
        """Like `from_awaitable`, but an exception while awaiting becomes a failure."""

        async def settle() -> Outcome[Any, Any]:
            try:
                return await _normalize(await awaitable)
            except Exception as exc:
                return failure(_capture(exc, error_transform))

        return cls(settle())

    # ─── Combinators ───────────────────────────────────────────────────

    def _then(self, step: Callable[[Outcome[T, E]], AnyOutcome]) -> AsyncOutcome[Any, Any]:
        """Await this outcome, apply the matching Outcome combinator, flatten the result."""

        async def chain() -> Outcome[Any, Any]:
            return await _settle(step(await self))

        return AsyncOutcome(chain())

    def map(self, transform: Callable[[T], Any]) -> AsyncOutcome[Any, Any]:
        return self._then(lambda outcome: outcome.map(transform))

    def map_catching(
        self,
        transform: Callable[[T], Any],
        error_transform: ErrorTransform | None = None,
    ) -> AsyncOutcome[Any, Any]:
        return self._then(lambda outcome: outcome.map_catching(transform, error_transform))

    def map_error(self, transform: Callable[[E], Any]) -> AsyncOutcome[Any, Any]:
        return self._then(lambda outcome: outcome.map_error(transform))

    def recover(self, transform: Callable[[E], Any]) -> AsyncOutcome[Any, Any]:
        return self._then(lambda outcome: outcome.recover(transform))

    def recover_catching(
        self,
        transform: Callable[[E], Any],
        error_transform: ErrorTransform | None = None,
    ) -> AsyncOutcome[Any, Any]:
        return self._then(lambda outcome: outcome.recover_catching(transform, error_transform))

    def on_success(self, action: Callable[[T], Any]) -> AsyncOutcome[T, E]:
        return self._then(lambda outcome: outcome.on_success(action))

    def on_failure(self, action: Callable[[E], Any]) -> AsyncOutcome[T, E]:
        return self._then(lambda outcome: outcome.on_failure(action))

    # ─── Getters (coroutines) ──────────────────────────────────────────

    async def is_success(self) -> bool:
        return (await self).is_success()

    async def is_failure(self) -> bool:
        return (await self).is_failure()

    async def value_or_none(self) -> T | None:
        return (await self).value_or_none()

    async def error_or_none(self) -> E | None:
        return (await self).error_or_none()

    async def value_or_default(self, default: U) -> T | U:
        return (await self).value_or_default(default)

    async def value_or_else(self, on_failure: Callable[[E], Any]) -> Any:
        out = (await self).value_or_else(on_failure)
        return await out if inspect.isawaitable(out) else out

    async def value_or_raise(self) -> T:
        return (await self).value_or_raise()

    async def to_pair(self) -> tuple[T | None, E | None]:
        return (await self).to_pair()

    async def fold(self, on_success: Callable[[T], Any], on_failure: Callable[[E], Any]) -> Any:
        out = (await self).fold(on_success, on_failure)
        return await out if inspect.isawaitable(out) else out


# ═══════════════════════════════════════════════════════════════════════════════
# Constructors
# ═══════════════════════════════════════════════════════════════════════════════


def success(value: T = None) -> Outcome[T, Any]:  # type: ignore[assignment]
    """Construct the Success branch. `value` may be omitted for a void success."""
    return Outcome(value, _OK)


def failure(error: E) -> Outcome[Any, E]:
    """Construct the Failure branch."""
    return Outcome(error, _ERR)


def is_outcome(value: object) -> bool:
    return kind_of(value) is Kind.SYNC


def is_async_outcome(value: object) -> bool:
    return kind_of(value) is Kind.ASYNC


# ═══════════════════════════════════════════════════════════════════════════════
# Flattening
# ═══════════════════════════════════════════════════════════════════════════════


def _identity(exc: Exception) -> Exception:
    return exc


def _capture(exc: Exception, error_transform: ErrorTransform | None) -> Any:
    """Convert a caught exception into a failure value."""
    if get_settings().log_captured_exceptions:
        _log.debug("exception captured", error_type=type(exc).__name__, error=str(exc))
    return (error_transform or _identity)(exc)


def _flatten(value: object) -> AnyOutcome:
    match shape_of(value):
        case Shape.OUTCOME | Shape.ASYNC_OUTCOME:
            return value  # type: ignore[return-value]
        case Shape.AWAITABLE:
            return AsyncOutcome.from_awaitable(value)  # type: ignore[arg-type]
        case Shape.GENERATOR | Shape.ASYNC_GENERATOR:
            from .sequencing import interpret
            return interpret(value)  # type: ignore[arg-type]
        case _:
            return success(value)


def _lift(produce: Callable[[], Any]) -> AnyOutcome:
    """Invoke `produce` and flatten its return value. Exceptions propagate."""
    return _flatten(produce())


def _attempt(produce: Callable[[], Any], error_transform: ErrorTransform | None = None) -> AnyOutcome:
    """Invoke `produce` and flatten its return value, turning exceptions into failures."""
    try:
        value = produce()
    except Exception as exc:
        return failure(_capture(exc, error_transform))
    match shape_of(value):
        case Shape.OUTCOME:
            return value  # type: ignore[return-value]
        case Shape.ASYNC_OUTCOME | Shape.AWAITABLE:
            return AsyncOutcome.from_awaitable_catching(value, error_transform)  # type: ignore[arg-type]
        case Shape.GENERATOR | Shape.ASYNC_GENERATOR:
            from .sequencing import interpret_catching
            return interpret_catching(value, error_transform)  # type: ignore[arg-type]
        case _:
            return success(value)


async def _normalize(value: object) -> Outcome[Any, Any]:
    """Resolve the value an awaitable produced into a plain Outcome."""
    match shape_of(value):
        case Shape.OUTCOME:
            return value  # type: ignore[return-value]
        case Shape.ASYNC_OUTCOME:
            return await value  # type: ignore[misc]
        case _:
            return success(value)


async def _settle(outcome: AnyOutcome) -> Outcome[Any, Any]:
    return await outcome if kind_of(outcome) is Kind.ASYNC else outcome  # type: ignore[misc,return-value]


async def _fail_with(error: Awaitable[Any]) -> Outcome[Any, Any]:
    return failure(await error)


async def _then_return(side_effect: Awaitable[Any], outcome: Outcome[T, E]) -> Outcome[T, E]:
    await side_effect
    return outcome


class _Resume:
    """Finish driving an await iterator that already yielded `signal` to the loop.

    Scheduled as a task by `AsyncOutcome._start`; the task takes over the wait
    on `signal` and forwards every wake-up (or thrown exception) to `steps`.
    """

    __slots__ = ("_steps", "_signal")

    def __init__(self, steps: Generator[Any, Any, Any], signal: Any) -> None:
        self._steps = steps
        self._signal = signal

    def __await__(self) -> Generator[Any, Any, Any]:
        steps, signal = self._steps, self._signal
        while True:
            try:
                received = yield signal
            except GeneratorExit:
                steps.close()
                raise
            except BaseException as exc:
                try:
                    signal = steps.throw(exc)
                except StopIteration as stop:
                    return stop.value
                continue
            try:
                signal = steps.send(received)
            except StopIteration as stop:
                return stop.value
