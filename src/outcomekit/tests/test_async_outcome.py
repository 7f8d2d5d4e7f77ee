"""Tests for AsyncOutcome and the sync/async promotion rule."""

from __future__ import annotations

import asyncio

import pytest

from outcomekit import AsyncOutcome, failure, from_async, from_async_catching, is_async_outcome, success


class Abort(BaseException):
    pass


async def double(x: int) -> int:
    return x * 2


async def shout(error: str) -> str:
    return error.upper()


# ─────────────────────────────────────────────────────────────────────────────
# Construction & Awaiting
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_settled_constructors() -> None:
    assert await AsyncOutcome.success(1) == success(1)
    assert await AsyncOutcome.failure("e") == failure("e")
    assert repr(AsyncOutcome.success(1)) == "AsyncOutcome(success(1))"


@pytest.mark.asyncio
async def test_awaitable_is_scheduled_once() -> None:
    """Awaiting twice returns the cached outcome without re-running the source."""
    calls = 0

    async def fetch() -> int:
        nonlocal calls
        calls += 1
        return calls

    pending = from_async(fetch())
    first = await pending
    second = await pending

    assert first == success(1)
    assert first is second
    assert calls == 1


@pytest.mark.asyncio
async def test_from_async_normalizes_resolved_shapes() -> None:
    async def bare() -> int:
        return 1

    async def outcome() -> object:
        return failure("nested")

    async def async_outcome() -> object:
        return AsyncOutcome.success("deep")

    assert await from_async(bare) == success(1)
    assert await from_async(outcome()) == failure("nested")
    assert await from_async(async_outcome) == success("deep")
    assert await from_async(lambda: 5) == success(5)


@pytest.mark.asyncio
async def test_from_async_propagates_exceptions() -> None:
    async def boom() -> int:
        raise ValueError("down")

    with pytest.raises(ValueError, match="down"):
        await from_async(boom())


@pytest.mark.asyncio
async def test_from_async_catching() -> None:
    async def boom() -> int:
        raise ValueError("down")

    caught = await from_async_catching(boom())
    assert isinstance(caught.error_or_none(), ValueError)

    mapped = await from_async_catching(boom, lambda exc: f"mapped: {exc}")
    assert mapped == failure("mapped: down")


@pytest.mark.asyncio
async def test_from_async_catching_lets_base_exceptions_through() -> None:
    async def abort() -> int:
        raise Abort()

    with pytest.raises(Abort):
        await from_async_catching(abort())


# ─────────────────────────────────────────────────────────────────────────────
# Promotion Rule
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_async_callback_promotes() -> None:
    result = success(2).map(double)
    assert is_async_outcome(result)
    assert await result == success(4)


@pytest.mark.asyncio
async def test_async_callback_promotes_even_when_skipped() -> None:
    """The result shape depends on the callback, not on the branch taken."""
    calls: list[int] = []

    async def spy(x: int) -> int:
        calls.append(x)
        return x

    skipped = failure("e").map(spy)
    assert is_async_outcome(skipped)
    assert await skipped == failure("e")

    assert is_async_outcome(success(1).recover(shout))
    assert is_async_outcome(success(1).map_error(shout))
    assert is_async_outcome(failure("e").on_success(spy))
    assert calls == []


@pytest.mark.asyncio
async def test_sync_callback_returning_awaitable_is_async() -> None:
    result = success(1).map(lambda x: asyncio.sleep(0, result=x + 1))
    assert is_async_outcome(result)
    assert await result == success(2)


@pytest.mark.asyncio
async def test_async_transforms() -> None:
    assert await failure("e").recover(shout) == success("E")
    assert await failure("e").map_error(shout) == failure("E")
    assert await success(3).map_catching(double) == success(6)


@pytest.mark.asyncio
async def test_async_map_catching_captures_awaited_exceptions() -> None:
    async def boom(x: int) -> int:
        raise KeyError(x)

    caught = await success(1).map_catching(boom)
    assert isinstance(caught.error_or_none(), KeyError)
    assert await failure("e").recover_catching(boom, lambda exc: "mapped") == failure("mapped")


@pytest.mark.asyncio
async def test_async_side_effect_completes_before_result() -> None:
    seen: list[int] = []

    async def record(x: int) -> None:
        await asyncio.sleep(0)
        seen.append(x)

    assert await success(1).on_success(record) == success(1)
    assert seen == [1]


# ─────────────────────────────────────────────────────────────────────────────
# Chaining on AsyncOutcome
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_chain_mixes_sync_and_async_callbacks() -> None:
    result = (
        AsyncOutcome.success(1)
        .map(lambda x: x + 1)
        .map(double)
        .map(lambda x: failure(f"too big: {x}") if x > 3 else x)
        .recover(shout)
    )
    assert await result == success("TOO BIG: 4")


@pytest.mark.asyncio
async def test_failure_passes_through_async_chain() -> None:
    calls: list[int] = []
    result = AsyncOutcome.failure("e").map(calls.append).on_success(calls.append)
    assert await result == failure("e")
    assert calls == []


@pytest.mark.asyncio
async def test_on_failure_sees_error() -> None:
    seen: list[str] = []
    assert await AsyncOutcome.failure("e").on_failure(seen.append) == failure("e")
    assert seen == ["e"]


# ─────────────────────────────────────────────────────────────────────────────
# Getters
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_getters_are_coroutines() -> None:
    ok, err = AsyncOutcome.success(1), AsyncOutcome.failure("e")

    assert await ok.is_success() is True
    assert await err.is_failure() is True
    assert await ok.value_or_none() == 1
    assert await err.error_or_none() == "e"
    assert await err.value_or_default(0) == 0
    assert await err.value_or_else(shout) == "E"
    assert await ok.to_pair() == (1, None)
    assert await err.fold(lambda v: v, shout) == "E"
    assert await ok.value_or_raise() == 1


@pytest.mark.asyncio
async def test_value_or_raise_on_async_failure() -> None:
    with pytest.raises(KeyError):
        await AsyncOutcome.failure(KeyError("k")).value_or_raise()


@pytest.mark.asyncio
async def test_sync_getters_promote_with_async_callbacks() -> None:
    assert await success(1).value_or_else(shout) == 1
    assert await success(1).fold(lambda v: v + 1, shout) == 2
    assert await failure("e").fold(lambda v: v, shout) == "E"


# ─────────────────────────────────────────────────────────────────────────────
# Scheduling & Cancellation
# ─────────────────────────────────────────────────────────────────────────────


async def passthrough(x: int) -> int:
    return x


@pytest.mark.asyncio
async def test_chain_without_suspension_never_yields_to_loop() -> None:
    """Callbacks that never suspend resolve inline, without a single loop tick."""
    ticks = 0

    async def count() -> None:
        nonlocal ticks
        while True:
            await asyncio.sleep(0)
            ticks += 1

    counter = asyncio.create_task(count())
    await asyncio.sleep(0)
    before = ticks

    result = await success(1).map(passthrough).map(passthrough).map(passthrough)

    assert result == success(1)
    assert ticks == before

    counter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await counter


@pytest.mark.asyncio
async def test_cancelled_consumer_leaves_sibling_chains_intact() -> None:
    async def slow() -> int:
        await asyncio.sleep(0.05)
        return 7

    shared = from_async(slow())
    plus_one = shared.map(lambda x: x + 1)
    plus_two = shared.map(lambda x: x + 2)

    with pytest.raises(TimeoutError):
        await asyncio.wait_for(plus_one, timeout=0.01)

    assert await plus_two == success(9)
    assert await shared == success(7)
    assert await plus_one == success(8)


@pytest.mark.asyncio
async def test_concurrent_awaiters_share_one_run() -> None:
    calls = 0

    async def fetch() -> int:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return calls

    pending = from_async(fetch())
    first, second = await asyncio.gather(pending.map(lambda x: x), pending.map(lambda x: x * 10))

    assert (first, second) == (success(1), success(10))
    assert calls == 1


@pytest.mark.asyncio
async def test_exception_is_replayed_to_every_awaiter() -> None:
    async def boom() -> int:
        raise ValueError("once")

    pending = from_async(boom())
    for _ in range(2):
        with pytest.raises(ValueError, match="once"):
            await pending
