"""Tests for the synchronous Outcome container.

Validates:
- Functor laws
- Monad laws (map doubles as bind through flattening)
- Value extraction and folding
- Skipped callbacks and side effects
- Catching variants and error transforms
"""

from __future__ import annotations

from typing import Callable

import pytest

from outcomekit import OutcomeFailedError, failure, is_async_outcome, is_outcome, success
from outcomekit.core import Outcome


class Abort(BaseException):
    """Stands in for KeyboardInterrupt-style exceptions."""


def _raise(exc: BaseException) -> Callable[..., object]:
    def raiser(*_: object) -> object:
        raise exc
    return raiser


# ═════════════════════════════════════════════════════════════════════════════
# Property Tests - Functor Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_functor_identity() -> None:
    """Functor law: fmap id = id"""
    assert success(42).map(lambda x: x) == success(42)
    assert failure("fail").map(lambda x: x) == failure("fail")


def test_functor_composition() -> None:
    """Functor law: fmap (f . g) = fmap f . fmap g"""
    f: Callable[[int], int] = lambda x: x + 1
    g: Callable[[int], int] = lambda x: x * 2

    outcome = success(5)
    assert outcome.map(lambda x: f(g(x))) == outcome.map(g).map(f)


# ═════════════════════════════════════════════════════════════════════════════
# Property Tests - Monad Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_monad_left_identity() -> None:
    """Monad law: return a >>= f = f a"""
    f: Callable[[int], Outcome[int, str]] = lambda x: success(x * 2)
    assert success(21).map(f) == f(21)


def test_monad_right_identity() -> None:
    """Monad law: m >>= return = m"""
    assert success(7).map(success) == success(7)
    assert failure("e").map(success) == failure("e")


def test_monad_associativity() -> None:
    """Monad law: (m >>= f) >>= g = m >>= (\\x -> f x >>= g)"""
    f = lambda x: success(x + 1)
    g = lambda x: failure("odd") if x % 2 else success(x)

    for m in (success(1), success(2), failure("start")):
        assert m.map(f).map(g) == m.map(lambda x: f(x).map(g))


# ═════════════════════════════════════════════════════════════════════════════
# Discriminants & Extraction
# ═════════════════════════════════════════════════════════════════════════════


def test_discriminants() -> None:
    assert success(1).is_success() and not success(1).is_failure()
    assert failure("e").is_failure() and not failure("e").is_success()


def test_void_success() -> None:
    outcome = success()
    assert outcome.is_success()
    assert outcome.value_or_none() is None


def test_value_and_error_getters() -> None:
    assert success(1).value_or_none() == 1
    assert success(1).error_or_none() is None
    assert failure("e").value_or_none() is None
    assert failure("e").error_or_none() == "e"


def test_value_or_default() -> None:
    assert success(1).value_or_default(0) == 1
    assert failure("e").value_or_default(0) == 0


def test_value_or_else_only_runs_on_failure() -> None:
    calls: list[str] = []

    def fallback(error: str) -> str:
        calls.append(error)
        return error.upper()

    assert success("ok").value_or_else(fallback) == "ok"
    assert calls == []
    assert failure("bad").value_or_else(fallback) == "BAD"
    assert calls == ["bad"]


def test_value_or_raise() -> None:
    assert success(3).value_or_raise() == 3

    error = ValueError("broken")
    with pytest.raises(ValueError) as exc_info:
        failure(error).value_or_raise()
    assert exc_info.value is error

    with pytest.raises(OutcomeFailedError) as wrapped:
        failure("boom").value_or_raise()
    assert wrapped.value.error == "boom"


def test_to_pair() -> None:
    assert success(1).to_pair() == (1, None)
    assert failure("e").to_pair() == (None, "e")


def test_fold_runs_exactly_one_branch() -> None:
    calls: list[str] = []

    def on_success(v: int) -> str:
        calls.append("success")
        return f"value={v}"

    def on_failure(e: str) -> str:
        calls.append("failure")
        return f"error={e}"

    assert success(1).fold(on_success, on_failure) == "value=1"
    assert failure("x").fold(on_success, on_failure) == "error=x"
    assert calls == ["success", "failure"]


# ═════════════════════════════════════════════════════════════════════════════
# Transformations
# ═════════════════════════════════════════════════════════════════════════════


def test_map_flattens_callback_returns() -> None:
    assert success(2).map(lambda x: x * 3) == success(6)
    assert success(2).map(lambda x: success(x + 1)) == success(3)
    assert success(2).map(lambda x: failure(f"rejected {x}")) == failure("rejected 2")


def test_map_runs_generator_callbacks() -> None:
    def double_then_inc(x: int):
        doubled = yield from success(x * 2)
        return doubled + 1

    assert success(2).map(double_then_inc) == success(5)


def test_map_skips_callback_on_failure() -> None:
    calls: list[int] = []
    original = failure("stop")

    result = original.map(calls.append)

    assert result is original
    assert calls == []


def test_map_does_not_catch() -> None:
    with pytest.raises(ZeroDivisionError):
        success(1).map(lambda x: x / 0)


def test_map_catching() -> None:
    caught = success(1).map_catching(lambda x: x / 0)
    assert isinstance(caught.error_or_none(), ZeroDivisionError)

    transformed = success(1).map_catching(lambda x: x / 0, lambda exc: type(exc).__name__)
    assert transformed == failure("ZeroDivisionError")

    assert success(1).map_catching(lambda x: failure("explicit")) == failure("explicit")
    assert success(4).map_catching(lambda x: x // 2) == success(2)


def test_map_error() -> None:
    assert failure(1).map_error(lambda e: e + 1) == failure(2)

    original = success(1)
    assert original.map_error(lambda e: e + 1) is original


def test_recover() -> None:
    assert failure("e").recover(lambda e: 0) == success(0)
    assert failure("e").recover(lambda e: failure(f"still {e}")) == failure("still e")

    calls: list[object] = []
    original = success(1)
    assert original.recover(calls.append) is original
    assert calls == []


def test_recover_catching() -> None:
    caught = failure("e").recover_catching(_raise(KeyError("missing")))
    assert isinstance(caught.error_or_none(), KeyError)

    assert failure("e").recover_catching(_raise(KeyError("k")), lambda exc: "mapped") == failure("mapped")
    assert failure("e").recover_catching(lambda e: e * 2) == success("ee")


def test_catching_variants_let_base_exceptions_through() -> None:
    with pytest.raises(Abort):
        success(1).map_catching(_raise(Abort()))
    with pytest.raises(Abort):
        failure(1).recover_catching(_raise(Abort()))


# ═════════════════════════════════════════════════════════════════════════════
# Side Effects
# ═════════════════════════════════════════════════════════════════════════════


def test_on_success_and_on_failure() -> None:
    seen: list[object] = []
    ok, err = success(1), failure("e")

    assert ok.on_success(seen.append) is ok
    assert ok.on_failure(seen.append) is ok
    assert err.on_failure(seen.append) is err
    assert err.on_success(seen.append) is err

    assert seen == [1, "e"]


def test_side_effect_exceptions_propagate() -> None:
    with pytest.raises(RuntimeError):
        success(1).on_success(_raise(RuntimeError("side effect")))


# ═════════════════════════════════════════════════════════════════════════════
# Dunder Methods & Guards
# ═════════════════════════════════════════════════════════════════════════════


def test_equality_hash_bool() -> None:
    assert success(1) == success(1)
    assert success(1) != failure(1)
    assert success(1) != 1
    assert len({success(1), success(1), failure(1)}) == 2
    assert bool(success(0)) is True
    assert bool(failure("e")) is False


def test_repr() -> None:
    assert repr(success(1)) == "success(1)"
    assert repr(failure("boom")) == "failure('boom')"


def test_guards() -> None:
    assert is_outcome(success(1))
    assert is_outcome(failure("e"))
    assert not is_outcome(1)
    assert not is_async_outcome(success(1))


def test_match_requires_failure() -> None:
    with pytest.raises(ValueError):
        success(1).match()


def test_hash_follows_payload_hashability() -> None:
    assert hash(success((1, 2))) == hash(success((1, 2)))

    aggregated = success([1, 2])
    assert aggregated == success([1, 2])
    with pytest.raises(TypeError):
        hash(aggregated)
