"""Outcomekit - Typed success/failure values for sync and async Python.

An Outcome holds either a success value or a failure value. Every
combinator works the same on both, and an AsyncOutcome carries the same
vocabulary across an await. A computation becomes async the moment any
callback in the chain is async, and never otherwise.

Quick Start:
    >>> from outcomekit import attempt, failure, success
    >>>
    >>> port = attempt(lambda: int("8080")).map(lambda p: p + 1)
    >>> port
    success(8081)
    >>> failure("boom").value_or_default(0)
    0

Async Chains:
    >>> async def fetch(user_id: int) -> dict:
    ...     return {"id": user_id}
    >>>
    >>> pending = success(1).map(fetch)          # AsyncOutcome
    >>> user = await pending.value_or_raise()    # {'id': 1}

Generator Sequencing:
    >>> from outcomekit import run
    >>>
    >>> def checkout():
    ...     cart = yield from load_cart()
    ...     total = yield from price(cart)
    ...     return total
    >>>
    >>> run(checkout)  # stops at the first failure

Aggregation:
    >>> from outcomekit import all_of
    >>> all_of(success(1), success(2))
    success([1, 2])

Error Matching:
    >>> failure(KeyError("k")).match().when(KeyError, lambda e: "missing").run()
    'missing'
"""

from __future__ import annotations

__version__ = "0.1.0"

# Core
from .core import (
    AsyncOutcome,
    Matcher,
    Outcome,
    all_of,
    all_of_catching,
    assert_failure,
    assert_success,
    assert_unreachable,
    attempt,
    failure,
    from_async,
    from_async_catching,
    is_async_outcome,
    is_outcome,
    run,
    run_catching,
    success,
    wrap,
)

# Errors
from .errors import (
    ErrorCode,
    ErrorContext,
    ErrorTrace,
    NonExhaustiveError,
    OutcomeAssertionError,
    OutcomeError,
    OutcomeFailedError,
    classify_exception,
    trace_from_exc,
)

# Config
from .config import OutcomeSettings, get_settings

# Observability
from .observability import configure_logging, get_logger

__all__ = [
    # Version
    "__version__",
    # Containers
    "Outcome", "AsyncOutcome", "success", "failure", "is_outcome", "is_async_outcome",
    # Adapters
    "attempt", "wrap", "from_async", "from_async_catching", "assert_success", "assert_failure",
    # Aggregation
    "all_of", "all_of_catching",
    # Sequencing
    "run", "run_catching",
    # Matching
    "Matcher", "assert_unreachable",
    # Errors
    "OutcomeError", "OutcomeFailedError", "OutcomeAssertionError", "NonExhaustiveError",
    "ErrorCode", "classify_exception", "ErrorContext", "ErrorTrace", "trace_from_exc",
    # Config
    "OutcomeSettings", "get_settings",
    # Observability
    "configure_logging", "get_logger",
]
