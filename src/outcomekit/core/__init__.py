"""Outcome algebra: containers, combinators, aggregation, adapters and sequencing."""

from .outcome import AsyncOutcome, Outcome, failure, is_async_outcome, is_outcome, success
from .adapters import assert_failure, assert_success, attempt, from_async, from_async_catching, wrap
from .aggregate import all_of, all_of_catching
from .helpers import assert_unreachable
from .matcher import Matcher
from .sequencing import run, run_catching

__all__ = [
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
]
