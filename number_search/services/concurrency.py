"""
Settle-all fan-out helpers.

Every concurrent step in the service goes through these two functions:
settle_all() runs a group of coroutines to completion and reports each one's
outcome in launch order; run_in_batches() feeds fixed-size groups through
settle_all() one after another, which bounds the number of calls in flight.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class Outcome(Generic[R]):
    """Result of one settled task: either a value or the exception it raised."""

    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(awaitables: Iterable[Awaitable[R]]) -> List[Outcome[R]]:
    """
    Await every task, success or failure, and return outcomes in launch order.

    One failure never cancels its siblings.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    outcomes: List[Outcome[R]] = []
    for result in results:
        if isinstance(result, BaseException):
            outcomes.append(Outcome(error=result))
        else:
            outcomes.append(Outcome(value=result))
    return outcomes


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Split items into consecutive lists of at most `size`."""
    if size < 1:
        raise ValueError("batch size must be >= 1")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int,
    label: str = "Batch",
) -> List[Outcome[R]]:
    """
    Run `worker` over items in sequential batches of `batch_size`.

    Within a batch every call is started together and all of them settle
    before the next batch begins.

    Args:
        items: Inputs, in the order results should come back
        worker: Coroutine function applied to each item
        batch_size: Maximum number of calls in flight
        label: Prefix used in log lines

    Returns:
        One Outcome per item, aligned with `items`
    """
    batches = chunk(items, batch_size)
    outcomes: List[Outcome[R]] = []

    for batch_num, batch in enumerate(batches, start=1):
        logger.debug("[%s %d/%d] Dispatching %d item(s)", label, batch_num, len(batches), len(batch))
        batch_outcomes = await settle_all(worker(item) for item in batch)
        failed = sum(1 for o in batch_outcomes if not o.ok)
        if failed:
            logger.warning("[%s %d/%d] %d of %d failed", label, batch_num, len(batches), failed, len(batch))
        outcomes.extend(batch_outcomes)

    return outcomes


def successful_values(outcomes: Iterable[Outcome[Any]]) -> List[Any]:
    """Values of fulfilled outcomes that are not None, in order."""
    return [o.value for o in outcomes if o.ok and o.value is not None]
