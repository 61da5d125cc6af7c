"""
Order-preserving async map with a concurrency limit.
"""

import asyncio
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def map_with_concurrency(
    items: Iterable[T],
    mapper: Callable[[T], Awaitable[R]],
    concurrency: Optional[int] = None,
) -> List[R]:
    """Apply ``mapper`` to every item with at most ``concurrency`` in flight.

    A pool of workers pulls items from the front of the sequence, so with a
    limit of 1 items run strictly one after another in input order. Results
    are returned in input order regardless of completion order.

    Once any mapper raises, no further items are started. The exception is
    re-raised as soon as every item before the failed one has succeeded, so
    the error always belongs to the lowest failing index. Mappers still in
    flight after that point are left running in the background and are
    never cancelled.

    Args:
        items: Items to map
        mapper: Coroutine function applied to each item
        concurrency: Maximum mappers in flight, None for unbounded

    Raises:
        ValueError: If ``concurrency`` is not a positive integer or None
    """
    if concurrency is not None and (
        isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1
    ):
        raise ValueError(f"Expected a positive integer concurrency, got {concurrency!r}")

    pending = list(items)
    if not pending:
        return []

    results: List[Optional[R]] = [None] * len(pending)
    finished = [False] * len(pending)
    errors: Dict[int, Exception] = {}
    queue = iter(enumerate(pending))
    settled = asyncio.Event()

    def outcome_known() -> bool:
        if not errors:
            return all(finished)
        return all(finished[: min(errors)])

    async def worker() -> None:
        for index, item in queue:
            if errors:
                return
            try:
                results[index] = await mapper(item)
            except Exception as e:
                errors[index] = e
            finished[index] = True
            if outcome_known():
                settled.set()
            if index in errors:
                return

    limit = len(pending) if concurrency is None else min(concurrency, len(pending))
    workers = [asyncio.ensure_future(worker()) for _ in range(limit)]
    waiter = asyncio.ensure_future(settled.wait())

    # A worker only stops before the outcome is known when it was cancelled or
    # hit a non-Exception error; surface that instead of waiting on the event.
    while not waiter.done():
        await asyncio.wait([waiter, *workers], return_when=asyncio.FIRST_COMPLETED)
        for w in workers:
            if w.done() and not settled.is_set() and (w.cancelled() or w.exception()):
                waiter.cancel()
                w.result()

    if errors:
        raise errors[min(errors)]
    return results  # type: ignore[return-value]
