"""Concurrent fan-out helpers.

Two shapes are needed: a fixed-size worker pool draining a queue (issue
details) and a plain "everything at once" map (user profiles). Both turn
every call into an ``Outcome`` instead of raising, so callers decide what a
failure means.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class Outcome(Generic[T, R]):
    item: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _attempt(item: T, func: Callable[[T], Awaitable[R]]) -> Outcome[T, R]:
    try:
        return Outcome(item, value=await func(item))
    except Exception as e:
        return Outcome(item, error=e)


async def run_bounded(
    items: Sequence[T],
    func: Callable[[T], Awaitable[R]],
    concurrency: int,
) -> list[Outcome[T, R]]:
    """
    Run ``func`` over ``items`` with at most ``concurrency`` calls in flight.

    Workers pop (index, item) pairs off a shared queue until it is empty.
    ``get_nowait`` never yields to the event loop, so a pop is exclusive:
    no item is handed to two workers and none is skipped.
    Outcomes come back in input order, not completion order.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    queue: asyncio.Queue[tuple[int, T]] = asyncio.Queue()
    for pair in enumerate(items):
        queue.put_nowait(pair)
    results: list[Any] = [None] * len(items)

    async def worker() -> None:
        while True:
            try:
                idx, item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            results[idx] = await _attempt(item, func)

    n_workers = min(concurrency, len(items))
    log.debug("Starting worker pool", extra={"workers": n_workers, "items": len(items)})
    await asyncio.gather(*(worker() for _ in range(n_workers)))
    return results


async def run_unbounded(
    items: Sequence[T],
    func: Callable[[T], Awaitable[R]],
) -> list[Outcome[T, R]]:
    """Issue every call at once. Outcomes in input order."""
    return list(await asyncio.gather(*(_attempt(item, func) for item in items)))


__all__ = ["Outcome", "run_bounded", "run_unbounded"]
