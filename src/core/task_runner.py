"""Bounded concurrent task execution.

This module runs one async unit of work per item with a fixed cap on
in-flight tasks. The first failure is raised as soon as it happens;
tasks already started keep running and their outcomes are discarded.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Awaitable, Callable, Iterable, TypeVar

from core.constants import DEFAULT_CONCURRENCY
from core.errors import RelstoreConfigError

T = TypeVar("T")


async def run_bounded(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[object]],
    concurrency: int = DEFAULT_CONCURRENCY,
) -> None:
    """Run ``worker`` over every item with at most ``concurrency`` in flight.

    Completion order is unspecified. No new work is scheduled after the
    first failure, and in-flight tasks are not cancelled.

    Args:
        items: Work items.
        worker: Async callable applied to each item.
        concurrency: Maximum number of tasks running at once.

    Raises:
        RelstoreConfigError: If ``concurrency`` is below one.
        Exception: The first exception raised by any worker.
    """
    if concurrency < 1:
        raise RelstoreConfigError(f"Concurrency limit must be at least 1, got {concurrency}.")
    pending = deque(items)
    if not pending:
        return
    loop = asyncio.get_running_loop()
    outcome: asyncio.Future[None] = loop.create_future()
    in_flight: set[asyncio.Task[object]] = set()

    def schedule() -> None:
        while pending and len(in_flight) < concurrency:
            task = loop.create_task(_as_coroutine(worker, pending.popleft()))
            in_flight.add(task)
            task.add_done_callback(on_done)

    def on_done(task: asyncio.Task[object]) -> None:
        in_flight.discard(task)
        error = None if task.cancelled() else task.exception()
        if outcome.done():
            return
        if task.cancelled():
            outcome.set_exception(asyncio.CancelledError())
            return
        if error is not None:
            outcome.set_exception(error)
            return
        schedule()
        if not pending and not in_flight:
            outcome.set_result(None)

    schedule()
    await outcome


async def _as_coroutine(worker: Callable[[T], Awaitable[object]], item: T) -> object:
    return await worker(item)
