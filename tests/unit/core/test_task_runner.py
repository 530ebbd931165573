"""Unit tests for bounded task execution."""

from __future__ import annotations

import asyncio

import pytest

from core.errors import RelstoreConfigError
from core.task_runner import run_bounded


def test_run_bounded_processes_every_item() -> None:
    """Every item should be handed to the worker exactly once."""
    seen: list[int] = []

    async def worker(item: int) -> None:
        await asyncio.sleep(0)
        seen.append(item)

    asyncio.run(run_bounded(range(50), worker, 7))

    assert sorted(seen) == list(range(50))


def test_run_bounded_respects_concurrency_limit() -> None:
    """No more than the configured number of tasks should run at once."""
    running = 0
    peak = 0

    async def worker(item: int) -> None:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.001 * (item % 3))
        running -= 1

    asyncio.run(run_bounded(range(30), worker, 4))

    assert peak == 4


def test_run_bounded_fails_fast_without_scheduling_more_work() -> None:
    """The first failure should surface before queued items are started."""
    started: list[int] = []

    async def worker(item: int) -> None:
        started.append(item)
        if item == 0:
            raise ValueError("boom")
        await asyncio.sleep(0.05)

    with pytest.raises(ValueError, match="boom"):
        asyncio.run(run_bounded(range(10), worker, 2))

    assert started == [0, 1]


def test_run_bounded_returns_for_empty_input() -> None:
    """Empty work lists should complete without calling the worker."""
    seen: list[int] = []

    async def worker(item: int) -> None:
        seen.append(item)

    result = asyncio.run(run_bounded([], worker))

    assert result is None and seen == []


def test_run_bounded_rejects_non_positive_limit() -> None:
    """A zero limit would never schedule work and is rejected."""

    async def worker(item: int) -> None:
        _ = item

    with pytest.raises(RelstoreConfigError):
        asyncio.run(run_bounded([1], worker, 0))
