from __future__ import annotations
import asyncio

import pytest

from redmine_reporting.pool import run_bounded, run_unbounded


def test_run_bounded_caps_in_flight_and_visits_each_item_once():
    in_flight = 0
    peak = 0
    seen: list[int] = []

    async def work(n: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001 * (n % 3))
        seen.append(n)
        in_flight -= 1
        return n * 2

    items = list(range(23))
    outcomes = asyncio.run(run_bounded(items, work, 5))

    assert peak == 5
    assert sorted(seen) == items
    assert [o.item for o in outcomes] == items
    assert [o.value for o in outcomes] == [n * 2 for n in items]


def test_run_bounded_turns_failures_into_outcomes():
    async def work(n: int) -> int:
        await asyncio.sleep(0)
        if n % 2:
            raise RuntimeError(f"bad {n}")
        return n

    outcomes = asyncio.run(run_bounded([0, 1, 2, 3], work, 2))

    assert [o.ok for o in outcomes] == [True, False, True, False]
    assert str(outcomes[1].error) == "bad 1"
    assert outcomes[1].value is None


def test_run_bounded_with_fewer_items_than_workers():
    async def work(n: int) -> int:
        return n

    assert asyncio.run(run_bounded([], work, 5)) == []
    assert [o.value for o in asyncio.run(run_bounded([9], work, 5))] == [9]


def test_run_bounded_rejects_zero_workers():
    async def work(n: int) -> int:
        return n

    with pytest.raises(ValueError):
        asyncio.run(run_bounded([1], work, 0))


def test_run_unbounded_starts_everything_at_once():
    in_flight = 0
    peak = 0

    async def work(n: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1
        if n == 3:
            raise ValueError("nope")
        return n

    outcomes = asyncio.run(run_unbounded(list(range(12)), work))

    assert peak == 12
    assert [o.ok for o in outcomes] == [n != 3 for n in range(12)]
