"""Tests for the polling scheduler."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from execution_tracker.scheduler import PollingScheduler


async def test_start_refreshes_immediately() -> None:
    """The first refresh happens before start returns."""
    refresh = AsyncMock()
    scheduler = PollingScheduler(refresh=refresh, interval=60)

    await scheduler.start()

    refresh.assert_awaited_once()
    assert scheduler.running
    await scheduler.close()


async def test_refreshes_repeatedly() -> None:
    """Keeps refreshing every interval."""
    refresh = AsyncMock()
    scheduler = PollingScheduler(refresh=refresh, interval=0.01)

    await scheduler.start()
    await asyncio.sleep(0.06)
    await scheduler.close()

    assert refresh.await_count >= 3


async def test_stop_halts_refreshes() -> None:
    """No refresh is issued after stop."""
    refresh = AsyncMock()
    scheduler = PollingScheduler(refresh=refresh, interval=0.01)

    await scheduler.start()
    await asyncio.sleep(0.03)
    scheduler.stop()
    await asyncio.sleep(0)
    count = refresh.await_count
    await asyncio.sleep(0.05)

    assert refresh.await_count == count
    assert not scheduler.running


async def test_restart_replaces_timer() -> None:
    """Starting again cancels the previous timer instead of stacking it."""
    scheduler = PollingScheduler(refresh=AsyncMock(), interval=60)

    await scheduler.start()
    first_timer = scheduler._timer
    await scheduler.start()
    await asyncio.sleep(0)

    assert first_timer is not None
    assert first_timer.cancelled()
    assert scheduler._timer is not first_timer
    assert scheduler.running
    await scheduler.close()


async def test_toggle_pauses_without_stopping_timer() -> None:
    """Disabled ticks are no-ops while the timer keeps running."""
    refresh = AsyncMock()
    scheduler = PollingScheduler(refresh=refresh, interval=0.01)
    await scheduler.start()

    assert scheduler.toggle() is False
    await asyncio.sleep(0.05)

    assert refresh.await_count == 1
    assert scheduler.running

    assert scheduler.toggle() is True
    await asyncio.sleep(0.05)
    await scheduler.close()

    assert refresh.await_count > 1


async def test_failing_refresh_does_not_halt_ticks(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """An exception in one refresh is logged and ticking continues."""
    refresh = AsyncMock(side_effect=RuntimeError("boom"))
    scheduler = PollingScheduler(refresh=refresh, interval=0.01)

    with caplog.at_level(logging.ERROR):
        await scheduler.start()
        await asyncio.sleep(0.06)
        await scheduler.close()

    assert refresh.await_count >= 3
    assert "Execution refresh failed" in caplog.text
    assert "boom" in caplog.text


async def test_slow_refreshes_never_overlap() -> None:
    """A tick firing while the previous refresh is in flight is skipped."""
    active = 0
    max_active = 0
    calls = 0

    async def slow_refresh() -> None:
        nonlocal active, max_active, calls
        calls += 1
        active += 1
        max_active = max(max_active, active)
        await asyncio.sleep(0.03)
        active -= 1

    scheduler = PollingScheduler(refresh=slow_refresh, interval=0.01)

    await scheduler.start()
    await asyncio.sleep(0.12)
    await scheduler.close()

    assert max_active == 1
    assert calls >= 2
    assert active == 0


async def test_restart_waits_for_in_flight_refresh() -> None:
    """Restarting while a timer refresh is running does not overlap refreshes."""
    active = 0
    max_active = 0
    calls = 0

    async def slow_refresh() -> None:
        nonlocal active, max_active, calls
        calls += 1
        active += 1
        max_active = max(max_active, active)
        await asyncio.sleep(0.05)
        active -= 1

    scheduler = PollingScheduler(refresh=slow_refresh, interval=0.01)

    await scheduler.start()
    await asyncio.sleep(0.03)
    assert active == 1

    await scheduler.start()
    await scheduler.close()

    assert max_active == 1
    assert calls >= 3
    assert active == 0


async def test_context_manager_lifecycle() -> None:
    """The async context manager starts and closes the scheduler."""
    refresh = AsyncMock()

    async with PollingScheduler(refresh=refresh, interval=60) as scheduler:
        assert scheduler.running
        refresh.assert_awaited_once()

    assert not scheduler.running
