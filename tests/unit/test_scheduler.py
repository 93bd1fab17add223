"""
Unit tests for the periodic task runner.
"""

import asyncio

import pytest

from goldtrackr.core.scheduler import PeriodicTask


class TestPeriodicTask:
    """Tests for PeriodicTask."""

    @pytest.mark.asyncio
    async def test_tick_runs_callback(self) -> None:
        calls = []

        async def callback() -> None:
            calls.append(1)

        task = PeriodicTask("prices", 60.0, callback)

        assert await task.tick() is True
        assert calls == [1]
        assert task.tick_count == 1
        assert task.last_run_ms is not None

    @pytest.mark.asyncio
    async def test_overlapping_trigger_refused(self) -> None:
        gate = asyncio.Event()
        calls = []

        async def callback() -> None:
            calls.append(1)
            await gate.wait()

        task = PeriodicTask("prices", 60.0, callback)
        first = asyncio.create_task(task.tick())
        await asyncio.sleep(0)

        assert task.in_flight is True
        assert await task.trigger() is False

        gate.set()
        assert await first is True
        assert calls == [1]
        assert task.in_flight is False

    @pytest.mark.asyncio
    async def test_failure_counted_not_raised(self) -> None:
        async def callback() -> None:
            raise RuntimeError("feed down")

        task = PeriodicTask("news", 60.0, callback)

        assert await task.tick() is True
        assert task.failure_count == 1
        assert task.in_flight is False

    @pytest.mark.asyncio
    async def test_start_ticks_immediately_and_stops(self) -> None:
        ticked = asyncio.Event()

        async def callback() -> None:
            ticked.set()

        task = PeriodicTask("prices", 3600.0, callback)
        task.start()
        await asyncio.wait_for(ticked.wait(), timeout=1.0)

        assert task.is_running is True
        await task.stop()
        assert task.is_running is False
        assert task.tick_count == 1

    @pytest.mark.asyncio
    async def test_interval_between_ticks(self) -> None:
        count = 0
        done = asyncio.Event()

        async def callback() -> None:
            nonlocal count
            count += 1
            if count == 3:
                done.set()

        task = PeriodicTask("prices", 0.01, callback)
        task.start()
        await asyncio.wait_for(done.wait(), timeout=2.0)
        await task.stop()

        assert task.tick_count >= 3

    def test_invalid_interval(self) -> None:
        async def callback() -> None:
            return None

        with pytest.raises(ValueError):
            PeriodicTask("prices", 0, callback)
