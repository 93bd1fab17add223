"""
Periodic task runner.

Each refresh source (prices, news) gets one PeriodicTask. A tick awaits
its own fetch before the next one is scheduled, and a manual trigger is
refused while a tick is in flight, so a source never has two fetches
outstanding.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from goldtrackr.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)

TASK_STOP_TIMEOUT = 5.0  # seconds


class PeriodicTask:
    """
    Cancellable fixed-interval asyncio loop.

    Runs the callback immediately on start, then every `interval` seconds
    after the previous tick finished. Errors are logged; the next tick is
    the retry.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: Callable[[], Awaitable[None]],
    ) -> None:
        """
        Initialize task.

        Args:
            name: Task name used in logs.
            interval: Seconds between ticks.
            callback: Coroutine function run on every tick.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._name = name
        self._interval = interval
        self._callback = callback
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._in_flight = False

        self._tick_count = 0
        self._failure_count = 0
        self._last_run_ms: int | None = None

    async def tick(self) -> bool:
        """
        Run the callback once unless a run is already in flight.

        Returns:
            True if the callback ran (successfully or not).
        """
        if self._in_flight:
            logger.debug(f"[{self._name}] Tick skipped, previous run in flight")
            return False

        self._in_flight = True
        try:
            await self._callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._failure_count += 1
            logger.error(f"[{self._name}] Tick failed: {e}")
        finally:
            self._in_flight = False
            self._tick_count += 1
            self._last_run_ms = get_timestamp_ms()

        return True

    async def trigger(self) -> bool:
        """Run an out-of-schedule tick (manual refresh)."""
        return await self.tick()

    async def run(self) -> None:
        """Tick until stopped."""
        self._running = True
        logger.info(f"[{self._name}] Started, interval={self._interval}s")

        while self._running:
            await self.tick()
            await asyncio.sleep(self._interval)

    def start(self) -> asyncio.Task[None]:
        """Start the loop as a background task."""
        self._task = asyncio.create_task(self.run(), name=f"periodic-{self._name}")
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await asyncio.wait_for(self._task, timeout=TASK_STOP_TIMEOUT)
            except (TimeoutError, asyncio.CancelledError):
                pass
            self._task = None

        logger.info(f"[{self._name}] Stopped")

    @property
    def name(self) -> str:
        return self._name

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> bool:
        """Whether a tick is currently executing."""
        return self._in_flight

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def last_run_ms(self) -> int | None:
        return self._last_run_ms
