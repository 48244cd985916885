"""Periodic refresh driver with start/stop/toggle lifecycle."""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Self

from execution_tracker.api.config import DEFAULT_POLL_INTERVAL

log = logging.getLogger(__name__)

type RefreshCallback = Callable[[], Awaitable[object]]


@dataclass(kw_only=True)
class PollingScheduler:
    """Invoke a refresh callback at a fixed cadence.

    Ticks are spaced from the start of the previous tick, not its end. A tick
    that fires while the previous refresh is still in flight is skipped, so
    refreshes never overlap. Stopping only prevents new refreshes; one that
    is already running is allowed to finish.
    """

    refresh: RefreshCallback
    interval: float = DEFAULT_POLL_INTERVAL
    _enabled: bool = field(default=True, init=False)
    _timer: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _tick: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    @property
    def enabled(self) -> bool:
        """Whether ticks currently trigger a refresh."""
        return self._enabled

    @property
    def running(self) -> bool:
        """Whether the timer is active."""
        return self._timer is not None and not self._timer.done()

    async def start(self) -> None:
        """Refresh immediately, then keep refreshing every interval.

        Calling start again replaces the existing timer. A refresh still in
        flight from the previous timer is awaited first.
        """
        self.stop()
        if (previous := self._tick) is not None and not previous.done():
            await previous

        tick = asyncio.create_task(self._run_refresh())
        self._tick = tick
        await tick

        # A concurrent start may have installed a timer while this one waited
        self.stop()
        self._timer = asyncio.create_task(self._run_timer())
        log.debug("Polling started with interval=%.1fs", self.interval)

    def stop(self) -> None:
        """Stop issuing new refreshes."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            log.debug("Polling stopped")

    def toggle(self) -> bool:
        """Enable or disable refreshes without stopping the timer.

        Returns:
            The new enabled state

        """
        self._enabled = not self._enabled
        log.info("Execution polling %s", "enabled" if self._enabled else "disabled")
        return self._enabled

    async def close(self) -> None:
        """Stop the timer and wait for any in-flight refresh to finish."""
        timer = self._timer
        self.stop()
        if timer is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await timer
        if self._tick is not None:
            await self._tick
            self._tick = None

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _run_timer(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval

        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            next_tick += self.interval

            if not self._enabled:
                continue

            if self._tick is not None and not self._tick.done():
                log.debug("Previous refresh still in flight, skipping tick")
                continue

            self._tick = asyncio.create_task(self._run_refresh())

    async def _run_refresh(self) -> None:
        try:
            await self.refresh()
        except Exception:
            log.exception("Execution refresh failed")
