"""Tick clock — fixed-period asyncio task driving the scheduler."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

_log = logging.getLogger(__name__)


class TickClock:
    """Calls *on_tick* every *interval_ms* until stopped.

    Each tick is isolated: an exception is logged and the next tick runs
    as usual.  The clock keeps ticking while the scheduler is paused.

    Args:
        on_tick: Sync callable or coroutine function.
        interval_ms: Tick period in milliseconds.
    """

    def __init__(self, on_tick: Callable[[], Any], interval_ms: int = 100) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._on_tick = on_tick
        self._interval = interval_ms / 1000
        self._task: asyncio.Task[None] | None = None
        self._ticks = 0
        self._failures = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def failures(self) -> int:
        return self._failures

    async def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="tick-clock")
        _log.info("Tick clock started (%.0f ms)", self._interval * 1000)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        _log.info("Tick clock stopped after %d ticks", self._ticks)

    async def _run(self) -> None:
        while True:
            try:
                result = self._on_tick()
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                self._failures += 1
                _log.exception("Tick handler raised — continuing")
            self._ticks += 1
            await asyncio.sleep(self._interval)
