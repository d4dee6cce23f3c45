"""
Read-time tracking.

A one-second repeating tick accumulates reading time while the reader is
present. Without an interaction for ``away_after`` seconds the reader counts
as away and ticks stop accruing. The total is submitted once, in minutes.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional

import structlog

from backoffice.config import get_settings

logger = structlog.get_logger(__name__)

Submitter = Callable[[float], Awaitable[Any]]


class ReadTimeTracker:
    """
    Interval-driven accumulator with a send-once guard.

    ``clock`` is injectable so tests can drive time without sleeping.
    """

    def __init__(
        self,
        submit: Submitter,
        tick_seconds: float = 1.0,
        away_after: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._submit = submit
        self.tick_seconds = tick_seconds
        self.away_after = away_after if away_after is not None else get_settings().analytics.away_after_seconds
        self._clock = clock
        self._last_interaction = clock()
        self._task: Optional[asyncio.Task] = None
        self.seconds = 0.0
        self.sent = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def minutes(self) -> float:
        return round(self.seconds / 60, 2)

    def record_interaction(self) -> None:
        """Scroll, key press, pointer move: anything proving the reader is there."""
        self._last_interaction = self._clock()

    def is_away(self) -> bool:
        return self._clock() - self._last_interaction > self.away_after

    def tick(self) -> None:
        if not self.is_away():
            self.seconds += self.tick_seconds

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            self.tick()

    def start(self) -> None:
        if self.running:
            return
        self._last_interaction = self._clock()
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def send(self) -> bool:
        """Submit the minutes once; later calls are no-ops returning False."""
        if self.sent:
            return False
        self.sent = True
        try:
            await self._submit(self.minutes)
        except Exception:
            self.sent = False
            logger.error("Failed to submit read time", minutes=self.minutes)
            raise
        logger.info("Read time submitted", minutes=self.minutes)
        return True

    async def finish(self) -> bool:
        """Stop ticking and submit."""
        await self.stop()
        return await self.send()
