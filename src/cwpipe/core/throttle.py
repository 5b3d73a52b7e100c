"""
Fixed-rate ticker for rate-limited remote calls.

Ticks fall on a fixed grid anchored at creation time. As with a buffered
ticker channel, at most one overdue tick is delivered immediately; further
missed ticks are dropped rather than delivered in a burst.
"""

from __future__ import annotations

import asyncio
import time


class Ticker:
    def __init__(self, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._interval = interval_seconds
        self._next = time.monotonic() + interval_seconds
        self._stopped = False

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def stopped(self) -> bool:
        return self._stopped

    def next_delay(self) -> float:
        """Reserve the next tick and return the seconds until it is due."""
        if self._stopped:
            raise RuntimeError("Ticker is stopped")
        now = time.monotonic()
        if self._next <= now:
            missed = int((now - self._next) // self._interval) + 1
            self._next += missed * self._interval
            return 0.0
        delay = self._next - now
        self._next += self._interval
        return delay

    async def tick(self) -> None:
        await asyncio.sleep(self.next_delay())

    def stop(self) -> None:
        self._stopped = True
