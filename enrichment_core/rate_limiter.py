"""
Per-provider rate limiter with fixed per-second and per-minute windows.

Callers never fail here: acquire() suspends until both window counters are
below their ceilings, then reserves a slot. Waiting callers are served
strictly in arrival order. A ticker task owned by the limiter resets each
window's counter at its boundary and drains the queue as far as the fresh
budget allows. The ticker only runs while there is something to reset or
someone waiting, so an idle limiter holds no task.

All state is mutated from the event loop thread without awaiting in between,
which serializes concurrent callers.
"""

import asyncio
import logging
import math
from collections import deque
from typing import Deque, Optional

from .metrics import RATE_LIMIT_WAITS

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    FIFO rate limiter over a 1-second and a 60-second window.

    Ceilings default to unbounded. Window lengths are configurable so tests
    can run on short windows; production code uses the defaults.
    """

    def __init__(
        self,
        per_second: Optional[int] = None,
        per_minute: Optional[int] = None,
        name: str = "provider",
        second_window: float = 1.0,
        minute_window: float = 60.0,
    ) -> None:
        if second_window <= 0 or minute_window <= 0:
            raise ValueError("Rate limiter windows must be positive")
        self.name = name
        self.per_second = per_second if per_second is not None else math.inf
        self.per_minute = per_minute if per_minute is not None else math.inf
        self.second_window = second_window
        self.minute_window = minute_window

        self.second_count = 0
        self.minute_count = 0
        self._waiters: Deque[asyncio.Future] = deque()
        self._ticker: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def queue_depth(self) -> int:
        """Number of callers currently waiting."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    @property
    def is_bounded(self) -> bool:
        return math.isfinite(self.per_second) or math.isfinite(self.per_minute)

    async def acquire(self) -> None:
        """Suspend until a slot is available in both windows, then reserve it."""
        if not self.is_bounded:
            return

        self._bind_loop()

        # Strict FIFO: a newcomer may not overtake anyone already queued
        if not self._waiters and self._can_proceed():
            self._reserve()
            self._ensure_ticker()
            return

        waiter = self._loop.create_future()
        self._waiters.append(waiter)
        RATE_LIMIT_WAITS.labels(limiter=self.name).inc()
        logger.debug(
            f"Rate limiter '{self.name}' queued caller (depth={len(self._waiters)})"
        )
        self._ensure_ticker()
        await waiter

    async def close(self) -> None:
        """Stop the ticker task. Queued callers stay queued."""
        ticker, self._ticker = self._ticker, None
        if ticker is not None and not ticker.done():
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass

    def _bind_loop(self) -> None:
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            # State from a previous event loop can never be drained
            self._loop = loop
            self._ticker = None
            self._waiters.clear()
            self.second_count = 0
            self.minute_count = 0

    def _can_proceed(self) -> bool:
        return self.second_count < self.per_second and self.minute_count < self.per_minute

    def _reserve(self) -> None:
        if math.isfinite(self.per_second):
            self.second_count += 1
        if math.isfinite(self.per_minute):
            self.minute_count += 1

    def _has_pending_work(self) -> bool:
        return bool(self._waiters) or self.second_count > 0 or self.minute_count > 0

    def _ensure_ticker(self) -> None:
        if self._ticker is None or self._ticker.done():
            self._ticker = self._loop.create_task(self._run_windows())

    def _drain(self) -> None:
        while self._waiters and self._can_proceed():
            waiter = self._waiters.popleft()
            if waiter.done():
                # Caller gave up (its own deadline cancelled the wait)
                continue
            self._reserve()
            waiter.set_result(None)

    async def _run_windows(self) -> None:
        loop = asyncio.get_running_loop()
        start = loop.time()
        next_second = start + self.second_window
        next_minute = start + self.minute_window

        while self._has_pending_work():
            await asyncio.sleep(max(0.0, min(next_second, next_minute) - loop.time()))
            now = loop.time()
            if now >= next_second:
                self.second_count = 0
                while next_second <= now:
                    next_second += self.second_window
            if now >= next_minute:
                self.minute_count = 0
                while next_minute <= now:
                    next_minute += self.minute_window
            self._drain()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name='{self.name}', per_second={self.per_second}, "
            f"per_minute={self.per_minute})"
        )
