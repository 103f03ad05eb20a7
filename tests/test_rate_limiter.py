"""
Tests for the per-provider rate limiter.
"""

import asyncio

import pytest

from enrichment_core.rate_limiter import RateLimiter

WINDOW = 0.1


class TestRateLimiter:
    """Ceilings, FIFO order and window resets (on shortened windows)."""

    @pytest.mark.asyncio
    async def test_unbounded_limiter_never_waits(self):
        limiter = RateLimiter()

        await asyncio.wait_for(asyncio.gather(*(limiter.acquire() for _ in range(50))), 0.5)

        assert not limiter.is_bounded
        assert limiter.queue_depth == 0

    @pytest.mark.asyncio
    async def test_per_second_ceiling_and_eventual_release(self):
        limiter = RateLimiter(per_second=2, second_window=WINDOW, minute_window=60)
        granted = []

        async def caller(index):
            await limiter.acquire()
            granted.append(index)

        tasks = [asyncio.create_task(caller(i)) for i in range(5)]
        await asyncio.sleep(WINDOW / 2)

        assert granted == [0, 1]
        assert limiter.queue_depth == 3

        await asyncio.wait_for(asyncio.gather(*tasks), timeout=WINDOW * 3 + 0.5)

        # Served strictly in arrival order
        assert granted == [0, 1, 2, 3, 4]
        await limiter.close()

    @pytest.mark.asyncio
    async def test_per_minute_ceiling(self):
        limiter = RateLimiter(per_minute=3, second_window=0.02, minute_window=WINDOW * 2)
        granted = []

        async def caller(index):
            await limiter.acquire()
            granted.append(index)

        tasks = [asyncio.create_task(caller(i)) for i in range(4)]
        await asyncio.sleep(WINDOW)

        # Several second windows have passed; the minute window still blocks
        assert granted == [0, 1, 2]

        await asyncio.wait_for(asyncio.gather(*tasks), timeout=1.0)
        assert granted == [0, 1, 2, 3]
        await limiter.close()

    @pytest.mark.asyncio
    async def test_both_ceilings_must_allow(self):
        limiter = RateLimiter(per_second=5, per_minute=1, second_window=0.02, minute_window=60)

        await limiter.acquire()
        waiter = asyncio.create_task(limiter.acquire())
        await asyncio.sleep(WINDOW)

        assert not waiter.done()
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        await limiter.close()

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_consume_a_slot(self):
        limiter = RateLimiter(per_second=1, second_window=WINDOW, minute_window=60)
        await limiter.acquire()

        abandoned = asyncio.create_task(limiter.acquire())
        patient = asyncio.create_task(limiter.acquire())
        await asyncio.sleep(0)
        abandoned.cancel()

        await asyncio.wait_for(patient, timeout=WINDOW * 3)
        assert limiter.second_count == 1
        await limiter.close()

    @pytest.mark.asyncio
    async def test_ticker_stops_when_idle(self):
        limiter = RateLimiter(per_second=2, second_window=0.02, minute_window=0.04)

        await limiter.acquire()
        await asyncio.sleep(0.15)

        assert limiter.second_count == 0
        assert limiter.minute_count == 0
        assert limiter._ticker is None or limiter._ticker.done()

    def test_rejects_non_positive_windows(self):
        with pytest.raises(ValueError):
            RateLimiter(per_second=1, second_window=0)
