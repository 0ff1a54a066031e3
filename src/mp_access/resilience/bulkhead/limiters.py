"""Resilience – ConcurrencyLimiter."""
from __future__ import annotations

import asyncio


class ConcurrencyLimiter:
    """Caps the number of concurrent executions; extra callers wait their turn.

    ``peak`` records the highest number of simultaneous holders seen, which
    makes the bound observable in tests.
    """

    def __init__(self, max_concurrent: int) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self.max_concurrent = max_concurrent
        self.in_flight = 0
        self.peak = 0

    @property
    def available(self) -> int:
        return self.max_concurrent - self.in_flight

    async def __aenter__(self) -> "ConcurrencyLimiter":
        await self._semaphore.acquire()
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        return self

    async def __aexit__(self, *_: object) -> None:
        self.in_flight -= 1
        self._semaphore.release()


__all__ = ["ConcurrencyLimiter"]
