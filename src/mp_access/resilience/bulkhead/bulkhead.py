"""Resilience – Bulkhead."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

from mp_access.resilience.bulkhead.limiters import ConcurrencyLimiter

T = TypeVar("T")


class Bulkhead:
    """Named worker pool bounded by a :class:`ConcurrencyLimiter`."""

    def __init__(self, name: str, max_concurrent: int = 4) -> None:
        self.name = name
        self._limiter = ConcurrencyLimiter(max_concurrent)

    @property
    def limiter(self) -> ConcurrencyLimiter:
        return self._limiter

    async def __aenter__(self) -> "Bulkhead":
        await self._limiter.__aenter__()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._limiter.__aexit__(*args)

    async def run(self, func: Callable[[], Awaitable[T]]) -> T:
        async with self:
            return await func()

    async def map(self, funcs: Iterable[Callable[[], Awaitable[T]]]) -> list[T]:
        """Run all *funcs* through the pool; results keep input order.

        Every task runs to completion even if a sibling raises; exceptions
        are the callers' business and are expected to be caught inside
        *funcs*.
        """
        return list(await asyncio.gather(*(self.run(f) for f in funcs)))


__all__ = ["Bulkhead"]
