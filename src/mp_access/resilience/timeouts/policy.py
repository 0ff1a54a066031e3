"""Resilience – TimeoutPolicy."""
from __future__ import annotations

import asyncio
import dataclasses
from typing import Awaitable, Callable, TypeVar

from mp_access.kernel.errors import TimeoutError as AppTimeoutError

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class TimeoutPolicy:
    """Caller-supplied deadline for a single provider call.

    ``timeout_seconds`` of ``None`` (or ``<= 0``) disables the limit.
    """

    timeout_seconds: float | None = None

    @property
    def enabled(self) -> bool:
        return self.timeout_seconds is not None and self.timeout_seconds > 0

    async def execute(self, func: Callable[[], Awaitable[T]]) -> T:
        if not self.enabled:
            return await func()
        try:
            return await asyncio.wait_for(func(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise AppTimeoutError(f"Operation timed out after {self.timeout_seconds}s") from exc


__all__ = ["TimeoutPolicy"]
