"""Resilience – RetryPolicy."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from mp_access.resilience.retry.backoff import Backoff

T = TypeVar("T")
logger = logging.getLogger(__name__)

RetryHook = Callable[[int, BaseException, float], None]


def is_retryable(exc: BaseException) -> bool:
    """Errors opt in to retries by carrying ``retryable = True``."""
    return bool(getattr(exc, "retryable", False))


class RetryPolicy:
    """Retry transient failures with backoff; re-raise everything else at once.

    Parameters
    ----------
    max_attempts:
        Total number of calls, including the first.
    backoff:
        Delay schedule between attempts.
    retry_if:
        Predicate deciding whether an exception is transient.  Defaults to
        :func:`is_retryable`.
    sleep:
        Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff: Backoff | None = None,
        retry_if: Callable[[BaseException], bool] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.backoff = backoff or Backoff()
        self._retry_if = retry_if or is_retryable
        self._sleep = sleep

    def should_retry(self, exc: BaseException) -> bool:
        return self._retry_if(exc)

    async def execute_async(
        self,
        func: Callable[[], Awaitable[T]],
        *,
        on_retry: RetryHook | None = None,
    ) -> T:
        """Await *func*, retrying transient failures up to ``max_attempts``."""
        attempt = 1
        while True:
            try:
                return await func()
            except Exception as exc:
                if not self.should_retry(exc) or attempt >= self.max_attempts:
                    raise
                delay = self.backoff.delay(attempt)
                logger.debug("retry attempt=%d delay=%.2fs exc=%r", attempt, delay, exc)
                if on_retry is not None:
                    on_retry(attempt, exc, delay)
                await self._sleep(delay)
                attempt += 1


__all__ = ["RetryHook", "RetryPolicy", "is_retryable"]
