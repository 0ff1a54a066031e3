"""Resilience – TenacityRetryPolicy adapter.

Drop-in alternative to :class:`~mp_access.resilience.retry.policy.RetryPolicy`
backed by ``tenacity``; the orchestrator accepts either.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

import tenacity

from mp_access.resilience.retry.policy import RetryHook, is_retryable

T = TypeVar("T")


class TenacityRetryPolicy:
    """Retry policy backed by the ``tenacity`` library.

    Parameters
    ----------
    max_attempts:
        Maximum number of call attempts (including the first call).
    wait:
        A ``tenacity`` wait strategy.  Defaults to exponential backoff with
        jitter (``wait_random_exponential(multiplier=0.2, max=5)``).
    retry:
        A ``tenacity`` retry predicate.  Defaults to retrying only
        exceptions that carry ``retryable = True``
        (:class:`~mp_access.kernel.errors.TransientProviderError`).
    kwargs:
        Additional keyword arguments forwarded to
        :class:`tenacity.AsyncRetrying`.

    Example
    -------
    ::

        policy = TenacityRetryPolicy(max_attempts=5, wait=tenacity.wait_fixed(0))
        record = await policy.execute_async(lambda: provider.create(spec))
    """

    def __init__(
        self,
        max_attempts: int = 3,
        wait: Any = None,
        retry: Any = None,
        **kwargs: Any,
    ) -> None:
        self.max_attempts = max_attempts
        self._wait = wait or tenacity.wait_random_exponential(multiplier=0.2, max=5)
        self._retry = retry or tenacity.retry_if_exception(is_retryable)
        self._extra_kwargs = kwargs

    def _build_async_retrying(self, on_retry: RetryHook | None) -> tenacity.AsyncRetrying:
        def _before_sleep(state: tenacity.RetryCallState) -> None:
            if on_retry is None or state.outcome is None:
                return
            exc = state.outcome.exception()
            delay = state.next_action.sleep if state.next_action else 0.0
            if exc is not None:
                on_retry(state.attempt_number, exc, delay)

        return tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=self._retry,
            reraise=True,
            before_sleep=_before_sleep,
            **self._extra_kwargs,
        )

    async def execute_async(
        self,
        func: Callable[[], Awaitable[T]],
        *,
        on_retry: RetryHook | None = None,
    ) -> T:
        """Execute *func* asynchronously with tenacity retry."""
        async for attempt in self._build_async_retrying(on_retry):
            with attempt:
                result = await func()
        return result  # type: ignore[return-value]


__all__ = ["TenacityRetryPolicy"]
