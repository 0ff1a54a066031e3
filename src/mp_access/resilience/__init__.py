"""Resilience – retry, bulkhead and timeout policies for provider calls."""
from mp_access.resilience.bulkhead import Bulkhead, ConcurrencyLimiter
from mp_access.resilience.retry import Backoff, Jitter, RetryPolicy, TenacityRetryPolicy
from mp_access.resilience.timeouts import TimeoutPolicy

__all__ = [
    "Backoff",
    "Bulkhead",
    "ConcurrencyLimiter",
    "Jitter",
    "RetryPolicy",
    "TenacityRetryPolicy",
    "TimeoutPolicy",
]
