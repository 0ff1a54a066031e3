"""Resilience – retry transient provider failures with backoff and jitter."""
from mp_access.resilience.retry.backoff import Backoff, Jitter
from mp_access.resilience.retry.policy import RetryHook, RetryPolicy, is_retryable
from mp_access.resilience.retry.tenacity_adapter import TenacityRetryPolicy

__all__ = ["Backoff", "Jitter", "RetryHook", "RetryPolicy", "TenacityRetryPolicy", "is_retryable"]
