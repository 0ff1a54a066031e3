"""Resilience – Bulkhead pattern (bounded concurrency)."""
from mp_access.resilience.bulkhead.limiters import ConcurrencyLimiter
from mp_access.resilience.bulkhead.bulkhead import Bulkhead

__all__ = ["Bulkhead", "ConcurrencyLimiter"]
