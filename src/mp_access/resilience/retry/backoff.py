"""Resilience – backoff schedules with jitter."""
from __future__ import annotations

import dataclasses
import random
from enum import Enum


class Jitter(str, Enum):
    """How randomness is applied to a computed delay."""

    NONE = "none"
    FULL = "full"    # uniform in [0, delay]
    EQUAL = "equal"  # uniform in [delay/2, delay]


@dataclasses.dataclass(frozen=True)
class Backoff:
    """Delay before retry number *attempt* (1-based).

    ``base_delay * multiplier ** (attempt - 1)``, capped at ``max_delay``,
    then jittered. ``multiplier=1`` gives a constant schedule.
    """

    base_delay: float = 0.2
    max_delay: float = 5.0
    multiplier: float = 2.0
    jitter: Jitter = Jitter.FULL

    @classmethod
    def constant(cls, delay: float) -> "Backoff":
        return cls(base_delay=delay, max_delay=delay, multiplier=1.0, jitter=Jitter.NONE)

    @classmethod
    def none(cls) -> "Backoff":
        return cls.constant(0.0)

    def raw(self, attempt: int) -> float:
        exponent = max(attempt - 1, 0)
        return min(self.base_delay * (self.multiplier ** exponent), self.max_delay)

    def delay(self, attempt: int, rng: random.Random | None = None) -> float:
        value = self.raw(attempt)
        if value <= 0 or self.jitter is Jitter.NONE:
            return value
        uniform = (rng or random).uniform
        if self.jitter is Jitter.FULL:
            return uniform(0, value)
        half = value / 2
        return half + uniform(0, half)


__all__ = ["Backoff", "Jitter"]
