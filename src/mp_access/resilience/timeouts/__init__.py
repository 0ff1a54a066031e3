"""Resilience – per-call timeouts."""
from mp_access.resilience.timeouts.policy import TimeoutPolicy

__all__ = ["TimeoutPolicy"]
