"""Kernel security – AccessEvent, AccessEventSink, InMemoryAccessEventSink."""

from __future__ import annotations

import dataclasses
import uuid
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

from mp_access.kernel.security.policy import Decision


# ---------------------------------------------------------------------------
# AccessEvent
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class AccessEvent:
    """An immutable record of one access decision.

    Parameters
    ----------
    principal:
        Name of the requesting principal.
    action:
        Action that was evaluated, e.g. ``"ec2:StartInstances"``.
    resource:
        Target resource identifier.
    decision:
        The :class:`~mp_access.kernel.security.policy.Decision` reached.
    snapshot_version:
        Version of the policy snapshot the decision was computed from.
    deciding:
        Labels (``policy#sid``) of the statements that decided the outcome.
    occurred_at:
        UTC timestamp.  Defaults to *now*.
    """

    principal: str
    action: str
    resource: str
    decision: Decision
    snapshot_version: int = 0
    deciding: tuple[str, ...] = ()
    event_id: str = dataclasses.field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))

    def is_denied(self) -> bool:
        return self.decision is not Decision.ALLOW

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "principal": self.principal,
            "action": self.action,
            "resource": self.resource,
            "decision": self.decision.value,
            "snapshot_version": self.snapshot_version,
            "deciding": list(self.deciding),
            "timestamp": self.occurred_at.isoformat(),
        }


# ---------------------------------------------------------------------------
# AccessEventSink Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class AccessEventSink(Protocol):
    """Port – receives access-event records.

    The engine never parses or stores these itself.
    """

    def record(self, event: AccessEvent) -> None: ...


# ---------------------------------------------------------------------------
# InMemoryAccessEventSink
# ---------------------------------------------------------------------------


class InMemoryAccessEventSink:
    """List-backed sink for unit tests and local simulation."""

    def __init__(self) -> None:
        self._records: list[AccessEvent] = []

    def record(self, event: AccessEvent) -> None:
        self._records.append(event)

    def query(
        self,
        *,
        principal: str | None = None,
        decision: Decision | None = None,
    ) -> list[AccessEvent]:
        results = self._records
        if principal is not None:
            results = [e for e in results if e.principal == principal]
        if decision is not None:
            results = [e for e in results if e.decision is decision]
        return sorted(results, key=lambda e: e.occurred_at)

    def all(self) -> list[AccessEvent]:
        """Return all stored events (helper for test assertions)."""
        return list(self._records)


__all__ = ["AccessEvent", "AccessEventSink", "InMemoryAccessEventSink"]
