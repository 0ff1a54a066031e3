"""Application provisioning – ProvisioningPlan, EntityStatus, ApplyResult."""

from __future__ import annotations

import dataclasses
import enum
from typing import Any, Iterable

from mp_access.application.provisioning.entities import EntityKind, EntitySpec, TargetConfiguration
from mp_access.application.provisioning.graph import DeploymentGraph
from mp_access.application.provisioning.resolver import DependencyResolver
from mp_access.kernel.errors import ProviderError


class EntityStatus(enum.Enum):
    """Per-entity outcome of an apply run."""

    CREATED = "CREATED"
    """The entity did not exist and was created."""

    UPDATED = "UPDATED"
    """The entity existed with a different desired state and was replaced."""

    UNCHANGED = "UNCHANGED"
    """The entity already matched the desired state; no mutation was made."""

    FAILED = "FAILED"
    """The provider rejected the entity (permanently, or after retries)."""

    NOT_ATTEMPTED = "NOT_ATTEMPTED"
    """The run halted or was cancelled before this entity's turn."""

    @property
    def succeeded(self) -> bool:
        return self in (EntityStatus.CREATED, EntityStatus.UPDATED, EntityStatus.UNCHANGED)


@dataclasses.dataclass(frozen=True)
class ProvisioningPlan:
    """Resolved application order for one configuration version.

    ``waves`` partitions ``order`` into groups with no edges between members;
    each wave may be applied concurrently once the previous wave succeeded.
    """

    order: tuple[EntitySpec, ...]
    waves: tuple[tuple[EntitySpec, ...], ...]
    graph: DeploymentGraph
    version: str = ""

    @classmethod
    def build(
        cls,
        source: TargetConfiguration | Iterable[EntitySpec],
        resolver: DependencyResolver | None = None,
    ) -> "ProvisioningPlan":
        """Validate and resolve *source*; raises ``ConfigurationError`` subclasses."""
        resolver = resolver or DependencyResolver()
        version = source.version if isinstance(source, TargetConfiguration) else ""
        graph = DeploymentGraph.build(source)
        return cls(
            order=tuple(resolver.resolve(graph)),
            waves=tuple(tuple(w) for w in resolver.levels(graph)),
            graph=graph,
            version=version,
        )

    def names(self) -> list[str]:
        return [e.name for e in self.order]

    def of_kind(self, kind: EntityKind) -> list[EntitySpec]:
        return [e for e in self.order if e.kind is kind]

    def __len__(self) -> int:
        return len(self.order)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "order": [{"name": e.name, "kind": e.kind.value} for e in self.order],
            "waves": [[e.name for e in wave] for wave in self.waves],
        }


@dataclasses.dataclass(frozen=True)
class EntityOutcome:
    name: str
    kind: EntityKind
    status: EntityStatus
    resource_id: str | None = None
    attempts: int = 0
    error: ProviderError | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "status": self.status.value,
            "attempts": self.attempts,
        }
        if self.resource_id is not None:
            payload["resource_id"] = self.resource_id
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        return payload


@dataclasses.dataclass
class ApplyResult:
    """Outcome of :meth:`ProvisioningOrchestrator.apply`, in plan order."""

    outcomes: dict[str, EntityOutcome] = dataclasses.field(default_factory=dict)
    cancelled: bool = False

    def _names(self, *statuses: EntityStatus) -> list[str]:
        return [n for n, o in self.outcomes.items() if o.status in statuses]

    @property
    def succeeded(self) -> list[str]:
        return [n for n, o in self.outcomes.items() if o.status.succeeded]

    @property
    def created(self) -> list[str]:
        return self._names(EntityStatus.CREATED)

    @property
    def updated(self) -> list[str]:
        return self._names(EntityStatus.UPDATED)

    @property
    def unchanged(self) -> list[str]:
        return self._names(EntityStatus.UNCHANGED)

    @property
    def failed(self) -> list[str]:
        return self._names(EntityStatus.FAILED)

    @property
    def not_attempted(self) -> list[str]:
        return self._names(EntityStatus.NOT_ATTEMPTED)

    @property
    def errors(self) -> dict[str, ProviderError]:
        return {n: o.error for n, o in self.outcomes.items() if o.error is not None}

    @property
    def ok(self) -> bool:
        """Every entity converged and the run was not cancelled."""
        return not self.cancelled and all(o.status.succeeded for o in self.outcomes.values())

    @property
    def changed(self) -> bool:
        return bool(self.created or self.updated)

    def status_of(self, name: str) -> EntityStatus:
        return self.outcomes[name].status

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "cancelled": self.cancelled,
            "entities": [o.to_dict() for o in self.outcomes.values()],
        }


@dataclasses.dataclass(frozen=True)
class PlanDiff:
    """What :meth:`ProvisioningOrchestrator.apply` would do, without doing it."""

    to_create: tuple[str, ...] = ()
    to_update: tuple[str, ...] = ()
    unchanged: tuple[str, ...] = ()

    @property
    def empty(self) -> bool:
        return not self.to_create and not self.to_update


__all__ = [
    "ApplyResult",
    "EntityOutcome",
    "EntityStatus",
    "PlanDiff",
    "ProvisioningPlan",
]
