"""Application provisioning – IdentityProvider port."""

from __future__ import annotations

import dataclasses
from typing import Any, Mapping, Protocol, runtime_checkable

from mp_access.application.provisioning.entities import EntityKind, EntitySpec


@dataclasses.dataclass(frozen=True)
class ProviderRecord:
    """What the provider holds for one entity.

    ``fingerprint`` is the :meth:`EntitySpec.fingerprint` of the spec the
    entity was last created or updated from; equal fingerprints mean the
    entity has already converged.
    """

    name: str
    kind: EntityKind
    resource_id: str
    fingerprint: str
    properties: Mapping[str, Any] = dataclasses.field(default_factory=dict)


@runtime_checkable
class IdentityProvider(Protocol):
    """Port: the external identity provider.

    Implementations raise :class:`~mp_access.kernel.errors.ProviderError`
    subclasses: ``TransientProviderError`` for retryable failures and
    ``AlreadyExistsError`` / ``InvalidReferenceError`` /
    ``PermissionDeniedError`` for permanent ones.
    """

    async def describe(self, spec: EntitySpec) -> ProviderRecord | None:
        """Return the current record for *spec*, or ``None`` if absent."""
        ...

    async def create(self, spec: EntitySpec) -> ProviderRecord: ...

    async def update(self, spec: EntitySpec) -> ProviderRecord:
        """Replace the entity's state with *spec* wholesale."""
        ...


__all__ = ["IdentityProvider", "ProviderRecord"]
