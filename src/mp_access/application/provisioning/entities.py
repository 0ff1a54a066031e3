"""Application provisioning – EntityKind, EntitySpec, TargetConfiguration.

A target configuration is the declared desired state: an ordered list of
entity specifications. Declaration order is the tie-break the resolver
uses, so unchanged input always yields the same plan.

Each kind names the properties that reference other entities; those
references become "must exist before" edges of the deployment graph::

    user              groups[]
    attachment        principal, policy
    group_membership  user, group
    sink_policy       sink
    audit_trail       sink, sink_policy
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from enum import Enum
from typing import Any, Iterator, Mapping

from mp_access.kernel.errors import DuplicateNameError, ValidationError
from mp_access.kernel.security.policy import Policy


class EntityKind(str, Enum):
    GROUP = "group"
    USER = "user"
    POLICY = "policy"
    ATTACHMENT = "attachment"
    GROUP_MEMBERSHIP = "group_membership"
    LOGGING_SINK = "logging_sink"
    SINK_POLICY = "sink_policy"
    AUDIT_TRAIL = "audit_trail"
    ALERT_TOPIC = "alert_topic"


#: Properties holding references to other entities, per kind.
REFERENCE_PROPERTIES: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.USER: ("groups",),
    EntityKind.ATTACHMENT: ("principal", "policy"),
    EntityKind.GROUP_MEMBERSHIP: ("user", "group"),
    EntityKind.SINK_POLICY: ("sink",),
    EntityKind.AUDIT_TRAIL: ("sink", "sink_policy"),
}

#: Reference properties that must be present for the kind to make sense.
REQUIRED_PROPERTIES: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.POLICY: ("document",),
    EntityKind.ATTACHMENT: ("principal", "policy"),
    EntityKind.GROUP_MEMBERSHIP: ("user", "group"),
    EntityKind.SINK_POLICY: ("sink",),
    EntityKind.AUDIT_TRAIL: ("sink", "sink_policy"),
    EntityKind.ALERT_TOPIC: ("endpoint",),
}


def _refs(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


@dataclasses.dataclass(frozen=True)
class EntitySpec:
    """Desired state of one provisioned entity.

    ``properties`` are kind-specific; ``depends_on`` adds explicit edges on
    top of the ones implied by reference properties.
    """

    name: str
    kind: EntityKind
    properties: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    depends_on: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValidationError("Entity name must not be empty")
        object.__setattr__(self, "kind", EntityKind(self.kind))
        object.__setattr__(self, "properties", dict(self.properties))
        object.__setattr__(self, "depends_on", tuple(self.depends_on))
        missing = [p for p in REQUIRED_PROPERTIES.get(self.kind, ()) if not self.properties.get(p)]
        if missing:
            raise ValidationError(
                f"Entity '{self.name}' ({self.kind.value}) is missing: {', '.join(missing)}",
                errors=[{"entity": self.name, "property": p} for p in missing],
            )
        if self.kind is EntityKind.POLICY:
            self.policy()

    def references(self) -> tuple[str, ...]:
        """Names this entity must be provisioned after, without duplicates."""
        names: list[str] = []
        for prop in REFERENCE_PROPERTIES.get(self.kind, ()):
            names.extend(_refs(self.properties.get(prop)))
        names.extend(self.depends_on)
        return tuple(dict.fromkeys(names))

    def fingerprint(self) -> str:
        """Stable digest of the desired state (kind + properties)."""
        payload = json.dumps(
            {"kind": self.kind.value, "properties": self.properties},
            sort_keys=True,
            separators=(",", ":"),
            default=str,
        )
        return hashlib.sha256(payload.encode()).hexdigest()

    def policy(self) -> Policy:
        """Parse the policy document of a ``policy`` entity."""
        if self.kind is not EntityKind.POLICY:
            raise ValidationError(f"Entity '{self.name}' is not a policy")
        return Policy.from_document(self.properties.get("policy_name", self.name), self.properties["document"])

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "EntitySpec":
        try:
            kind = EntityKind(doc.get("kind"))
        except ValueError:
            raise ValidationError(
                f"Unknown entity kind {doc.get('kind')!r}",
                errors=[{"entity": doc.get("name"), "kind": doc.get("kind")}],
            ) from None
        return cls(
            name=doc.get("name", ""),
            kind=kind,
            properties=doc.get("properties") or {},
            depends_on=tuple(_refs(doc.get("depends_on"))),
        )

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {"name": self.name, "kind": self.kind.value}
        if self.properties:
            doc["properties"] = dict(self.properties)
        if self.depends_on:
            doc["depends_on"] = list(self.depends_on)
        return doc


@dataclasses.dataclass(frozen=True)
class TargetConfiguration:
    """Ordered, uniquely-named set of entity specifications."""

    entities: tuple[EntitySpec, ...]
    version: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "entities", tuple(self.entities))
        seen: set[str] = set()
        for entity in self.entities:
            if entity.name in seen:
                raise DuplicateNameError(entity.name)
            seen.add(entity.name)

    def __iter__(self) -> Iterator[EntitySpec]:
        return iter(self.entities)

    def __len__(self) -> int:
        return len(self.entities)

    def get(self, name: str) -> EntitySpec | None:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def of_kind(self, kind: EntityKind) -> list[EntitySpec]:
        return [e for e in self.entities if e.kind is kind]

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "TargetConfiguration":
        raw = doc.get("entities")
        if not isinstance(raw, list):
            raise ValidationError("Target configuration must contain an 'entities' list")
        return cls(
            entities=tuple(EntitySpec.from_document(e) for e in raw),
            version=str(doc.get("version", "")),
        )

    def to_document(self) -> dict[str, Any]:
        return {"version": self.version, "entities": [e.to_document() for e in self.entities]}


__all__ = [
    "EntityKind",
    "EntitySpec",
    "REFERENCE_PROPERTIES",
    "REQUIRED_PROPERTIES",
    "TargetConfiguration",
]
