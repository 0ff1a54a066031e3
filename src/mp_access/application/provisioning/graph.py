"""Application provisioning – DeploymentGraph."""

from __future__ import annotations

import dataclasses
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from mp_access.application.provisioning.entities import EntitySpec
from mp_access.kernel.errors import DanglingReferenceError, DuplicateNameError


@dataclasses.dataclass(frozen=True)
class DeploymentGraph:
    """Directed graph over entity specs; an edge ``a -> b`` means *a* must
    exist before *b*.

    Built once per provisioning run. :meth:`build` rejects duplicate names
    and references to undeclared entities; acyclicity is checked by the
    resolver.
    """

    entities: tuple[EntitySpec, ...]
    prerequisites: Mapping[str, tuple[str, ...]]
    dependents: Mapping[str, tuple[str, ...]]

    @classmethod
    def build(cls, entities: Iterable[EntitySpec]) -> "DeploymentGraph":
        ordered = tuple(entities)
        names: set[str] = set()
        for entity in ordered:
            if entity.name in names:
                raise DuplicateNameError(entity.name)
            names.add(entity.name)

        prerequisites: dict[str, tuple[str, ...]] = {}
        dependents: dict[str, list[str]] = {e.name: [] for e in ordered}
        for entity in ordered:
            refs = entity.references()
            for ref in refs:
                if ref not in names:
                    raise DanglingReferenceError(entity.name, ref)
                dependents[ref].append(entity.name)
            prerequisites[entity.name] = refs

        return cls(
            entities=ordered,
            prerequisites=MappingProxyType(prerequisites),
            dependents=MappingProxyType({k: tuple(v) for k, v in dependents.items()}),
        )

    def __iter__(self) -> Iterator[EntitySpec]:
        return iter(self.entities)

    def __len__(self) -> int:
        return len(self.entities)

    def __contains__(self, name: object) -> bool:
        return name in self.prerequisites

    def entity(self, name: str) -> EntitySpec:
        for entity in self.entities:
            if entity.name == name:
                return entity
        raise KeyError(name)

    def edges(self) -> list[tuple[str, str]]:
        """``(prerequisite, dependent)`` pairs in declaration order."""
        return [(ref, e.name) for e in self.entities for ref in self.prerequisites[e.name]]


__all__ = ["DeploymentGraph"]
