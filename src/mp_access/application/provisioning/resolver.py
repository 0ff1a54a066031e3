"""Application provisioning – DependencyResolver.

Topological ordering of a :class:`DeploymentGraph` using Kahn's algorithm.
Among entities whose prerequisites are all placed, the one declared first
goes next, so the same input always yields the same plan.
"""

from __future__ import annotations

import heapq
from typing import Iterable

from mp_access.application.provisioning.entities import EntitySpec
from mp_access.application.provisioning.graph import DeploymentGraph
from mp_access.kernel.errors import CycleError
from mp_access.observability.logging import get_logger

logger = get_logger(__name__)


def _as_graph(entities: Iterable[EntitySpec] | DeploymentGraph) -> DeploymentGraph:
    if isinstance(entities, DeploymentGraph):
        return entities
    return DeploymentGraph.build(entities)


class DependencyResolver:
    """Orders entities so every prerequisite comes before its dependents."""

    def resolve(self, entities: Iterable[EntitySpec] | DeploymentGraph) -> list[EntitySpec]:
        """Return entities in application order.

        Raises
        ------
        CycleError
            Naming every entity that lies on a dependency cycle.
        DanglingReferenceError, DuplicateNameError
            From graph construction.
        """
        graph = _as_graph(entities)
        index = {e.name: i for i, e in enumerate(graph.entities)}
        remaining = {name: len(refs) for name, refs in graph.prerequisites.items()}

        ready = [index[name] for name, count in remaining.items() if count == 0]
        heapq.heapify(ready)
        order: list[EntitySpec] = []
        while ready:
            entity = graph.entities[heapq.heappop(ready)]
            order.append(entity)
            for dependent in graph.dependents[entity.name]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, index[dependent])

        if len(order) != len(graph.entities):
            placed = {e.name for e in order}
            self._raise_cycle(graph, [e.name for e in graph.entities if e.name not in placed])
        return order

    def levels(self, entities: Iterable[EntitySpec] | DeploymentGraph) -> list[list[EntitySpec]]:
        """Group entities into waves with no edges inside a wave.

        An entity's wave is one past the deepest wave of its prerequisites;
        within a wave, declaration order is kept.
        """
        graph = _as_graph(entities)
        depth: dict[str, int] = {}
        for entity in self.resolve(graph):
            refs = graph.prerequisites[entity.name]
            depth[entity.name] = 1 + max((depth[r] for r in refs), default=-1)

        waves: list[list[EntitySpec]] = [[] for _ in range(max(depth.values(), default=-1) + 1)]
        for entity in graph.entities:
            waves[depth[entity.name]].append(entity)
        return waves

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _raise_cycle(self, graph: DeploymentGraph, unplaced: list[str]) -> None:
        """Report the unplaced entities that can reach themselves."""
        pending = set(unplaced)

        def on_cycle(start: str) -> bool:
            stack = [d for d in graph.dependents[start] if d in pending]
            seen: set[str] = set()
            while stack:
                node = stack.pop()
                if node == start:
                    return True
                if node in seen:
                    continue
                seen.add(node)
                stack.extend(d for d in graph.dependents[node] if d in pending)
            return False

        cyclic = [name for name in unplaced if on_cycle(name)]
        logger.error("resolver.cycle_detected", nodes=cyclic)
        raise CycleError(cyclic)


__all__ = ["DependencyResolver"]
