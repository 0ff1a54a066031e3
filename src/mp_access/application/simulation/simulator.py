"""Application simulation – Simulator.

Runs batches of requests through :meth:`PolicyEvaluator.explain` against a
single snapshot, so every case in a report sees the same policies even if
the store is mutated while the batch runs. No provider calls are made.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from mp_access.application.provisioning.loader import read_document
from mp_access.application.simulation.cases import SimulationCase, SimulationOutcome, SimulationReport
from mp_access.kernel.errors import ValidationError
from mp_access.kernel.security import PolicyEvaluator, PolicySnapshot, PolicyStore
from mp_access.observability.logging import get_logger

logger = get_logger(__name__)


class Simulator:
    """Batch "what if" evaluation.

    Example::

        simulator = Simulator(load_policy_store("policies.json"))
        report = simulator.run(load_simulation_cases("cases.json"))
        assert report.passed, report.failures
    """

    def __init__(self, source: PolicyStore | PolicySnapshot) -> None:
        self._source = source

    def run(self, cases: Iterable[SimulationCase]) -> SimulationReport:
        snapshot = self._source if isinstance(self._source, PolicySnapshot) else self._source.snapshot()
        evaluator = PolicyEvaluator(snapshot)
        outcomes = []
        for case in cases:
            result = evaluator.explain(case.principal, case.action, case.resource, case.context)
            outcome = SimulationOutcome(case, result.decision, result.reason)
            if not outcome.passed:
                logger.warning(
                    "simulation.case_failed",
                    case=case.name,
                    expected=case.expected.value if case.expected else None,
                    decision=result.decision.value,
                )
            outcomes.append(outcome)
        report = SimulationReport(tuple(outcomes), snapshot.version)
        logger.info(
            "simulation.finished",
            cases=len(report),
            failures=len(report.failures),
            snapshot_version=snapshot.version,
        )
        return report


def load_simulation_cases(source: str | Path | Mapping[str, Any]) -> list[SimulationCase]:
    """Parse ``{"cases": [...]}`` from a JSON file path or a mapping."""
    doc = read_document(source)
    raw = doc.get("cases")
    if not isinstance(raw, list):
        raise ValidationError("Simulation document must contain a 'cases' list")
    return [SimulationCase.from_document(c) for c in raw]


__all__ = ["Simulator", "load_simulation_cases"]
