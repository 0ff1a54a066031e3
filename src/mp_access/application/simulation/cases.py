"""Application simulation – SimulationCase, SimulationOutcome, SimulationReport."""

from __future__ import annotations

import dataclasses
from typing import Any, Mapping

from mp_access.kernel.errors import ValidationError
from mp_access.kernel.security import Decision, RequestContext


def _decision(value: Any) -> Decision:
    if isinstance(value, Decision):
        return value
    text = str(value).strip().upper().replace("-", "_")
    try:
        return Decision[text]
    except KeyError:
        raise ValidationError(
            f"Unknown decision {value!r}; expected one of {', '.join(d.name for d in Decision)}"
        ) from None


@dataclasses.dataclass(frozen=True)
class SimulationCase:
    """One "what if" request, optionally with the decision it should get."""

    principal: str
    action: str
    resource: str
    context: RequestContext = dataclasses.field(default_factory=RequestContext)
    expected: Decision | None = None
    name: str = ""

    def __post_init__(self) -> None:
        if self.expected is not None:
            object.__setattr__(self, "expected", _decision(self.expected))
        if not self.name:
            object.__setattr__(self, "name", f"{self.principal} {self.action} {self.resource}")

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "SimulationCase":
        missing = [k for k in ("principal", "action", "resource") if not doc.get(k)]
        if missing:
            raise ValidationError(
                f"Simulation case is missing: {', '.join(missing)}",
                errors=[{"case": doc.get("name"), "field": k} for k in missing],
            )
        context = RequestContext.build(
            tags=doc.get("tags"),
            session=doc.get("session"),
            mfa=doc.get("mfa"),
            source_ip=doc.get("source_ip"),
        )
        expect = doc.get("expect")
        return cls(
            principal=doc["principal"],
            action=doc["action"],
            resource=doc["resource"],
            context=context,
            expected=_decision(expect) if expect is not None else None,
            name=doc.get("name", ""),
        )


@dataclasses.dataclass(frozen=True)
class SimulationOutcome:
    case: SimulationCase
    decision: Decision
    reason: str = ""

    @property
    def passed(self) -> bool:
        """True when the case has no expectation or the decision meets it."""
        return self.case.expected is None or self.case.expected is self.decision

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.case.name,
            "principal": self.case.principal,
            "action": self.case.action,
            "resource": self.case.resource,
            "decision": self.decision.value,
            "reason": self.reason,
        }
        if self.case.expected is not None:
            payload["expected"] = self.case.expected.value
            payload["passed"] = self.passed
        return payload


@dataclasses.dataclass(frozen=True)
class SimulationReport:
    outcomes: tuple[SimulationOutcome, ...] = ()
    snapshot_version: int = 0

    @property
    def passed(self) -> bool:
        return all(o.passed for o in self.outcomes)

    @property
    def failures(self) -> list[SimulationOutcome]:
        return [o for o in self.outcomes if not o.passed]

    def __len__(self) -> int:
        return len(self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "snapshot_version": self.snapshot_version,
            "passed": self.passed,
            "cases": [o.to_dict() for o in self.outcomes],
        }


__all__ = ["SimulationCase", "SimulationOutcome", "SimulationReport"]
