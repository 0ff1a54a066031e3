"""Unit tests for the batch policy simulator."""

from __future__ import annotations

import pytest

from mp_access.application.simulation import (
    SimulationCase,
    Simulator,
    load_simulation_cases,
)
from mp_access.kernel.errors import ValidationError
from mp_access.kernel.security import (
    Decision,
    PolicyStore,
    Principal,
    RequestContext,
    mfa_bootstrap_policy,
    mfa_required_policy,
)


def _store() -> PolicyStore:
    store = PolicyStore()
    store.add_principal(Principal("dev-1"))
    store.attach("dev-1", mfa_bootstrap_policy())
    store.attach("dev-1", mfa_required_policy("work", ["ec2:*"]))
    return store


CASES = {
    "cases": [
        {
            "name": "bootstrap",
            "principal": "dev-1",
            "action": "iam:EnableMFADevice",
            "resource": "arn:aws:iam::1:mfa/dev-1",
            "expect": "allow",
        },
        {
            "name": "no-mfa",
            "principal": "dev-1",
            "action": "ec2:StartInstances",
            "resource": "*",
            "expect": "implicit-deny",
        },
        {
            "name": "with-mfa",
            "principal": "dev-1",
            "action": "ec2:StartInstances",
            "resource": "*",
            "mfa": True,
            "expect": "ALLOW",
        },
    ]
}


# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------


class TestSimulationCase:
    def test_default_name(self) -> None:
        assert SimulationCase("dev-1", "a:b", "r").name == "dev-1 a:b r"

    def test_expectation_parsed(self) -> None:
        assert SimulationCase("p", "a", "r", expected="implicit_deny").expected is Decision.IMPLICIT_DENY

    def test_unknown_expectation(self) -> None:
        with pytest.raises(ValidationError):
            SimulationCase("p", "a", "r", expected="perhaps")

    def test_from_document_requires_request_fields(self) -> None:
        with pytest.raises(ValidationError) as info:
            SimulationCase.from_document({"principal": "dev-1"})
        assert {e["field"] for e in info.value.errors} == {"action", "resource"}

    def test_from_document_builds_context(self) -> None:
        case = SimulationCase.from_document(
            {"principal": "p", "action": "a", "resource": "r", "mfa": True, "tags": {"environment": "dev"}}
        )
        assert case.context.lookup("aws:MultiFactorAuthPresent") is True
        assert case.context.lookup("aws:ResourceTag/environment") == "dev"

    def test_load_requires_cases_list(self) -> None:
        with pytest.raises(ValidationError):
            load_simulation_cases({"cases": {}})


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------


class TestSimulator:
    def test_all_expectations_met(self) -> None:
        report = Simulator(_store()).run(load_simulation_cases(CASES))
        assert report.passed
        assert len(report) == 3
        assert [o.decision for o in report.outcomes] == [
            Decision.ALLOW,
            Decision.IMPLICIT_DENY,
            Decision.ALLOW,
        ]

    def test_failed_expectation_reported(self) -> None:
        case = SimulationCase("dev-1", "ec2:StartInstances", "*", RequestContext(), Decision.ALLOW, "wrong")
        report = Simulator(_store()).run([case])
        assert not report.passed
        assert [o.case.name for o in report.failures] == ["wrong"]
        assert report.to_dict()["cases"][0]["passed"] is False

    def test_case_without_expectation_always_passes(self) -> None:
        report = Simulator(_store()).run([SimulationCase("nobody", "a:b", "*")])
        assert report.passed
        assert "expected" not in report.to_dict()["cases"][0]

    def test_whole_batch_uses_one_snapshot(self) -> None:
        store = _store()
        simulator = Simulator(store)
        version = store.version

        def cases():
            yield SimulationCase("dev-1", "ec2:StartInstances", "*", RequestContext.build(mfa=True))
            store.detach("dev-1", "work")
            yield SimulationCase("dev-1", "ec2:StartInstances", "*", RequestContext.build(mfa=True))

        report = simulator.run(cases())
        assert report.snapshot_version == version
        assert [o.decision for o in report.outcomes] == [Decision.ALLOW, Decision.ALLOW]
