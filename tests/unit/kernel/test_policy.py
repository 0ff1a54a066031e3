"""Unit tests for Statement / Policy documents and ready-made templates."""

from __future__ import annotations

import pytest

from mp_access.kernel.errors import UnknownOperatorError, ValidationError
from mp_access.kernel.security import Decision, Effect, Policy, Statement
from mp_access.kernel.security.templates import (
    MFA_BOOTSTRAP_ACTIONS,
    environment_scoped_policy,
    mfa_bootstrap_policy,
    mfa_required_policy,
)

DEV_POLICY = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Sid": "AllowDevInstances",
            "Effect": "Allow",
            "Action": ["ec2:StartInstances", "ec2:StopInstances"],
            "Resource": "*",
            "Condition": {"StringEquals": {"aws:ResourceTag/environment": "development"}},
        },
        {"Effect": "Deny", "Action": "ec2:TerminateInstances", "Resource": "*"},
    ],
}


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class TestPolicyDocument:
    def test_from_document(self) -> None:
        policy = Policy.from_document("dev", DEV_POLICY)
        assert policy.name == "dev"
        assert [s.effect for s in policy.statements] == [Effect.ALLOW, Effect.DENY]
        assert policy.statements[0].sid == "AllowDevInstances"
        assert len(policy.statements[0].actions) == 2
        assert policy.statements[0].conditions[0].operator == "StringEquals"

    def test_single_statement_object(self) -> None:
        policy = Policy.from_document("one", {"Statement": {"Effect": "Allow", "Action": "*", "Resource": "*"}})
        assert len(policy.statements) == 1

    def test_missing_statement_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Policy.from_document("empty", {"Version": "2012-10-17"})

    def test_bad_effect_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Policy.from_document("bad", {"Statement": {"Effect": "Maybe", "Action": "*", "Resource": "*"}})

    def test_unknown_operator_rejected_at_load(self) -> None:
        doc = {
            "Statement": {
                "Effect": "Allow",
                "Action": "*",
                "Resource": "*",
                "Condition": {"StringRoughlyEquals": {"k": "v"}},
            }
        }
        with pytest.raises(UnknownOperatorError):
            Policy.from_document("bad", doc)

    def test_action_and_not_action_are_exclusive(self) -> None:
        with pytest.raises(ValidationError) as info:
            Statement.from_document({"Effect": "Allow", "Action": "*", "NotAction": "iam:*", "Resource": "*"})
        assert info.value.errors[0]["field"] == "Action"

    def test_resource_required(self) -> None:
        with pytest.raises(ValidationError):
            Statement.from_document({"Effect": "Allow", "Action": "*"})

    def test_document_round_trip(self) -> None:
        policy = Policy.from_document("dev", DEV_POLICY)
        assert Policy.from_document("dev", policy.to_document()) == policy

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Policy("", ())


# ---------------------------------------------------------------------------
# Statement matching
# ---------------------------------------------------------------------------


class TestStatementMatching:
    def test_alternatives_are_any_of(self) -> None:
        s = Statement.of("Allow", ["ec2:Start*", "ec2:Stop*"], ["arn:a", "arn:b"])
        assert s.applies_to("ec2:StopInstances", "arn:b")
        assert not s.applies_to("ec2:RebootInstances", "arn:a")
        assert not s.applies_to("ec2:StartInstances", "arn:c")

    def test_not_resource(self) -> None:
        s = Statement.of("Deny", "s3:*", not_resources="arn:aws:s3:::public/*")
        assert s.applies_to("s3:GetObject", "arn:aws:s3:::private/key")
        assert not s.applies_to("s3:GetObject", "arn:aws:s3:::public/key")


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class TestTemplates:
    def test_mfa_bootstrap_is_unconditional_and_self_scoped(self) -> None:
        policy = mfa_bootstrap_policy()
        (statement,) = policy.statements
        assert statement.effect is Effect.ALLOW
        assert statement.conditions == ()
        assert {m.pattern for m in statement.actions} == set(MFA_BOOTSTRAP_ACTIONS)
        assert all("${aws:username}" in m.pattern for m in statement.resources)

    def test_mfa_required_has_bool_condition(self) -> None:
        (statement,) = mfa_required_policy("work", ["ec2:*"]).statements
        (condition,) = statement.conditions
        assert condition.operator == "Bool"
        assert condition.values == ("true",)

    def test_environment_scoped_sid(self) -> None:
        (statement,) = environment_scoped_policy("dev", ["ec2:*"], "development").statements
        assert statement.sid == "AllowDevelopmentOnly"
        assert statement.conditions[0].key == "aws:ResourceTag/environment"

    def test_decision_allowed_flag(self) -> None:
        assert Decision.ALLOW.allowed
        assert not Decision.DENY.allowed
        assert not Decision.IMPLICIT_DENY.allowed
