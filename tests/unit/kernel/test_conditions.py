"""Unit tests for Condition parsing and ConditionEvaluator."""

from __future__ import annotations

import pytest

from mp_access.kernel.errors import ConditionEvaluationError, UnknownOperatorError, ValidationError
from mp_access.kernel.security import MFA_PRESENT_KEY, Condition, ConditionEvaluator, RequestContext
from mp_access.kernel.security.conditions import conditions_to_block, supported_operators


def _eval(operator: str, key: str, values, context: RequestContext) -> bool:
    return ConditionEvaluator().evaluate(Condition(operator, key, values), context)


NO_MFA = RequestContext.build()
MFA_TRUE = RequestContext.build(mfa=True)
MFA_FALSE = RequestContext.build(mfa=False)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestConditionParsing:
    def test_scalar_value_becomes_tuple(self) -> None:
        c = Condition("StringEquals", "aws:ResourceTag/environment", "development")
        assert c.values == ("development",)

    def test_list_value_kept_in_order(self) -> None:
        c = Condition("StringEquals", "k", ["a", "b"])
        assert c.values == ("a", "b")

    def test_unknown_operator_rejected_at_build_time(self) -> None:
        with pytest.raises(UnknownOperatorError) as info:
            Condition("StringSortOf", "k", "v")
        assert isinstance(info.value, ConditionEvaluationError)
        assert info.value.operator == "StringSortOf"

    def test_unknown_if_exists_operator_rejected(self) -> None:
        with pytest.raises(UnknownOperatorError):
            Condition("NullIfExists", "k", "true")

    def test_empty_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Condition("StringEquals", "k", [])

    def test_parse_block(self) -> None:
        block = {
            "Bool": {MFA_PRESENT_KEY: "true"},
            "StringEquals": {"aws:ResourceTag/environment": ["development", "staging"]},
        }
        conditions = Condition.parse_block(block)
        assert [c.operator for c in conditions] == ["Bool", "StringEquals"]
        assert conditions[1].values == ("development", "staging")

    def test_parse_block_rejects_non_mapping(self) -> None:
        with pytest.raises(ValidationError):
            Condition.parse_block({"Bool": "true"})

    def test_block_round_trip(self) -> None:
        block = {"Bool": {MFA_PRESENT_KEY: "true"}, "StringLike": {"k": ["a*", "b*"]}}
        assert conditions_to_block(Condition.parse_block(block)) == block

    def test_every_operator_has_if_exists_variant_except_null(self) -> None:
        ops = set(supported_operators())
        assert "Null" in ops and "NullIfExists" not in ops
        for op in ops - {"Null"}:
            base = op[: -len("IfExists")] if op.endswith("IfExists") else op
            assert base in ops and base + "IfExists" in ops


# ---------------------------------------------------------------------------
# Strict vs IfExists on an absent key
# ---------------------------------------------------------------------------


class TestAbsentKey:
    @pytest.mark.parametrize(
        "operator, value",
        [
            ("StringEquals", "x"),
            ("StringNotEquals", "x"),
            ("StringLike", "x*"),
            ("NumericLessThan", "10"),
            ("Bool", "true"),
            ("IpAddress", "10.0.0.0/8"),
            ("NotIpAddress", "10.0.0.0/8"),
        ],
    )
    def test_strict_fails_closed(self, operator: str, value: str) -> None:
        assert _eval(operator, "missing:key", value, NO_MFA) is False

    @pytest.mark.parametrize(
        "operator, value",
        [
            ("StringEqualsIfExists", "x"),
            ("StringNotEqualsIfExists", "x"),
            ("NumericLessThanIfExists", "10"),
            ("BoolIfExists", "true"),
            ("IpAddressIfExists", "10.0.0.0/8"),
        ],
    )
    def test_if_exists_holds(self, operator: str, value: str) -> None:
        assert _eval(operator, "missing:key", value, NO_MFA) is True


# ---------------------------------------------------------------------------
# Bool: present-but-false vs absent
# ---------------------------------------------------------------------------


class TestBoolPresence:
    def test_present_true(self) -> None:
        assert _eval("Bool", MFA_PRESENT_KEY, "true", MFA_TRUE)

    def test_present_false_compares_values(self) -> None:
        assert not _eval("Bool", MFA_PRESENT_KEY, "true", MFA_FALSE)
        assert _eval("Bool", MFA_PRESENT_KEY, "false", MFA_FALSE)

    def test_absent_strict_is_false_even_for_expected_false(self) -> None:
        assert not _eval("Bool", MFA_PRESENT_KEY, "false", NO_MFA)

    def test_if_exists_applies_base_when_present(self) -> None:
        assert not _eval("BoolIfExists", MFA_PRESENT_KEY, "true", MFA_FALSE)
        assert _eval("BoolIfExists", MFA_PRESENT_KEY, "true", MFA_TRUE)
        assert _eval("BoolIfExists", MFA_PRESENT_KEY, "true", NO_MFA)

    def test_string_session_value(self) -> None:
        ctx = RequestContext.build(session={MFA_PRESENT_KEY: "TRUE"})
        assert _eval("Bool", MFA_PRESENT_KEY, "true", ctx)

    def test_garbage_bool_is_false(self) -> None:
        ctx = RequestContext.build(session={MFA_PRESENT_KEY: "maybe"})
        assert not _eval("Bool", MFA_PRESENT_KEY, "true", ctx)


# ---------------------------------------------------------------------------
# Null
# ---------------------------------------------------------------------------


class TestNull:
    def test_null_true_holds_when_absent(self) -> None:
        assert _eval("Null", MFA_PRESENT_KEY, "true", NO_MFA)
        assert not _eval("Null", MFA_PRESENT_KEY, "true", MFA_FALSE)

    def test_null_false_holds_when_present(self) -> None:
        assert _eval("Null", MFA_PRESENT_KEY, "false", MFA_FALSE)
        assert not _eval("Null", MFA_PRESENT_KEY, "false", NO_MFA)


# ---------------------------------------------------------------------------
# Operators against present keys
# ---------------------------------------------------------------------------


class TestStringOperators:
    ctx = RequestContext.build(tags={"environment": "Development"})
    key = "aws:ResourceTag/environment"

    def test_equals_any_of(self) -> None:
        assert _eval("StringEquals", self.key, ["Production", "Development"], self.ctx)
        assert not _eval("StringEquals", self.key, "development", self.ctx)

    def test_not_equals_holds_when_no_value_matches(self) -> None:
        assert _eval("StringNotEquals", self.key, ["production", "staging"], self.ctx)
        assert not _eval("StringNotEquals", self.key, ["Development", "staging"], self.ctx)

    def test_ignore_case(self) -> None:
        assert _eval("StringEqualsIgnoreCase", self.key, "DEVELOPMENT", self.ctx)
        assert not _eval("StringNotEqualsIgnoreCase", self.key, "development", self.ctx)

    def test_like(self) -> None:
        assert _eval("StringLike", self.key, "Dev*", self.ctx)
        assert _eval("StringNotLike", self.key, "Prod*", self.ctx)

    def test_resource_tag_alias(self) -> None:
        assert _eval("StringEquals", "resource/tag/environment", "Development", self.ctx)

    def test_session_keys_fall_back_to_case_insensitive(self) -> None:
        ctx = RequestContext.build(session={"aws:SourceVpc": "vpc-1"})
        assert _eval("StringEquals", "aws:sourcevpc", "vpc-1", ctx)


class TestNumericOperators:
    ctx = RequestContext.build(session={"aws:MultiFactorAuthAge": "300"})
    key = "aws:MultiFactorAuthAge"

    @pytest.mark.parametrize(
        "operator, value, expected",
        [
            ("NumericEquals", "300", True),
            ("NumericNotEquals", "300", False),
            ("NumericLessThan", "3600", True),
            ("NumericLessThanEquals", "300", True),
            ("NumericGreaterThan", "300", False),
            ("NumericGreaterThanEquals", "300", True),
        ],
    )
    def test_comparisons(self, operator: str, value: str, expected: bool) -> None:
        assert _eval(operator, self.key, value, self.ctx) is expected

    def test_uncoercible_actual_is_false(self) -> None:
        ctx = RequestContext.build(session={self.key: "soon"})
        assert not _eval("NumericLessThan", self.key, "3600", ctx)
        assert not _eval("NumericNotEquals", self.key, "3600", ctx)


class TestIpOperators:
    ctx = RequestContext.build(source_ip="10.1.2.3")

    def test_in_range(self) -> None:
        assert _eval("IpAddress", "aws:SourceIp", ["192.168.0.0/16", "10.0.0.0/8"], self.ctx)

    def test_not_in_range(self) -> None:
        assert _eval("NotIpAddress", "aws:SourceIp", "192.168.0.0/16", self.ctx)
        assert not _eval("NotIpAddress", "aws:SourceIp", "10.0.0.0/8", self.ctx)

    def test_malformed_address_is_false(self) -> None:
        ctx = RequestContext.build(source_ip="not-an-ip")
        assert not _eval("IpAddress", "aws:SourceIp", "10.0.0.0/8", ctx)
        assert not _eval("NotIpAddress", "aws:SourceIp", "10.0.0.0/8", ctx)


class TestEvaluateAll:
    def test_conjunction(self) -> None:
        ctx = RequestContext.build(tags={"environment": "development"}, mfa=True)
        conditions = Condition.parse_block(
            {
                "Bool": {MFA_PRESENT_KEY: "true"},
                "StringEquals": {"aws:ResourceTag/environment": "development"},
            }
        )
        ev = ConditionEvaluator()
        assert ev.evaluate_all(conditions, ctx)
        assert not ev.evaluate_all(conditions, RequestContext.build(tags={"environment": "development"}))

    def test_no_conditions_holds(self) -> None:
        assert ConditionEvaluator().evaluate_all((), RequestContext())
