"""Kernel security – Condition and ConditionEvaluator.

Every operator exists in two explicit forms:

* **strict** (``StringEquals``) – a key absent from the request makes the
  condition ``False`` (fail closed);
* **if-exists** (``StringEqualsIfExists``) – a key absent from the request
  makes the condition ``True``; when present the strict test applies.

A condition that only applies *when* an attribute is present must not deny
principals that never established the attribute, so the two forms are
never folded into one another.

``Null`` is the only operator about presence itself: ``Null: true`` holds
when the key is absent, ``Null: false`` when it is present.

Unknown operator names are rejected when a :class:`Condition` is built,
never during evaluation.
"""

from __future__ import annotations

import dataclasses
import ipaddress
from typing import Any, Callable, Iterable, Mapping

from mp_access.kernel.errors import UnknownOperatorError, ValidationError
from mp_access.kernel.security.context import MISSING, RequestContext
from mp_access.kernel.security.matchers import glob_to_regex

IF_EXISTS_SUFFIX = "IfExists"

_Test = Callable[[Any, Any], bool]


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


class _Uncoercible(Exception):
    pass


def _as_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        raise _Uncoercible(value)
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise _Uncoercible(value) from exc


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise _Uncoercible(value)


def _as_ip(value: Any) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    try:
        return ipaddress.ip_address(str(value).strip())
    except ValueError as exc:
        raise _Uncoercible(value) from exc


def _as_network(value: Any) -> ipaddress.IPv4Network | ipaddress.IPv6Network:
    try:
        return ipaddress.ip_network(str(value).strip(), strict=False)
    except ValueError as exc:
        raise _Uncoercible(value) from exc


# ---------------------------------------------------------------------------
# Base tests: (actual, expected) -> bool for a single pair of values
# ---------------------------------------------------------------------------


def _string_equals(actual: Any, expected: Any) -> bool:
    return _as_str(actual) == _as_str(expected)


def _string_equals_ignore_case(actual: Any, expected: Any) -> bool:
    return _as_str(actual).casefold() == _as_str(expected).casefold()


def _string_like(actual: Any, expected: Any) -> bool:
    return glob_to_regex(_as_str(expected)).fullmatch(_as_str(actual)) is not None


def _numeric_equals(actual: Any, expected: Any) -> bool:
    return _as_float(actual) == _as_float(expected)


def _numeric_lt(actual: Any, expected: Any) -> bool:
    return _as_float(actual) < _as_float(expected)


def _numeric_lte(actual: Any, expected: Any) -> bool:
    return _as_float(actual) <= _as_float(expected)


def _numeric_gt(actual: Any, expected: Any) -> bool:
    return _as_float(actual) > _as_float(expected)


def _numeric_gte(actual: Any, expected: Any) -> bool:
    return _as_float(actual) >= _as_float(expected)


def _bool_equals(actual: Any, expected: Any) -> bool:
    return _as_bool(actual) == _as_bool(expected)


def _ip_in_network(actual: Any, expected: Any) -> bool:
    return _as_ip(actual) in _as_network(expected)


@dataclasses.dataclass(frozen=True)
class OperatorSpec:
    """A resolved operator: base test, negation and absent-key behaviour."""

    name: str
    base: str
    test: _Test = dataclasses.field(compare=False, repr=False)
    negated: bool = False
    if_exists: bool = False


# name -> (test, negated)
_BASE_OPERATORS: dict[str, tuple[_Test, bool]] = {
    "StringEquals": (_string_equals, False),
    "StringNotEquals": (_string_equals, True),
    "StringEqualsIgnoreCase": (_string_equals_ignore_case, False),
    "StringNotEqualsIgnoreCase": (_string_equals_ignore_case, True),
    "StringLike": (_string_like, False),
    "StringNotLike": (_string_like, True),
    "NumericEquals": (_numeric_equals, False),
    "NumericNotEquals": (_numeric_equals, True),
    "NumericLessThan": (_numeric_lt, False),
    "NumericLessThanEquals": (_numeric_lte, False),
    "NumericGreaterThan": (_numeric_gt, False),
    "NumericGreaterThanEquals": (_numeric_gte, False),
    "Bool": (_bool_equals, False),
    "IpAddress": (_ip_in_network, False),
    "NotIpAddress": (_ip_in_network, True),
}

NULL_OPERATOR = "Null"


def resolve_operator(name: str) -> OperatorSpec:
    """Resolve *name* (``"Bool"``, ``"BoolIfExists"``, …) or raise
    :class:`~mp_access.kernel.errors.UnknownOperatorError`."""
    if name == NULL_OPERATOR:
        return OperatorSpec(name=name, base=name, test=_bool_equals)
    base, if_exists = name, False
    if name.endswith(IF_EXISTS_SUFFIX):
        base, if_exists = name[: -len(IF_EXISTS_SUFFIX)], True
    try:
        test, negated = _BASE_OPERATORS[base]
    except KeyError:
        raise UnknownOperatorError(name) from None
    return OperatorSpec(name=name, base=base, test=test, negated=negated, if_exists=if_exists)


def supported_operators() -> list[str]:
    names = [NULL_OPERATOR]
    for base in _BASE_OPERATORS:
        names.extend((base, base + IF_EXISTS_SUFFIX))
    return sorted(names)


# ---------------------------------------------------------------------------
# Condition
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class Condition:
    """``operator`` applied to context ``key`` against ``values`` (any-of).

    Example::

        Condition("Bool", "aws:MultiFactorAuthPresent", ("true",))
        Condition("StringEquals", "aws:ResourceTag/environment", ("development",))
    """

    operator: str
    key: str
    values: tuple[Any, ...]
    spec: OperatorSpec = dataclasses.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        values = self.values
        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            values = (values,)
        object.__setattr__(self, "values", tuple(values))
        if not self.values:
            raise ValidationError(
                f"Condition '{self.operator}' on '{self.key}' has no expected value",
                errors=[{"operator": self.operator, "key": self.key}],
            )
        object.__setattr__(self, "spec", resolve_operator(self.operator))

    @classmethod
    def parse_block(cls, block: Mapping[str, Mapping[str, Any]]) -> tuple["Condition", ...]:
        """Parse an IAM-style ``Condition`` block.

        ``{"Bool": {"aws:MultiFactorAuthPresent": "true"}}`` yields one
        condition per (operator, key) pair, in document order.
        """
        conditions: list[Condition] = []
        for operator, keys in block.items():
            if not isinstance(keys, Mapping):
                raise ValidationError(
                    f"Condition operator '{operator}' must map keys to values",
                    errors=[{"operator": operator}],
                )
            for key, expected in keys.items():
                conditions.append(cls(operator, key, expected))
        return tuple(conditions)

    def to_document(self) -> dict[str, dict[str, Any]]:
        value: Any = self.values[0] if len(self.values) == 1 else list(self.values)
        return {self.operator: {self.key: value}}


def conditions_to_block(conditions: Iterable[Condition]) -> dict[str, dict[str, Any]]:
    block: dict[str, dict[str, Any]] = {}
    for condition in conditions:
        for operator, keys in condition.to_document().items():
            block.setdefault(operator, {}).update(keys)
    return block


# ---------------------------------------------------------------------------
# ConditionEvaluator
# ---------------------------------------------------------------------------


def _as_values(actual: Any) -> tuple[Any, ...]:
    if isinstance(actual, (list, tuple, set, frozenset)):
        return tuple(actual)
    return (actual,)


class ConditionEvaluator:
    """Evaluates conditions against a :class:`RequestContext`.

    Never raises: values that cannot be coerced for the operator (a
    non-numeric string under ``NumericLessThan``, a malformed address under
    ``IpAddress``) make the condition ``False``.
    """

    def evaluate(self, condition: Condition, context: RequestContext) -> bool:
        spec = condition.spec
        actual = context.lookup(condition.key)

        if spec.base == NULL_OPERATOR:
            try:
                expect_absent = any(_as_bool(v) for v in condition.values)
            except _Uncoercible:
                return False
            return (actual is MISSING) == expect_absent

        if actual is MISSING:
            return spec.if_exists

        try:
            hit = any(
                spec.test(a, e) for a in _as_values(actual) for e in condition.values
            )
        except _Uncoercible:
            return False
        return not hit if spec.negated else hit

    def evaluate_all(self, conditions: Iterable[Condition], context: RequestContext) -> bool:
        """Conjunction: ``True`` only if every condition holds (vacuously for none)."""
        return all(self.evaluate(c, context) for c in conditions)


__all__ = [
    "Condition",
    "ConditionEvaluator",
    "IF_EXISTS_SUFFIX",
    "NULL_OPERATOR",
    "OperatorSpec",
    "conditions_to_block",
    "resolve_operator",
    "supported_operators",
]
