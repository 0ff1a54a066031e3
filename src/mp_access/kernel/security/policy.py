"""Kernel security – Effect, Decision, Statement, Policy.

Policies are plain immutable data. They parse from (and render back to)
IAM-style JSON documents::

    {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "AllowDevInstances",
                "Effect": "Allow",
                "Action": ["ec2:StartInstances", "ec2:StopInstances"],
                "Resource": "*",
                "Condition": {"StringEquals": {"aws:ResourceTag/environment": "development"}}
            }
        ]
    }
"""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Iterable, Mapping

from mp_access.kernel.errors import ValidationError
from mp_access.kernel.security.conditions import Condition, conditions_to_block
from mp_access.kernel.security.matchers import Matcher, any_matches, compile_matcher

POLICY_VERSION = "2012-10-17"


class Effect(str, Enum):
    ALLOW = "Allow"
    DENY = "Deny"


class Decision(str, Enum):
    """Outcome of a policy evaluation.

    ``DENY`` is an explicit deny from a matching statement;
    ``IMPLICIT_DENY`` means nothing granted the request.
    """

    ALLOW = "ALLOW"
    DENY = "DENY"
    IMPLICIT_DENY = "IMPLICIT_DENY"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _compile(patterns: Iterable[str]) -> tuple[Matcher, ...]:
    return tuple(compile_matcher(p) for p in patterns)


@dataclasses.dataclass(frozen=True)
class Statement:
    """One allow/deny rule.

    ``actions`` / ``resources`` are alternatives (any-of). ``not_actions`` /
    ``not_resources`` invert the sense: the statement applies to everything
    *except* the listed patterns. Exactly one of each pair is set.
    """

    effect: Effect
    actions: tuple[Matcher, ...] = ()
    resources: tuple[Matcher, ...] = ()
    conditions: tuple[Condition, ...] = ()
    sid: str | None = None
    not_actions: tuple[Matcher, ...] = ()
    not_resources: tuple[Matcher, ...] = ()

    def __post_init__(self) -> None:
        errors: list[dict[str, Any]] = []
        if bool(self.actions) == bool(self.not_actions):
            errors.append({"field": "Action", "error": "exactly one of Action/NotAction is required"})
        if bool(self.resources) == bool(self.not_resources):
            errors.append({"field": "Resource", "error": "exactly one of Resource/NotResource is required"})
        if errors:
            raise ValidationError(f"Invalid statement {self.sid or ''}".strip(), errors=errors)

    @classmethod
    def of(
        cls,
        effect: Effect | str,
        actions: str | Iterable[str] | None = None,
        resources: str | Iterable[str] | None = "*",
        *,
        conditions: Iterable[Condition] = (),
        sid: str | None = None,
        not_actions: str | Iterable[str] | None = None,
        not_resources: str | Iterable[str] | None = None,
    ) -> "Statement":
        """Build a statement from plain pattern strings."""
        if not_resources is not None:
            resources = None
        return cls(
            effect=Effect(effect),
            actions=_compile(_as_list(actions)),
            resources=_compile(_as_list(resources)),
            conditions=tuple(conditions),
            sid=sid,
            not_actions=_compile(_as_list(not_actions)),
            not_resources=_compile(_as_list(not_resources)),
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Statement":
        try:
            effect = Effect(doc.get("Effect"))
        except ValueError:
            raise ValidationError(
                f"Statement effect must be Allow or Deny, got {doc.get('Effect')!r}",
                errors=[{"field": "Effect", "value": doc.get("Effect")}],
            ) from None
        return cls(
            effect=effect,
            actions=_compile(_as_list(doc.get("Action"))),
            resources=_compile(_as_list(doc.get("Resource"))),
            conditions=Condition.parse_block(doc.get("Condition") or {}),
            sid=doc.get("Sid"),
            not_actions=_compile(_as_list(doc.get("NotAction"))),
            not_resources=_compile(_as_list(doc.get("NotResource"))),
        )

    def matches_action(self, action: str, principal: str | None = None) -> bool:
        if self.not_actions:
            return not any_matches(self.not_actions, action, principal)
        return any_matches(self.actions, action, principal)

    def matches_resource(self, resource: str, principal: str | None = None) -> bool:
        if self.not_resources:
            return not any_matches(self.not_resources, resource, principal)
        return any_matches(self.resources, resource, principal)

    def applies_to(self, action: str, resource: str, principal: str | None = None) -> bool:
        """Action and resource matchers both cover the request (conditions aside)."""
        return self.matches_action(action, principal) and self.matches_resource(resource, principal)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        if self.sid:
            doc["Sid"] = self.sid
        doc["Effect"] = self.effect.value
        if self.actions:
            doc["Action"] = [m.pattern for m in self.actions]
        else:
            doc["NotAction"] = [m.pattern for m in self.not_actions]
        if self.resources:
            doc["Resource"] = [m.pattern for m in self.resources]
        else:
            doc["NotResource"] = [m.pattern for m in self.not_resources]
        if self.conditions:
            doc["Condition"] = conditions_to_block(self.conditions)
        return doc


@dataclasses.dataclass(frozen=True)
class Policy:
    """A named, ordered list of statements.

    Policies are shared by reference between principals. Updating a policy
    means replacing it with a new instance; statements are never merged.
    """

    name: str
    statements: tuple[Statement, ...]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValidationError("Policy name must not be empty")
        object.__setattr__(self, "statements", tuple(self.statements))

    @classmethod
    def from_document(cls, name: str, doc: Mapping[str, Any], *, description: str = "") -> "Policy":
        raw = doc.get("Statement")
        if raw is None:
            raise ValidationError(
                f"Policy '{name}' has no Statement",
                errors=[{"policy": name, "field": "Statement"}],
            )
        if isinstance(raw, Mapping):
            raw = [raw]
        return cls(
            name=name,
            statements=tuple(Statement.from_document(s) for s in raw),
            description=description or doc.get("Description", ""),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "Version": POLICY_VERSION,
            "Statement": [s.to_document() for s in self.statements],
        }

    def with_statements(self, statements: Iterable[Statement]) -> "Policy":
        """Return a replacement policy carrying *statements* only."""
        return dataclasses.replace(self, statements=tuple(statements))


__all__ = ["Decision", "Effect", "POLICY_VERSION", "Policy", "Statement"]
