"""Kernel security – RequestContext."""
from __future__ import annotations

import dataclasses
from typing import Any, Mapping


class _Missing:
    """Sentinel for a context key that is absent from the request."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

MFA_PRESENT_KEY = "aws:MultiFactorAuthPresent"
SOURCE_IP_KEY = "aws:SourceIp"

_TAG_PREFIXES = ("aws:ResourceTag/", "resource/tag/")


@dataclasses.dataclass(frozen=True)
class RequestContext:
    """Runtime facts a single evaluation is checked against.

    Built fresh for every ``decide`` call and never persisted. ``session``
    holds attributes of the caller's session (MFA presence, source IP, …);
    ``resource_tags`` holds tags of the target resource.
    """

    principal: str = ""
    action: str = ""
    resource: str = ""
    resource_tags: Mapping[str, str] = dataclasses.field(default_factory=dict)
    session: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "resource_tags", dict(self.resource_tags))
        object.__setattr__(self, "session", dict(self.session))

    @classmethod
    def build(
        cls,
        principal: str = "",
        action: str = "",
        resource: str = "",
        *,
        tags: Mapping[str, str] | None = None,
        session: Mapping[str, Any] | None = None,
        mfa: bool | None = None,
        source_ip: str | None = None,
    ) -> "RequestContext":
        attrs: dict[str, Any] = dict(session or {})
        if mfa is not None:
            attrs[MFA_PRESENT_KEY] = mfa
        if source_ip is not None:
            attrs[SOURCE_IP_KEY] = source_ip
        return cls(principal, action, resource, dict(tags or {}), attrs)

    def bind(self, principal: str, action: str, resource: str) -> "RequestContext":
        """Return a copy describing the given request."""
        return dataclasses.replace(self, principal=principal, action=action, resource=resource)

    def lookup(self, key: str) -> Any:
        """Resolve a condition key, returning :data:`MISSING` when absent.

        Resource tags are addressed as ``aws:ResourceTag/<tag>`` or
        ``resource/tag/<tag>``; other keys are read from the session
        (exact match first, then case-insensitive).
        """
        for prefix in _TAG_PREFIXES:
            if key.startswith(prefix):
                return self.resource_tags.get(key[len(prefix):], MISSING)
        if key in ("principal", "aws:username", "aws:PrincipalName"):
            return self.principal or MISSING
        if key == "action":
            return self.action or MISSING
        if key == "resource":
            return self.resource or MISSING
        if key in self.session:
            return self.session[key]
        folded = key.lower()
        for name, value in self.session.items():
            if name.lower() == folded:
                return value
        return MISSING

    def has(self, key: str) -> bool:
        return self.lookup(key) is not MISSING


__all__ = ["MFA_PRESENT_KEY", "MISSING", "RequestContext", "SOURCE_IP_KEY"]
