"""Observability – SensitiveFieldsFilter.

Entity properties end up in log fields (``provisioning.entity_applied``,
``audit.provisioning``) and some kinds carry credentials, e.g. a user's
``initial_password``. This processor masks them before rendering.
"""
from __future__ import annotations

from typing import Any

#: Exact key names (case-insensitive) that are always masked.
DEFAULT_SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "password",
        "initial_password",
        "secret",
        "secret_access_key",
        "access_key",
        "token",
        "session_token",
        "private_key",
    }
)

#: Any key ending with one of these is masked too (``db_password``, ``api_token``).
SENSITIVE_SUFFIXES: tuple[str, ...] = ("_password", "_secret", "_token")


class SensitiveFieldsFilter:
    """structlog processor replacing sensitive values with ``[REDACTED]``.

    Walks nested mappings and lists, so a credential inside
    ``properties={"users": [{"initial_password": ...}]}`` is caught as well.
    """

    REDACTED = "[REDACTED]"

    def __init__(
        self,
        sensitive_fields: frozenset[str] | None = None,
        suffixes: tuple[str, ...] = SENSITIVE_SUFFIXES,
    ) -> None:
        self._fields = frozenset(f.lower() for f in (sensitive_fields or DEFAULT_SENSITIVE_FIELDS))
        self._suffixes = suffixes

    def is_sensitive(self, key: str) -> bool:
        lowered = key.lower()
        return lowered in self._fields or lowered.endswith(self._suffixes)

    def redact(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {
                k: self.REDACTED if isinstance(k, str) and self.is_sensitive(k) else self.redact(v)
                for k, v in value.items()
            }
        if isinstance(value, list):
            return [self.redact(v) for v in value]
        if isinstance(value, tuple):
            return tuple(self.redact(v) for v in value)
        return value

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        return self.redact(event_dict)


__all__ = ["DEFAULT_SENSITIVE_FIELDS", "SENSITIVE_SUFFIXES", "SensitiveFieldsFilter"]
