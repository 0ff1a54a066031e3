"""Observability – AuditLogger.

A structured-log implementation of the
:class:`~mp_access.kernel.security.audit.AccessEventSink` port, plus a
record of provisioning changes.
"""
from __future__ import annotations

from typing import Any

from mp_access.kernel.security.audit import AccessEvent
from mp_access.observability.logging.processors import get_logger

#: Provisioning outcomes logged at ``WARNING``; every other outcome is ``INFO``.
FAILURE_OUTCOMES: frozenset[str] = frozenset({"FAILED"})


class AuditLogger:
    """Dedicated structured-log sink for access decisions.

    Denials (explicit or implicit) are emitted at ``WARNING`` so they pass
    through restrictive level filters; grants at ``INFO``.

    Parameters
    ----------
    service:
        Logical service name injected into every audit entry.
    logger:
        Underlying structlog logger.  Defaults to ``get_logger("audit")``.
    """

    def __init__(self, service: str = "mp-access", logger: Any = None) -> None:
        self._service = service
        self._log = logger if logger is not None else get_logger("audit")

    def record(self, event: AccessEvent) -> None:
        entry = event.to_dict()
        entry["service"] = self._service
        if event.is_denied():
            self._log.warning("audit.decision", **entry)
        else:
            self._log.info("audit.decision", **entry)

    def log_change(self, entity: str, kind: str, outcome: str, **extra: Any) -> None:
        """Record a provisioning change (created / updated / failed).

        Failures are emitted at ``WARNING``, applied changes at ``INFO``.
        """
        log = self._log.warning if outcome.upper() in FAILURE_OUTCOMES else self._log.info
        log(
            "audit.provisioning",
            service=self._service,
            entity=entity,
            kind=kind,
            outcome=outcome,
            **extra,
        )


__all__ = ["AuditLogger", "FAILURE_OUTCOMES"]
