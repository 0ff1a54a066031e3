"""Kernel security – PolicyEvaluator.

Decision algorithm, for one request against one snapshot:

1. Collect every statement of every policy attached to the principal,
   directly or through group membership.
2. Keep statements whose action matcher covers the action and whose
   resource matcher covers the resource.
3. Drop statements whose conditions do not all hold for the request.
4. Any surviving ``Deny`` → :attr:`Decision.DENY`.
5. Else any surviving ``Allow`` → :attr:`Decision.ALLOW`.
6. Else :attr:`Decision.IMPLICIT_DENY`.

Explicit deny always beats allow, and the absence of a rule is itself a
decision. Evaluation never raises.
"""

from __future__ import annotations

import dataclasses
import logging

from mp_access.kernel.security.audit import AccessEvent, AccessEventSink
from mp_access.kernel.security.conditions import ConditionEvaluator
from mp_access.kernel.security.context import RequestContext
from mp_access.kernel.security.policy import Decision, Effect
from mp_access.kernel.security.store import BoundStatement, PolicySnapshot, PolicyStore

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class EvaluationResult:
    """A decision plus the statements that produced it."""

    decision: Decision
    principal: str
    action: str
    resource: str
    snapshot_version: int
    matched: tuple[BoundStatement, ...] = ()
    deciding: tuple[BoundStatement, ...] = ()

    @property
    def allowed(self) -> bool:
        return self.decision.allowed

    @property
    def reason(self) -> str:
        if self.decision is Decision.IMPLICIT_DENY:
            return "no statement grants the request"
        labels = ", ".join(b.label for b in self.deciding)
        verb = "denied" if self.decision is Decision.DENY else "allowed"
        return f"{verb} by {labels}"

    def to_event(self) -> AccessEvent:
        return AccessEvent(
            principal=self.principal,
            action=self.action,
            resource=self.resource,
            decision=self.decision,
            snapshot_version=self.snapshot_version,
            deciding=tuple(b.label for b in self.deciding),
        )


class PolicyEvaluator:
    """Answers "may *principal* perform *action* on *resource*?".

    The evaluator reads either a live :class:`PolicyStore` (taking a fresh
    snapshot per call, so reloads are picked up) or a fixed
    :class:`PolicySnapshot`. Each call reads exactly one snapshot.

    Parameters
    ----------
    source:
        Store or snapshot holding principals and policies.
    conditions:
        Condition evaluator; defaults to :class:`ConditionEvaluator`.
    sink:
        Optional :class:`AccessEventSink` that receives one event per
        decision.
    """

    def __init__(
        self,
        source: PolicyStore | PolicySnapshot,
        *,
        conditions: ConditionEvaluator | None = None,
        sink: AccessEventSink | None = None,
    ) -> None:
        self._source = source
        self._conditions = conditions or ConditionEvaluator()
        self._sink = sink

    def snapshot(self) -> PolicySnapshot:
        if isinstance(self._source, PolicySnapshot):
            return self._source
        return self._source.snapshot()

    def decide(
        self,
        principal: str,
        action: str,
        resource: str,
        context: RequestContext | None = None,
    ) -> Decision:
        return self.explain(principal, action, resource, context).decision

    def explain(
        self,
        principal: str,
        action: str,
        resource: str,
        context: RequestContext | None = None,
    ) -> EvaluationResult:
        snapshot = self.snapshot()
        try:
            result = self._evaluate(snapshot, principal, action, resource, context)
        except Exception:  # noqa: BLE001
            logger.exception(
                "evaluation failed closed principal=%s action=%s resource=%s",
                principal,
                action,
                resource,
            )
            result = EvaluationResult(
                Decision.IMPLICIT_DENY, principal, action, resource, snapshot.version
            )
        self._emit(result)
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _evaluate(
        self,
        snapshot: PolicySnapshot,
        principal: str,
        action: str,
        resource: str,
        context: RequestContext | None,
    ) -> EvaluationResult:
        ctx = (context or RequestContext()).bind(principal, action, resource)
        effective = snapshot.bound_statements_for(principal)

        matched = tuple(
            b
            for b in effective
            if b.statement.applies_to(action, resource, principal)
            and self._conditions.evaluate_all(b.statement.conditions, ctx)
        )
        denies = tuple(b for b in matched if b.statement.effect is Effect.DENY)
        if denies:
            decision, deciding = Decision.DENY, denies
        else:
            allows = tuple(b for b in matched if b.statement.effect is Effect.ALLOW)
            if allows:
                decision, deciding = Decision.ALLOW, allows
            else:
                decision, deciding = Decision.IMPLICIT_DENY, ()

        return EvaluationResult(
            decision=decision,
            principal=principal,
            action=action,
            resource=resource,
            snapshot_version=snapshot.version,
            matched=matched,
            deciding=deciding,
        )

    def _emit(self, result: EvaluationResult) -> None:
        if self._sink is None:
            return
        try:
            self._sink.record(result.to_event())
        except Exception:  # noqa: BLE001
            logger.exception("access event sink rejected event principal=%s", result.principal)


__all__ = ["EvaluationResult", "PolicyEvaluator"]
