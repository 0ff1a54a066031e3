"""Application provisioning – ProvisioningOrchestrator.

Drives a :class:`ProvisioningPlan` through the identity provider, one wave
at a time. Entities inside a wave have no edges between them and run
concurrently, bounded by a :class:`~mp_access.resilience.bulkhead.Bulkhead`;
a wave starts only after every entity of the previous wave succeeded.

Per entity the orchestrator converges rather than blindly creating:

* absent → ``create`` → :attr:`EntityStatus.CREATED`
* present, same fingerprint → nothing → :attr:`EntityStatus.UNCHANGED`
* present, different fingerprint → ``update`` → :attr:`EntityStatus.UPDATED`

so re-applying a plan that already converged is a no-op, and a run that
halted or was cancelled part-way is resumed simply by applying again.

A permanent provider failure halts the run: siblings already in flight
finish, nothing new starts, and every later entity is reported
:attr:`EntityStatus.NOT_ATTEMPTED`.
"""

from __future__ import annotations

import functools
import threading
import uuid
from typing import Any, Awaitable, Callable, Iterable, Protocol, TypeVar

from mp_access.application.notifications import AlertMessage, NotificationChannel
from mp_access.application.provisioning.entities import EntityKind, EntitySpec, TargetConfiguration
from mp_access.application.provisioning.plan import (
    ApplyResult,
    EntityOutcome,
    EntityStatus,
    PlanDiff,
    ProvisioningPlan,
)
from mp_access.application.provisioning.provider import IdentityProvider, ProviderRecord
from mp_access.application.provisioning.resolver import DependencyResolver
from mp_access.config.settings import EngineSettings
from mp_access.kernel.errors import (
    AlreadyExistsError,
    PermanentProviderError,
    ProviderError,
    TimeoutError as AppTimeoutError,
    TransientProviderError,
)
from mp_access.observability.logging import AuditLogger, bound_context, get_logger
from mp_access.resilience.bulkhead import Bulkhead
from mp_access.resilience.retry import Backoff, RetryHook, RetryPolicy
from mp_access.resilience.timeouts import TimeoutPolicy

T = TypeVar("T")
logger = get_logger(__name__)


class RetryExecutor(Protocol):
    """Anything with :meth:`RetryPolicy.execute_async`'s shape."""

    async def execute_async(
        self, func: Callable[[], Awaitable[T]], *, on_retry: RetryHook | None = None
    ) -> T: ...


class CancellationToken:
    """Cooperative cancellation for an apply run.

    Checked between entity steps only; a provider call already in flight is
    never interrupted. Safe to trip from another thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class _RunState:
    def __init__(self, cancel: CancellationToken | None) -> None:
        self.halted = False
        self.cancel = cancel

    @property
    def stop(self) -> bool:
        return self.halted or (self.cancel is not None and self.cancel.cancelled)


class ProvisioningOrchestrator:
    """Applies provisioning plans against an :class:`IdentityProvider`.

    Parameters
    ----------
    provider:
        The identity provider collaborator.
    retry:
        Retry executor for transient failures; defaults to
        ``RetryPolicy(max_attempts=3)``.
    timeout:
        Per-call timeout; a timed-out call counts as transient.
    max_concurrency:
        Upper bound on provider calls in flight within a wave.
    notifier / alert_topic:
        Where to publish an alert when a run halts. Without an explicit
        ``alert_topic`` the plan's provisioned ``alert_topic`` entities are
        used.
    audit:
        Optional :class:`AuditLogger` recording every mutation.

    Example::

        orchestrator = ProvisioningOrchestrator(provider, max_concurrency=4)
        plan = orchestrator.plan(load_target_configuration("target.json"))
        result = await orchestrator.apply(plan)
        if not result.ok:
            print(result.failed, result.not_attempted)
    """

    def __init__(
        self,
        provider: IdentityProvider,
        *,
        retry: RetryExecutor | None = None,
        timeout: TimeoutPolicy | None = None,
        max_concurrency: int = 4,
        notifier: NotificationChannel | None = None,
        alert_topic: str | None = None,
        audit: AuditLogger | None = None,
        resolver: DependencyResolver | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._provider = provider
        self._retry: RetryExecutor = retry or RetryPolicy(max_attempts=3)
        self._timeout = timeout or TimeoutPolicy()
        self._max_concurrency = max_concurrency
        self._notifier = notifier
        self._alert_topic = alert_topic
        self._audit = audit
        self._resolver = resolver or DependencyResolver()

    @classmethod
    def from_settings(
        cls,
        provider: IdentityProvider,
        settings: EngineSettings,
        **kwargs: Any,
    ) -> "ProvisioningOrchestrator":
        retry = RetryPolicy(
            max_attempts=settings.max_attempts,
            backoff=Backoff(base_delay=settings.retry_base_delay, max_delay=settings.retry_max_delay),
        )
        return cls(
            provider,
            retry=kwargs.pop("retry", retry),
            timeout=kwargs.pop("timeout", TimeoutPolicy(settings.provider_timeout or None)),
            max_concurrency=kwargs.pop("max_concurrency", settings.max_concurrency),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def plan(self, source: TargetConfiguration | Iterable[EntitySpec]) -> ProvisioningPlan:
        """Resolve *source* into a plan; configuration errors raise here,
        before any provider call."""
        return ProvisioningPlan.build(source, self._resolver)

    async def diff(self, plan: ProvisioningPlan) -> PlanDiff:
        """Describe every entity and report what :meth:`apply` would change."""
        to_create: list[str] = []
        to_update: list[str] = []
        unchanged: list[str] = []
        for spec in plan.order:
            record = await self._retry.execute_async(functools.partial(self._provider.describe, spec))
            if record is None:
                to_create.append(spec.name)
            elif record.fingerprint == spec.fingerprint():
                unchanged.append(spec.name)
            else:
                to_update.append(spec.name)
        return PlanDiff(tuple(to_create), tuple(to_update), tuple(unchanged))

    async def apply(
        self,
        plan: ProvisioningPlan,
        *,
        cancel: CancellationToken | None = None,
    ) -> ApplyResult:
        """Converge the provider onto *plan*.

        Never raises for provider failures; they are reported in the
        returned :class:`ApplyResult`.
        """
        result = ApplyResult(
            outcomes={
                e.name: EntityOutcome(e.name, e.kind, EntityStatus.NOT_ATTEMPTED) for e in plan.order
            }
        )
        state = _RunState(cancel)
        bulkhead = Bulkhead("provisioning", self._max_concurrency)

        with bound_context(run_id=uuid.uuid4().hex[:12], plan_version=plan.version):
            logger.info("provisioning.apply_started", entities=len(plan), waves=len(plan.waves))
            for wave_no, wave in enumerate(plan.waves):
                if state.stop:
                    break
                logger.debug("provisioning.wave_started", wave=wave_no, entities=[e.name for e in wave])
                outcomes = await bulkhead.map(
                    functools.partial(self._step, spec, state) for spec in wave
                )
                for outcome in outcomes:
                    result.outcomes[outcome.name] = outcome

            result.cancelled = cancel is not None and cancel.cancelled and bool(result.not_attempted)
            if result.failed:
                logger.error(
                    "provisioning.apply_halted",
                    failed=result.failed,
                    not_attempted=result.not_attempted,
                )
                await self._alert(plan, result)
            elif result.cancelled:
                logger.warning("provisioning.apply_cancelled", not_attempted=result.not_attempted)
            else:
                logger.info(
                    "provisioning.apply_finished",
                    created=len(result.created),
                    updated=len(result.updated),
                    unchanged=len(result.unchanged),
                )
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _step(self, spec: EntitySpec, state: _RunState) -> EntityOutcome:
        if state.stop:
            return EntityOutcome(spec.name, spec.kind, EntityStatus.NOT_ATTEMPTED)

        attempts = 0

        async def call(op: Callable[[EntitySpec], Awaitable[T]]) -> T:
            async def once() -> T:
                nonlocal attempts
                attempts += 1
                try:
                    return await self._timeout.execute(lambda: op(spec))
                except AppTimeoutError as exc:
                    raise TransientProviderError(spec.name, exc.message, cause=exc) from exc

            return await self._retry.execute_async(
                once, on_retry=functools.partial(self._log_retry, spec)
            )

        try:
            status, record = await self._converge(spec, call)
        except ProviderError as exc:
            return self._failed(spec, state, exc, attempts)
        except Exception as exc:  # noqa: BLE001
            logger.exception("provisioning.provider_crashed", entity=spec.name)
            wrapped = PermanentProviderError(spec.name, f"Unexpected provider failure: {exc!r}", cause=exc)
            return self._failed(spec, state, wrapped, attempts)

        logger.info(
            "provisioning.entity_applied",
            entity=spec.name,
            kind=spec.kind.value,
            status=status.value,
            resource_id=record.resource_id,
            attempts=attempts,
        )
        if self._audit is not None and status is not EntityStatus.UNCHANGED:
            self._audit.log_change(spec.name, spec.kind.value, status.value, resource_id=record.resource_id)
        return EntityOutcome(spec.name, spec.kind, status, record.resource_id, attempts)

    async def _converge(
        self,
        spec: EntitySpec,
        call: Callable[[Callable[[EntitySpec], Awaitable[Any]]], Awaitable[Any]],
    ) -> tuple[EntityStatus, ProviderRecord]:
        existing: ProviderRecord | None = await call(self._provider.describe)
        if existing is None:
            try:
                return EntityStatus.CREATED, await call(self._provider.create)
            except AlreadyExistsError:
                # created concurrently or by an earlier, interrupted run
                existing = await call(self._provider.describe)
                if existing is None:
                    raise
        if existing.fingerprint == spec.fingerprint():
            return EntityStatus.UNCHANGED, existing
        return EntityStatus.UPDATED, await call(self._provider.update)

    def _failed(
        self,
        spec: EntitySpec,
        state: _RunState,
        exc: ProviderError,
        attempts: int,
    ) -> EntityOutcome:
        state.halted = True
        logger.error(
            "provisioning.entity_failed",
            entity=spec.name,
            kind=spec.kind.value,
            code=exc.code,
            error=exc.message,
            attempts=attempts,
        )
        if self._audit is not None:
            self._audit.log_change(spec.name, spec.kind.value, EntityStatus.FAILED.value, code=exc.code)
        return EntityOutcome(spec.name, spec.kind, EntityStatus.FAILED, attempts=attempts, error=exc)

    def _log_retry(self, spec: EntitySpec, attempt: int, exc: BaseException, delay: float) -> None:
        logger.warning(
            "retry.attempt",
            entity=spec.name,
            attempt=attempt,
            delay=round(delay, 3),
            error=getattr(exc, "message", repr(exc)),
        )

    async def _alert(self, plan: ProvisioningPlan, result: ApplyResult) -> None:
        if self._notifier is None:
            return
        targets: list[tuple[str, str | None]]
        if self._alert_topic is not None:
            spec = plan.graph.entity(self._alert_topic) if self._alert_topic in plan.graph else None
            targets = [(self._alert_topic, spec.properties.get("endpoint") if spec else None)]
        else:
            targets = [
                (e.name, e.properties.get("endpoint"))
                for e in plan.of_kind(EntityKind.ALERT_TOPIC)
                if result.status_of(e.name).succeeded
            ]
        body = "\n".join(
            f"{name}: {err.code} {err.message}" for name, err in result.errors.items()
        )
        for topic, endpoint in targets:
            message = AlertMessage(
                topic=topic,
                subject=f"Provisioning halted: {len(result.failed)} failed, "
                f"{len(result.not_attempted)} not attempted",
                body=body,
                endpoint=endpoint,
                attributes={"failed": result.failed, "not_attempted": result.not_attempted},
            )
            try:
                await self._notifier.publish(message)
            except Exception:  # noqa: BLE001
                logger.exception("provisioning.alert_failed", topic=topic)


__all__ = ["CancellationToken", "ProvisioningOrchestrator", "RetryExecutor"]
