"""Infrastructure errors – failures reported by the identity provider."""

from __future__ import annotations

from typing import Any

from mp_access.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a configuration fault."""

    default_code = "infrastructure_error"


class ProviderError(InfrastructureError):
    """The identity provider rejected or failed an entity operation.

    ``retryable`` tells the orchestrator whether backing off and trying
    again may succeed.
    """

    default_code = "provider_error"

    def __init__(
        self,
        entity: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Provider failed on entity '{entity}'", **kwargs)
        self.entity = entity
        self.detail.setdefault("entity", entity)


class TransientProviderError(ProviderError):
    """Throttling, timeouts, 5xx; safe to retry with backoff."""

    default_code = "provider_transient"
    retryable = True


class PermanentProviderError(ProviderError):
    """A failure that retrying cannot fix; the remaining plan is aborted."""

    default_code = "provider_permanent"


class AlreadyExistsError(PermanentProviderError):
    """The entity already exists under the same name."""

    default_code = "already_exists"


class InvalidReferenceError(PermanentProviderError):
    """The entity references a resource the provider does not know."""

    default_code = "invalid_reference"

    def __init__(self, entity: str, reference: str, **kwargs: Any) -> None:
        super().__init__(
            entity,
            f"Entity '{entity}' references missing resource '{reference}'",
            **kwargs,
        )
        self.reference = reference
        self.detail["reference"] = reference


class PermissionDeniedError(PermanentProviderError):
    """The provisioning identity is not allowed to perform the operation."""

    default_code = "permission_denied"


__all__ = [
    "AlreadyExistsError",
    "InfrastructureError",
    "InvalidReferenceError",
    "PermanentProviderError",
    "PermissionDeniedError",
    "ProviderError",
    "TransientProviderError",
]
