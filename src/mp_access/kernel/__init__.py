"""Kernel – framework-agnostic policy model, evaluation and error hierarchy."""

from mp_access.kernel.errors import (
    ApplicationError,
    BaseError,
    ConditionEvaluationError,
    ConfigurationError,
    CycleError,
    DomainError,
    InfrastructureError,
    PermanentProviderError,
    ProviderError,
    TransientProviderError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConditionEvaluationError",
    "ConfigurationError",
    "CycleError",
    "DomainError",
    "InfrastructureError",
    "PermanentProviderError",
    "ProviderError",
    "TransientProviderError",
]
