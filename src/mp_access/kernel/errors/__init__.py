"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError                  (domain.py)
    │   ├── ConfigurationError
    │   │   ├── CycleError
    │   │   ├── DanglingReferenceError
    │   │   └── DuplicateNameError
    │   ├── ConditionEvaluationError
    │   │   └── UnknownOperatorError
    │   └── ValidationError
    ├── ApplicationError             (application.py)
    │   └── TimeoutError
    └── InfrastructureError          (infrastructure.py)
        └── ProviderError
            ├── TransientProviderError
            └── PermanentProviderError
                ├── AlreadyExistsError
                ├── InvalidReferenceError
                └── PermissionDeniedError
"""

from mp_access.kernel.errors.application import ApplicationError, TimeoutError
from mp_access.kernel.errors.base import BaseError
from mp_access.kernel.errors.domain import (
    ConditionEvaluationError,
    ConfigurationError,
    CycleError,
    DanglingReferenceError,
    DomainError,
    DuplicateNameError,
    UnknownOperatorError,
    ValidationError,
)
from mp_access.kernel.errors.infrastructure import (
    AlreadyExistsError,
    InfrastructureError,
    InvalidReferenceError,
    PermanentProviderError,
    PermissionDeniedError,
    ProviderError,
    TransientProviderError,
)

__all__ = [
    "AlreadyExistsError",
    "ApplicationError",
    "BaseError",
    "ConditionEvaluationError",
    "ConfigurationError",
    "CycleError",
    "DanglingReferenceError",
    "DomainError",
    "DuplicateNameError",
    "InfrastructureError",
    "InvalidReferenceError",
    "PermanentProviderError",
    "PermissionDeniedError",
    "ProviderError",
    "TimeoutError",
    "TransientProviderError",
    "UnknownOperatorError",
    "ValidationError",
]
