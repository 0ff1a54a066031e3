"""Domain errors – configuration and policy-definition faults.

All of these are fatal and raised before any provider call is made.
"""

from __future__ import annotations

from typing import Any, Iterable

from mp_access.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a declared configuration or policy is structurally invalid."""

    default_code = "domain_error"


class ConfigurationError(DomainError):
    """The target configuration cannot be turned into a deployment plan."""

    default_code = "configuration_error"


class CycleError(ConfigurationError):
    """The deployment graph contains at least one dependency cycle.

    ``nodes`` holds the names of every entity that lies on a cycle, in
    declaration order.
    """

    default_code = "dependency_cycle"

    def __init__(self, nodes: Iterable[str], **kwargs: Any) -> None:
        self.nodes: tuple[str, ...] = tuple(nodes)
        super().__init__(
            f"Dependency cycle between: {', '.join(self.nodes)}",
            detail={"nodes": list(self.nodes)},
            **kwargs,
        )


class DanglingReferenceError(ConfigurationError):
    """An entity references another entity that is not declared."""

    default_code = "dangling_reference"

    def __init__(self, entity: str, reference: str, **kwargs: Any) -> None:
        super().__init__(
            f"Entity '{entity}' references undeclared entity '{reference}'",
            detail={"entity": entity, "reference": reference},
            **kwargs,
        )
        self.entity = entity
        self.reference = reference


class DuplicateNameError(ConfigurationError):
    """Two declarations share the same name."""

    default_code = "duplicate_name"

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(f"Duplicate declaration '{name}'", detail={"name": name}, **kwargs)
        self.name = name


class ConditionEvaluationError(DomainError):
    """A condition cannot be evaluated as declared (raised at load time)."""

    default_code = "condition_evaluation_error"


class UnknownOperatorError(ConditionEvaluationError):
    """A condition names an operator the evaluator does not implement."""

    default_code = "unknown_condition_operator"

    def __init__(self, operator: str, **kwargs: Any) -> None:
        super().__init__(
            f"Unknown condition operator '{operator}'",
            detail={"operator": operator},
            **kwargs,
        )
        self.operator = operator


class ValidationError(DomainError):
    """A policy or entity document does not meet structural rules.

    ``errors`` is a list of field-level validation failures.
    """

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors: list[dict[str, Any]] = errors or []

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.errors
        return base


__all__ = [
    "ConditionEvaluationError",
    "ConfigurationError",
    "CycleError",
    "DanglingReferenceError",
    "DomainError",
    "DuplicateNameError",
    "UnknownOperatorError",
    "ValidationError",
]
