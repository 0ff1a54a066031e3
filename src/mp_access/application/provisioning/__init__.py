"""Application provisioning – dependency-ordered, idempotent provisioning."""
from mp_access.application.provisioning.entities import (
    EntityKind,
    EntitySpec,
    REFERENCE_PROPERTIES,
    REQUIRED_PROPERTIES,
    TargetConfiguration,
)
from mp_access.application.provisioning.graph import DeploymentGraph
from mp_access.application.provisioning.loader import (
    load_policy_store,
    load_target_configuration,
    policy_store_from_configuration,
)
from mp_access.application.provisioning.orchestrator import (
    CancellationToken,
    ProvisioningOrchestrator,
    RetryExecutor,
)
from mp_access.application.provisioning.plan import (
    ApplyResult,
    EntityOutcome,
    EntityStatus,
    PlanDiff,
    ProvisioningPlan,
)
from mp_access.application.provisioning.provider import IdentityProvider, ProviderRecord
from mp_access.application.provisioning.resolver import DependencyResolver

__all__ = [
    "ApplyResult",
    "CancellationToken",
    "DependencyResolver",
    "DeploymentGraph",
    "EntityKind",
    "EntityOutcome",
    "EntitySpec",
    "EntityStatus",
    "IdentityProvider",
    "PlanDiff",
    "ProviderRecord",
    "ProvisioningOrchestrator",
    "ProvisioningPlan",
    "REFERENCE_PROPERTIES",
    "REQUIRED_PROPERTIES",
    "RetryExecutor",
    "TargetConfiguration",
    "load_policy_store",
    "load_target_configuration",
    "policy_store_from_configuration",
]
