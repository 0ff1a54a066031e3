"""
mp_access – declarative access-control provisioning and policy evaluation.

Import path convention::

    from mp_access.kernel.security import PolicyEvaluator, PolicyStore, Statement
    from mp_access.application.provisioning import DependencyResolver, ProvisioningOrchestrator
    from mp_access.config import EngineSettings
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
