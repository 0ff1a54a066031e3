"""Kernel security – policy model, condition and policy evaluation, access events."""
from mp_access.kernel.security.audit import AccessEvent, AccessEventSink, InMemoryAccessEventSink
from mp_access.kernel.security.conditions import Condition, ConditionEvaluator, supported_operators
from mp_access.kernel.security.context import MFA_PRESENT_KEY, MISSING, RequestContext
from mp_access.kernel.security.evaluator import EvaluationResult, PolicyEvaluator
from mp_access.kernel.security.matchers import (
    ExactMatcher,
    GlobMatcher,
    Matcher,
    PrefixMatcher,
    PrincipalTemplateMatcher,
    WildcardMatcher,
    compile_matcher,
)
from mp_access.kernel.security.policy import Decision, Effect, Policy, Statement
from mp_access.kernel.security.principal import Principal, PrincipalKind
from mp_access.kernel.security.store import BoundStatement, PolicySnapshot, PolicyStore
from mp_access.kernel.security.templates import (
    environment_scoped_policy,
    mfa_bootstrap_policy,
    mfa_required_policy,
)

__all__ = [
    "AccessEvent",
    "AccessEventSink",
    "BoundStatement",
    "Condition",
    "ConditionEvaluator",
    "Decision",
    "Effect",
    "EvaluationResult",
    "ExactMatcher",
    "GlobMatcher",
    "InMemoryAccessEventSink",
    "MFA_PRESENT_KEY",
    "MISSING",
    "Matcher",
    "Policy",
    "PolicyEvaluator",
    "PolicySnapshot",
    "PolicyStore",
    "PrefixMatcher",
    "Principal",
    "PrincipalKind",
    "PrincipalTemplateMatcher",
    "RequestContext",
    "Statement",
    "WildcardMatcher",
    "compile_matcher",
    "environment_scoped_policy",
    "mfa_bootstrap_policy",
    "mfa_required_policy",
    "supported_operators",
]
