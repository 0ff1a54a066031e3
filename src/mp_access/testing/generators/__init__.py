"""Testing generators – Hypothesis strategies for policies, requests and entity graphs."""
from mp_access.testing.generators.strategies import (
    action_pattern_strategy,
    action_strategy,
    context_strategy,
    entity_chain_strategy,
    pattern_for,
    policy_strategy,
    request_strategy,
    resource_pattern_strategy,
    resource_strategy,
    statement_strategy,
)

__all__ = [
    "action_pattern_strategy",
    "action_strategy",
    "context_strategy",
    "entity_chain_strategy",
    "pattern_for",
    "policy_strategy",
    "request_strategy",
    "resource_pattern_strategy",
    "resource_strategy",
    "statement_strategy",
]
