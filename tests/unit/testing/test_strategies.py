"""Unit tests for the Hypothesis strategies."""

from __future__ import annotations

from hypothesis import given, settings

from mp_access.application.provisioning import DependencyResolver, EntitySpec
from mp_access.kernel.security import Policy, RequestContext, Statement, compile_matcher
from mp_access.testing.generators import (
    action_strategy,
    context_strategy,
    entity_chain_strategy,
    pattern_for,
    policy_strategy,
    request_strategy,
    statement_strategy,
)
from mp_access.testing.generators.strategies import PRINCIPALS


class TestPatternFor:
    def test_shapes(self) -> None:
        assert pattern_for("ec2:StartInstances", "exact") == "ec2:StartInstances"
        assert pattern_for("ec2:StartInstances", "prefix") == "ec2:*"
        assert pattern_for("ec2:StartInstances", "glob") == "ec2:StartInstance?"
        assert pattern_for("ec2:StartInstances", "wildcard") == "*"

    @given(action_strategy())
    def test_every_shape_covers_its_value(self, action: str) -> None:
        for shape in ("exact", "prefix", "glob", "wildcard"):
            assert compile_matcher(pattern_for(action, shape)).matches(action)


class TestStrategies:
    @given(action_strategy())
    def test_actions_are_namespaced(self, action: str) -> None:
        service, verb = action.split(":")
        assert service and verb

    @given(statement_strategy(effect="Deny"))
    def test_statement_effect_pinned(self, statement: Statement) -> None:
        assert statement.effect.value == "Deny"
        assert statement.actions

    @settings(max_examples=50)
    @given(policy_strategy(name="p", max_statements=3))
    def test_policy_size(self, policy: Policy) -> None:
        assert policy.name == "p"
        assert len(policy.statements) <= 3

    @given(request_strategy())
    def test_request_principals(self, request: tuple[str, str, str]) -> None:
        assert request[0] in PRINCIPALS

    @given(context_strategy())
    def test_context(self, ctx: RequestContext) -> None:
        assert isinstance(ctx, RequestContext)

    @settings(max_examples=50, deadline=None)
    @given(entity_chain_strategy(max_size=5))
    def test_entity_chains_are_acyclic(self, entities: list[EntitySpec]) -> None:
        assert 1 <= len(entities) <= 5
        assert len(DependencyResolver().resolve(entities)) == len(entities)
