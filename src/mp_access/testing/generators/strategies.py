"""Testing generators – Hypothesis property-based testing strategies.

Requires the ``hypothesis`` package:

    pip install "mp-access[test]"
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hypothesis.strategies import SearchStrategy  # type: ignore[import-untyped]

    from mp_access.application.provisioning import EntitySpec
    from mp_access.kernel.security import Policy, RequestContext, Statement


def _require_hypothesis() -> Any:
    """Lazy import guard – raises a clear error when hypothesis is absent."""
    try:
        import hypothesis.strategies as st  # type: ignore[import-untyped]
        return st
    except ImportError as exc:
        raise ImportError(
            "Install 'hypothesis' to use property-based testing strategies: "
            "pip install hypothesis"
        ) from exc


SERVICES: tuple[str, ...] = ("ec2", "s3", "iam", "logs")
VERBS: tuple[str, ...] = ("Describe", "Start", "Stop", "Get", "Put", "Delete")
PRINCIPALS: tuple[str, ...] = ("dev-1", "dev-2", "ops-1", "auditor")


def action_strategy() -> "SearchStrategy[str]":
    """``service:Verb`` action names drawn from a small vocabulary.

    Example::

        @given(action_strategy())
        def test_action_has_service(action):
            assert ":" in action
    """
    st = _require_hypothesis()
    return st.builds(lambda s, v: f"{s}:{v}", st.sampled_from(SERVICES), st.sampled_from(VERBS))


def resource_strategy() -> "SearchStrategy[str]":
    st = _require_hypothesis()
    return st.builds(
        lambda s, n: f"arn:aws:{s}:::res-{n}",
        st.sampled_from(SERVICES),
        st.integers(min_value=0, max_value=5),
    )


def pattern_for(value: str, shape: str) -> str:
    """Turn a concrete name into a pattern that still covers it."""
    if shape == "wildcard":
        return "*"
    if shape == "prefix":
        return value.split(":", 1)[0] + ":*"
    if shape == "glob":
        return value[:-1] + "?"
    return value


def action_pattern_strategy() -> "SearchStrategy[str]":
    """Exact, prefix, glob or wildcard patterns over :func:`action_strategy`."""
    st = _require_hypothesis()
    return st.builds(
        pattern_for,
        action_strategy(),
        st.sampled_from(("exact", "prefix", "glob", "wildcard")),
    )


def resource_pattern_strategy() -> "SearchStrategy[str]":
    st = _require_hypothesis()
    return st.builds(
        pattern_for,
        resource_strategy(),
        st.sampled_from(("exact", "glob", "wildcard")),
    )


def statement_strategy(effect: str | None = None) -> "SearchStrategy[Statement]":
    """Unconditional statements with one to three action/resource patterns.

    Args:
        effect: ``"Allow"`` or ``"Deny"``; drawn at random when omitted.
    """
    from mp_access.kernel.security import Statement

    st = _require_hypothesis()
    effect_st = st.just(effect) if effect is not None else st.sampled_from(("Allow", "Deny"))
    return st.builds(
        lambda e, a, r: Statement.of(e, a, r),
        effect_st,
        st.lists(action_pattern_strategy(), min_size=1, max_size=3),
        st.lists(resource_pattern_strategy(), min_size=1, max_size=3),
    )


def policy_strategy(name: str = "generated", *, max_statements: int = 6) -> "SearchStrategy[Policy]":
    from mp_access.kernel.security import Policy

    st = _require_hypothesis()
    return st.lists(statement_strategy(), min_size=0, max_size=max_statements).map(
        lambda statements: Policy(name=name, statements=tuple(statements))
    )


def request_strategy() -> "SearchStrategy[tuple[str, str, str]]":
    """``(principal, action, resource)`` triples."""
    st = _require_hypothesis()
    return st.tuples(st.sampled_from(PRINCIPALS), action_strategy(), resource_strategy())


def context_strategy() -> "SearchStrategy[RequestContext]":
    """Request contexts with an optional MFA flag and environment tag."""
    from mp_access.kernel.security import RequestContext

    st = _require_hypothesis()
    return st.builds(
        lambda mfa, env: RequestContext.build(
            tags={"environment": env} if env is not None else None,
            mfa=mfa,
        ),
        st.one_of(st.none(), st.booleans()),
        st.one_of(st.none(), st.sampled_from(("development", "staging", "production"))),
    )


def entity_chain_strategy(max_size: int = 8) -> "SearchStrategy[list[EntitySpec]]":
    """Acyclic entity lists where each entity may depend on earlier ones."""
    from mp_access.application.provisioning import EntityKind, EntitySpec

    st = _require_hypothesis()

    def build(edges: list[list[bool]]) -> list[EntitySpec]:
        specs = []
        for i, row in enumerate(edges):
            deps = tuple(f"e{j}" for j, flag in enumerate(row[:i]) if flag)
            specs.append(EntitySpec(f"e{i}", EntityKind.GROUP, depends_on=deps))
        return specs

    return st.integers(min_value=1, max_value=max_size).flatmap(
        lambda n: st.lists(
            st.lists(st.booleans(), min_size=n, max_size=n), min_size=n, max_size=n
        ).map(build)
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
