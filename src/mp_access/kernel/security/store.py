"""Kernel security – PolicyStore and immutable PolicySnapshot.

The store is the single writer of principal and policy data. Readers never
see it directly: :meth:`PolicyStore.snapshot` hands out an immutable,
versioned :class:`PolicySnapshot`. Every mutation bumps the version and
produces a fresh snapshot on next request; snapshots already handed out
never change, so concurrent evaluations can never observe a torn update.
"""

from __future__ import annotations

import dataclasses
import threading
from types import MappingProxyType
from typing import Iterable, Mapping

from mp_access.kernel.errors import (
    ConfigurationError,
    DanglingReferenceError,
    DuplicateNameError,
    ValidationError,
)
from mp_access.kernel.security.policy import Policy, Statement
from mp_access.kernel.security.principal import Principal, PrincipalKind


@dataclasses.dataclass(frozen=True)
class BoundStatement:
    """A statement together with the policy (and position) it came from."""

    policy: str
    index: int
    statement: Statement

    @property
    def label(self) -> str:
        return f"{self.policy}#{self.statement.sid or self.index}"


@dataclasses.dataclass(frozen=True)
class PolicySnapshot:
    """Read-only view of principals and policies at one ``version``."""

    version: int
    principals: Mapping[str, Principal]
    policies: Mapping[str, Policy]

    @classmethod
    def empty(cls) -> "PolicySnapshot":
        return cls(0, MappingProxyType({}), MappingProxyType({}))

    def principal(self, name: str) -> Principal | None:
        return self.principals.get(name)

    def effective_policies(self, principal: str) -> tuple[Policy, ...]:
        """Direct policies first, then each group's, without duplicates.

        Unknown principals have no policies.
        """
        p = self.principals.get(principal)
        if p is None:
            return ()
        names: list[str] = list(p.policies)
        if p.kind is PrincipalKind.USER:
            for group_name in p.groups:
                group = self.principals.get(group_name)
                if group is not None:
                    names.extend(group.policies)
        seen: set[str] = set()
        result: list[Policy] = []
        for name in names:
            if name in seen or name not in self.policies:
                continue
            seen.add(name)
            result.append(self.policies[name])
        return tuple(result)

    def bound_statements_for(self, principal: str) -> tuple[BoundStatement, ...]:
        return tuple(
            BoundStatement(policy.name, idx, stmt)
            for policy in self.effective_policies(principal)
            for idx, stmt in enumerate(policy.statements)
        )

    def statements_for(self, principal: str) -> tuple[Statement, ...]:
        """Union of statements from direct and group-attached policies.

        Order within a policy is preserved for diagnostics only; evaluation
        does not depend on it.
        """
        return tuple(b.statement for b in self.bound_statements_for(principal))


class PolicyStore:
    """Mutable registry of principals and policies.

    Example::

        store = PolicyStore()
        store.add_principal(Principal("developers", PrincipalKind.GROUP))
        store.add_principal(Principal("dev-1"))
        store.add_member("dev-1", "developers")
        store.attach("developers", dev_policy)
        snapshot = store.snapshot()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._principals: dict[str, Principal] = {}
        self._policies: dict[str, Policy] = {}
        self._version = 0
        self._snapshot: PolicySnapshot | None = None

    # ------------------------------------------------------------------
    # Principals
    # ------------------------------------------------------------------

    def add_principal(self, principal: Principal) -> Principal:
        with self._lock:
            if principal.name in self._principals:
                raise DuplicateNameError(principal.name)
            for ref in principal.policies:
                if ref not in self._policies:
                    raise DanglingReferenceError(principal.name, ref)
            for group in principal.groups:
                self._require_group(principal.name, group)
            self._principals[principal.name] = principal
            self._touch()
            return principal

    def remove_principal(self, name: str) -> None:
        """Explicitly remove a principal; users lose membership of a removed group."""
        with self._lock:
            removed = self._require_principal(name)
            del self._principals[name]
            if removed.is_group:
                for user_name, user in list(self._principals.items()):
                    if name in user.groups:
                        self._principals[user_name] = user.without_group(name)
            self._touch()

    def add_member(self, user: str, group: str) -> None:
        with self._lock:
            u = self._require_principal(user)
            if u.is_group:
                raise ValidationError(
                    f"'{user}' is a group; groups cannot be members of groups",
                    errors=[{"principal": user, "kind": u.kind.value}],
                )
            self._require_group(user, group)
            self._principals[user] = u.with_group(group)
            self._touch()

    def remove_member(self, user: str, group: str) -> None:
        with self._lock:
            u = self._require_principal(user)
            self._principals[user] = u.without_group(group)
            self._touch()

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def put_policy(self, policy: Policy) -> Policy:
        """Create or replace *policy* wholesale."""
        with self._lock:
            self._policies[policy.name] = policy
            self._touch()
            return policy

    def remove_policy(self, name: str) -> None:
        with self._lock:
            if name not in self._policies:
                raise DanglingReferenceError("<store>", name)
            holders = [p.name for p in self._principals.values() if name in p.policies]
            if holders:
                raise ConfigurationError(
                    f"Policy '{name}' is still attached to: {', '.join(holders)}",
                    detail={"policy": name, "principals": holders},
                )
            del self._policies[name]
            self._touch()

    def attach(self, principal: str, policy: Policy | str) -> None:
        """Attach *policy* to *principal*.

        Passing a :class:`Policy` stores (or replaces) it first; passing a
        name requires the policy to already exist.
        """
        with self._lock:
            p = self._require_principal(principal)
            if isinstance(policy, Policy):
                self._policies[policy.name] = policy
                name = policy.name
            else:
                name = policy
                if name not in self._policies:
                    raise DanglingReferenceError(principal, name)
            self._principals[principal] = p.with_policy(name)
            self._touch()

    def detach(self, principal: str, policy_name: str) -> None:
        with self._lock:
            p = self._require_principal(principal)
            self._principals[principal] = p.without_policy(policy_name)
            self._touch()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> PolicySnapshot:
        with self._lock:
            if self._snapshot is None:
                self._snapshot = PolicySnapshot(
                    version=self._version,
                    principals=MappingProxyType(dict(self._principals)),
                    policies=MappingProxyType(dict(self._policies)),
                )
            return self._snapshot

    def statements_for(self, principal: str) -> tuple[Statement, ...]:
        return self.snapshot().statements_for(principal)

    def principals(self) -> list[Principal]:
        return list(self.snapshot().principals.values())

    def policies(self) -> list[Policy]:
        return list(self.snapshot().policies.values())

    @classmethod
    def from_parts(
        cls,
        principals: Iterable[Principal] = (),
        policies: Iterable[Policy] = (),
    ) -> "PolicyStore":
        """Build a store in dependency order: policies, groups, then users."""
        store = cls()
        for policy in policies:
            store.put_policy(policy)
        ordered = sorted(principals, key=lambda p: 0 if p.is_group else 1)
        for principal in ordered:
            store.add_principal(principal)
        return store

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _touch(self) -> None:
        self._version += 1
        self._snapshot = None

    def _require_principal(self, name: str) -> Principal:
        try:
            return self._principals[name]
        except KeyError:
            raise DanglingReferenceError("<store>", name) from None

    def _require_group(self, owner: str, group: str) -> Principal:
        g = self._principals.get(group)
        if g is None:
            raise DanglingReferenceError(owner, group)
        if not g.is_group:
            raise ValidationError(
                f"'{group}' is not a group",
                errors=[{"principal": group, "kind": g.kind.value}],
            )
        return g


__all__ = ["BoundStatement", "PolicySnapshot", "PolicyStore"]
