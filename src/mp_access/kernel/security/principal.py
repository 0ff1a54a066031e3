"""Kernel security – Principal, PrincipalKind."""
from __future__ import annotations

import dataclasses
from enum import Enum


class PrincipalKind(str, Enum):
    USER = "user"
    GROUP = "group"


@dataclasses.dataclass(frozen=True)
class Principal:
    """A user or group identity.

    ``policies`` are names of attached policies (shared, never copied).
    ``groups`` is only meaningful for users; groups do not nest.
    """

    name: str
    kind: PrincipalKind = PrincipalKind.USER
    policies: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()

    @property
    def is_group(self) -> bool:
        return self.kind is PrincipalKind.GROUP

    def with_policy(self, policy_name: str) -> "Principal":
        if policy_name in self.policies:
            return self
        return dataclasses.replace(self, policies=self.policies + (policy_name,))

    def without_policy(self, policy_name: str) -> "Principal":
        return dataclasses.replace(
            self, policies=tuple(p for p in self.policies if p != policy_name)
        )

    def with_group(self, group_name: str) -> "Principal":
        if group_name in self.groups:
            return self
        return dataclasses.replace(self, groups=self.groups + (group_name,))

    def without_group(self, group_name: str) -> "Principal":
        return dataclasses.replace(self, groups=tuple(g for g in self.groups if g != group_name))

    def __str__(self) -> str:
        return self.name


__all__ = ["Principal", "PrincipalKind"]
