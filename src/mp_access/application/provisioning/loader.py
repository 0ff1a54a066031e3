"""Application provisioning – JSON loaders for target configurations and policy stores.

Target configuration document::

    {
      "version": "2024-06-01",
      "entities": [
        {"name": "developers", "kind": "group"},
        {"name": "dev-1", "kind": "user", "properties": {"groups": ["developers"]}},
        ...
      ]
    }

Policy store document::

    {
      "policies": {"dev-access": {"Version": "2012-10-17", "Statement": [...]}},
      "groups":   {"developers": {"policies": ["dev-access"]}},
      "users":    {"dev-1": {"groups": ["developers"], "policies": []}}
    }
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Union

from mp_access.application.provisioning.entities import EntityKind, TargetConfiguration
from mp_access.kernel.errors import ValidationError
from mp_access.kernel.security import Policy, Principal, PrincipalKind, PolicyStore

Source = Union[str, "os.PathLike[str]", Mapping[str, Any]]


def read_document(source: Source) -> Mapping[str, Any]:
    """Return *source* as a mapping, reading JSON from disk for paths."""
    if isinstance(source, Mapping):
        return source
    path = Path(source)
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(
            f"{path}: invalid JSON at line {exc.lineno}: {exc.msg}",
            errors=[{"file": str(path), "line": exc.lineno}],
        ) from exc
    if not isinstance(doc, dict):
        raise ValidationError(f"{path}: top-level JSON value must be an object")
    return doc


def load_target_configuration(source: Source) -> TargetConfiguration:
    """Parse a target configuration from a JSON file path or a mapping."""
    return TargetConfiguration.from_document(read_document(source))


def _names(body: Mapping[str, Any], key: str) -> tuple[str, ...]:
    """A single name or a list of names, like the ``Action`` field of a policy."""
    value = body.get(key)
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ValidationError(f"'{key}' must be a name or a list of names", errors=[{"field": key}])


def load_policy_store(source: Source) -> PolicyStore:
    """Build a :class:`PolicyStore` from a JSON file path or a mapping."""
    doc = read_document(source)
    policies = [Policy.from_document(name, body) for name, body in (doc.get("policies") or {}).items()]
    principals: list[Principal] = []
    for name, body in (doc.get("groups") or {}).items():
        body = body or {}
        principals.append(
            Principal(name, PrincipalKind.GROUP, policies=_names(body, "policies"))
        )
    for name, body in (doc.get("users") or {}).items():
        body = body or {}
        principals.append(
            Principal(
                name,
                PrincipalKind.USER,
                policies=_names(body, "policies"),
                groups=_names(body, "groups"),
            )
        )
    return PolicyStore.from_parts(principals, policies)


def policy_store_from_configuration(config: TargetConfiguration) -> PolicyStore:
    """Project the identity part of *config* into a :class:`PolicyStore`.

    Lets a configuration be simulated before it is applied. Sink, trail and
    alert entities have no bearing on decisions and are ignored.
    """
    store = PolicyStore()
    for spec in config.of_kind(EntityKind.POLICY):
        store.put_policy(spec.policy())
    for spec in config.of_kind(EntityKind.GROUP):
        store.add_principal(Principal(spec.name, PrincipalKind.GROUP))
    for spec in config.of_kind(EntityKind.USER):
        store.add_principal(Principal(spec.name, PrincipalKind.USER))
    for spec in config.of_kind(EntityKind.USER):
        groups = spec.properties.get("groups") or ()
        for group in [groups] if isinstance(groups, str) else groups:
            store.add_member(spec.name, group)
    for spec in config.of_kind(EntityKind.GROUP_MEMBERSHIP):
        store.add_member(spec.properties["user"], spec.properties["group"])
    for spec in config.of_kind(EntityKind.ATTACHMENT):
        policy_spec = config.get(spec.properties["policy"])
        policy_name = policy_spec.policy().name if policy_spec is not None else spec.properties["policy"]
        store.attach(spec.properties["principal"], policy_name)
    return store


__all__ = [
    "load_policy_store",
    "load_target_configuration",
    "policy_store_from_configuration",
]
