"""Unit tests for PolicyStore, PolicySnapshot and Principal."""

from __future__ import annotations

import threading

import pytest

from mp_access.kernel.errors import ConfigurationError, DanglingReferenceError, DuplicateNameError, ValidationError
from mp_access.kernel.security import Policy, PolicyStore, Principal, PrincipalKind, Statement


def _policy(name: str, action: str = "*") -> Policy:
    return Policy(name, (Statement.of("Allow", action),))


def _store() -> PolicyStore:
    store = PolicyStore()
    store.add_principal(Principal("developers", PrincipalKind.GROUP))
    store.add_principal(Principal("ops", PrincipalKind.GROUP))
    store.add_principal(Principal("dev-1"))
    return store


# ---------------------------------------------------------------------------
# Principals and membership
# ---------------------------------------------------------------------------


class TestPrincipals:
    def test_duplicate_principal_rejected(self) -> None:
        store = _store()
        with pytest.raises(DuplicateNameError):
            store.add_principal(Principal("dev-1"))

    def test_principal_with_unknown_policy_rejected(self) -> None:
        with pytest.raises(DanglingReferenceError):
            PolicyStore().add_principal(Principal("dev-1", policies=("missing",)))

    def test_member_of_unknown_group_rejected(self) -> None:
        store = _store()
        with pytest.raises(DanglingReferenceError):
            store.add_member("dev-1", "nope")

    def test_membership_target_must_be_group(self) -> None:
        store = _store()
        store.add_principal(Principal("dev-2"))
        with pytest.raises(ValidationError):
            store.add_member("dev-1", "dev-2")

    def test_groups_do_not_nest(self) -> None:
        store = _store()
        with pytest.raises(ValidationError):
            store.add_member("developers", "ops")

    def test_removing_group_drops_membership(self) -> None:
        store = _store()
        store.add_member("dev-1", "developers")
        store.remove_principal("developers")
        assert store.snapshot().principal("dev-1").groups == ()

    def test_remove_member(self) -> None:
        store = _store()
        store.add_member("dev-1", "developers")
        store.remove_member("dev-1", "developers")
        assert store.snapshot().principal("dev-1").groups == ()

    def test_principal_helpers_are_idempotent(self) -> None:
        p = Principal("dev-1").with_policy("a").with_policy("a").with_group("g").with_group("g")
        assert p.policies == ("a",)
        assert p.groups == ("g",)
        assert str(p) == "dev-1"


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------


class TestPolicies:
    def test_effective_policies_union_of_direct_and_group(self) -> None:
        store = _store()
        store.add_member("dev-1", "developers")
        store.add_member("dev-1", "ops")
        store.attach("dev-1", _policy("own"))
        store.attach("developers", _policy("dev"))
        store.attach("ops", _policy("ops"))
        store.attach("ops", "dev")
        names = [p.name for p in store.snapshot().effective_policies("dev-1")]
        assert names == ["own", "dev", "ops"]

    def test_policy_shared_by_reference(self) -> None:
        store = _store()
        shared = _policy("shared")
        store.attach("developers", shared)
        store.attach("ops", "shared")
        snap = store.snapshot()
        assert snap.effective_policies("developers")[0] is snap.effective_policies("ops")[0]

    def test_put_policy_replaces_statements_wholesale(self) -> None:
        store = _store()
        store.attach("dev-1", Policy("p", (Statement.of("Allow", "ec2:*"), Statement.of("Allow", "s3:*"))))
        store.put_policy(Policy("p", (Statement.of("Allow", "iam:*"),)))
        statements = store.statements_for("dev-1")
        assert len(statements) == 1
        assert statements[0].actions[0].pattern == "iam:*"

    def test_attach_by_unknown_name_rejected(self) -> None:
        with pytest.raises(DanglingReferenceError):
            _store().attach("dev-1", "missing")

    def test_detach(self) -> None:
        store = _store()
        store.attach("dev-1", _policy("p"))
        store.detach("dev-1", "p")
        assert store.statements_for("dev-1") == ()

    def test_remove_attached_policy_refused(self) -> None:
        store = _store()
        store.attach("dev-1", _policy("p"))
        with pytest.raises(ConfigurationError) as info:
            store.remove_policy("p")
        assert info.value.detail["principals"] == ["dev-1"]

    def test_remove_detached_policy(self) -> None:
        store = _store()
        store.put_policy(_policy("p"))
        store.remove_policy("p")
        assert store.policies() == []

    def test_from_parts_orders_groups_before_users(self) -> None:
        store = PolicyStore.from_parts(
            [Principal("dev-1", groups=("developers",)), Principal("developers", PrincipalKind.GROUP, ("p",))],
            [_policy("p")],
        )
        assert [p.name for p in store.snapshot().effective_policies("dev-1")] == ["p"]


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


class TestSnapshots:
    def test_version_increases_on_every_mutation(self) -> None:
        store = PolicyStore()
        versions = [store.version]
        store.add_principal(Principal("dev-1"))
        versions.append(store.version)
        store.put_policy(_policy("p"))
        versions.append(store.version)
        store.attach("dev-1", "p")
        versions.append(store.version)
        assert versions == sorted(set(versions))

    def test_snapshot_cached_until_mutation(self) -> None:
        store = _store()
        first = store.snapshot()
        assert store.snapshot() is first
        store.put_policy(_policy("p"))
        second = store.snapshot()
        assert second is not first
        assert second.version > first.version

    def test_snapshot_is_immutable(self) -> None:
        snap = _store().snapshot()
        with pytest.raises(TypeError):
            snap.principals["x"] = Principal("x")  # type: ignore[index]

    def test_old_snapshot_unchanged_after_mutation(self) -> None:
        store = _store()
        before = store.snapshot()
        store.attach("dev-1", _policy("p"))
        assert before.statements_for("dev-1") == ()
        assert len(store.snapshot().statements_for("dev-1")) == 1

    def test_concurrent_mutations_keep_every_version(self) -> None:
        store = PolicyStore()

        def worker(n: int) -> None:
            for i in range(50):
                store.put_policy(_policy(f"p-{n}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert store.version == 200
        assert len(store.snapshot().policies) == 200

    def test_bound_statement_labels(self) -> None:
        store = _store()
        store.attach(
            "dev-1",
            Policy("p", (Statement.of("Allow", "a:*", sid="First"), Statement.of("Allow", "b:*"))),
        )
        labels = [b.label for b in store.snapshot().bound_statements_for("dev-1")]
        assert labels == ["p#First", "p#1"]
