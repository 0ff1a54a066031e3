"""Kernel security – ready-made policy shapes.

:func:`mfa_bootstrap_policy` is how a principal with no second factor
registered gets to register one. It is a narrow, *unconditional* allow for
the registration actions on the caller's own identity. Pairing it with
:func:`mfa_required_policy` (allow only when MFA is present) keeps every
other action implicitly denied until MFA exists, without a blanket
"deny unless MFA" statement that would also block the registration
actions themselves.
"""

from __future__ import annotations

from typing import Iterable

from mp_access.kernel.security.conditions import Condition
from mp_access.kernel.security.context import MFA_PRESENT_KEY
from mp_access.kernel.security.policy import Effect, Policy, Statement

MFA_BOOTSTRAP_ACTIONS: tuple[str, ...] = (
    "iam:CreateVirtualMFADevice",
    "iam:EnableMFADevice",
    "iam:ResyncMFADevice",
    "iam:ListMFADevices",
    "iam:GetUser",
    "iam:ChangePassword",
)

MFA_BOOTSTRAP_RESOURCES: tuple[str, ...] = (
    "arn:aws:iam::*:user/${aws:username}",
    "arn:aws:iam::*:mfa/${aws:username}",
)

ENVIRONMENT_TAG = "environment"


def mfa_bootstrap_policy(
    name: str = "mfa-bootstrap",
    *,
    actions: Iterable[str] = MFA_BOOTSTRAP_ACTIONS,
    resources: Iterable[str] = MFA_BOOTSTRAP_RESOURCES,
) -> Policy:
    return Policy(
        name=name,
        statements=(
            Statement.of(Effect.ALLOW, tuple(actions), tuple(resources), sid="AllowSelfMFABootstrap"),
        ),
        description="Lets a principal manage its own MFA device before MFA is present.",
    )


def mfa_required_policy(
    name: str,
    actions: Iterable[str],
    resources: Iterable[str] = ("*",),
) -> Policy:
    """Allow *actions* only for sessions authenticated with MFA."""
    return Policy(
        name=name,
        statements=(
            Statement.of(
                Effect.ALLOW,
                tuple(actions),
                tuple(resources),
                conditions=(Condition("Bool", MFA_PRESENT_KEY, ("true",)),),
                sid="AllowWithMFA",
            ),
        ),
    )


def environment_scoped_policy(
    name: str,
    actions: Iterable[str],
    environment: str,
    resources: Iterable[str] = ("*",),
    *,
    tag: str = ENVIRONMENT_TAG,
) -> Policy:
    """Allow *actions* only on resources tagged ``<tag>=<environment>``."""
    return Policy(
        name=name,
        statements=(
            Statement.of(
                Effect.ALLOW,
                tuple(actions),
                tuple(resources),
                conditions=(Condition("StringEquals", f"aws:ResourceTag/{tag}", (environment,)),),
                sid=f"Allow{environment.title().replace('-', '')}Only",
            ),
        ),
    )


__all__ = [
    "ENVIRONMENT_TAG",
    "MFA_BOOTSTRAP_ACTIONS",
    "MFA_BOOTSTRAP_RESOURCES",
    "environment_scoped_policy",
    "mfa_bootstrap_policy",
    "mfa_required_policy",
]
