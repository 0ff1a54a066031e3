"""Kernel security – action/resource matchers.

A statement's ``Action`` and ``Resource`` entries are compiled once into
:class:`Matcher` objects so the evaluator never does ad hoc string work.

Matcher kinds:

* :class:`WildcardMatcher` – ``"*"`` matches everything.
* :class:`ExactMatcher` – literal comparison.
* :class:`PrefixMatcher` – a single trailing ``*`` (``"iam:*"``).
* :class:`GlobMatcher` – ``*`` / ``?`` anywhere in the pattern.
* :class:`PrincipalTemplateMatcher` – a pattern containing ``${...}``
  variables that are bound to the requesting principal before matching.
"""

from __future__ import annotations

import abc
import dataclasses
import functools
import re

_TEMPLATE_RE = re.compile(r"\$\{([^}]+)\}")

#: Template variables that resolve to the requesting principal's name.
PRINCIPAL_VARIABLES: frozenset[str] = frozenset({"principal", "aws:username", "username"})


class Matcher(abc.ABC):
    """Decides whether a concrete action or resource string is covered."""

    pattern: str

    @abc.abstractmethod
    def matches(self, value: str, principal: str | None = None) -> bool: ...


@dataclasses.dataclass(frozen=True)
class WildcardMatcher(Matcher):
    pattern: str = "*"

    def matches(self, value: str, principal: str | None = None) -> bool:  # noqa: ARG002
        return True


@dataclasses.dataclass(frozen=True)
class ExactMatcher(Matcher):
    pattern: str

    def matches(self, value: str, principal: str | None = None) -> bool:  # noqa: ARG002
        return value == self.pattern


@dataclasses.dataclass(frozen=True)
class PrefixMatcher(Matcher):
    """``"iam:*"`` matches any value starting with ``"iam:"``."""

    pattern: str

    @property
    def prefix(self) -> str:
        return self.pattern[:-1]

    def matches(self, value: str, principal: str | None = None) -> bool:  # noqa: ARG002
        return value.startswith(self.prefix)


@dataclasses.dataclass(frozen=True)
class GlobMatcher(Matcher):
    """``*`` matches any run of characters, ``?`` exactly one."""

    pattern: str
    _regex: re.Pattern[str] = dataclasses.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_regex", glob_to_regex(self.pattern))

    def matches(self, value: str, principal: str | None = None) -> bool:  # noqa: ARG002
        return self._regex.fullmatch(value) is not None


@dataclasses.dataclass(frozen=True)
class PrincipalTemplateMatcher(Matcher):
    """Binds ``${aws:username}`` (or ``${principal}``) to the caller.

    Unknown variables, or a missing principal, never match. The bound
    name is always literal: a principal called ``a*`` matches only
    ``a*``, never ``admin``.
    """

    pattern: str

    def matches(self, value: str, principal: str | None = None) -> bool:
        if principal is None:
            return False
        regex = template_to_regex(self.pattern, principal)
        if regex is None:
            return False
        return regex.fullmatch(value) is not None


def _glob_source(pattern: str) -> str:
    parts: list[str] = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(_glob_source(pattern), re.DOTALL)


def template_to_regex(pattern: str, principal: str) -> re.Pattern[str] | None:
    """Compile a templated pattern with *principal* bound as literal text.

    Wildcards keep their meaning in the pattern's own text only. Returns
    ``None`` if the pattern uses an unknown variable.
    """
    parts: list[str] = []
    pos = 0
    for match in _TEMPLATE_RE.finditer(pattern):
        if match.group(1) not in PRINCIPAL_VARIABLES:
            return None
        parts.append(_glob_source(pattern[pos : match.start()]))
        parts.append(re.escape(principal))
        pos = match.end()
    parts.append(_glob_source(pattern[pos:]))
    return re.compile("".join(parts), re.DOTALL)


def bind_template(pattern: str, principal: str) -> str | None:
    """Substitute principal variables in *pattern*; ``None`` if any are unknown."""
    unknown = False

    def _sub(match: re.Match[str]) -> str:
        nonlocal unknown
        if match.group(1) in PRINCIPAL_VARIABLES:
            return principal
        unknown = True
        return match.group(0)

    bound = _TEMPLATE_RE.sub(_sub, pattern)
    return None if unknown else bound


@functools.lru_cache(maxsize=1024)
def compile_matcher(pattern: str) -> Matcher:
    """Return the narrowest matcher kind able to express *pattern*."""
    if _TEMPLATE_RE.search(pattern):
        return PrincipalTemplateMatcher(pattern)
    if pattern == "*":
        return WildcardMatcher()
    if "*" not in pattern and "?" not in pattern:
        return ExactMatcher(pattern)
    if pattern.endswith("*") and pattern.count("*") == 1 and "?" not in pattern:
        return PrefixMatcher(pattern)
    return GlobMatcher(pattern)


def any_matches(matchers: tuple[Matcher, ...], value: str, principal: str | None = None) -> bool:
    return any(m.matches(value, principal) for m in matchers)


__all__ = [
    "ExactMatcher",
    "GlobMatcher",
    "Matcher",
    "PRINCIPAL_VARIABLES",
    "PrefixMatcher",
    "PrincipalTemplateMatcher",
    "WildcardMatcher",
    "any_matches",
    "bind_template",
    "compile_matcher",
    "glob_to_regex",
    "template_to_regex",
]
