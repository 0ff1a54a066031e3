"""Config settings – sources of setting values.

A loader reports only the fields its source actually defines, already
coerced to the field types. :class:`~mp_access.config.settings.factory.SettingsFactory`
merges several loaders' values before the settings object is built, so a
field missing from one source never resets a value found in another.
"""
from __future__ import annotations

import abc
import dataclasses
import os
from pathlib import Path
from typing import Any, Mapping, TypeVar

from dotenv import dotenv_values

from mp_access.config.settings.base import Settings
from mp_access.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

T = TypeVar("T", bound=Settings)

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def env_key(settings_class: type[Settings], field_name: str) -> str:
    """``MP_ACCESS`` + ``max_attempts`` -> ``MP_ACCESS_MAX_ATTEMPTS``."""
    prefix = getattr(settings_class, "_prefix", "")
    return f"{prefix}_{field_name}".upper() if prefix else field_name.upper()


def coerce(raw: str, type_hint: Any) -> Any:
    """Convert an environment string to the annotated field type.

    Handles ``bool``, ``int``, ``float``, comma-separated ``list[str]`` and
    their ``| None`` forms; anything else stays a string.
    """
    name = type_hint if isinstance(type_hint, str) else getattr(type_hint, "__name__", str(type_hint))
    name = name.replace(" ", "").removesuffix("|None")
    if name == "bool":
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"expected a boolean, got {raw!r}")
    if name == "int":
        return int(raw)
    if name == "float":
        return float(raw)
    if name.startswith("list"):
        return [v.strip() for v in raw.split(",") if v.strip()]
    return raw


def build_settings(settings_class: type[T], values: Mapping[str, Any]) -> T:
    """Instantiate *settings_class* from merged *values*.

    Raises
    ------
    MissingRequiredSettingError
        A field without a default has no value.
    InvalidSettingValueError
        The settings' own validation rejected a value.
    ConfigError
        Any other construction failure (e.g. an unknown field name).
    """
    for field in dataclasses.fields(settings_class):  # type: ignore[arg-type]
        required = field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING
        if required and field.name not in values:
            raise MissingRequiredSettingError(env_key(settings_class, field.name))
    try:
        return settings_class(**values)
    except ConfigError:
        raise
    except Exception as exc:
        raise ConfigError(f"Failed to construct {settings_class.__name__}: {exc}", cause=exc) from exc


class SettingsLoader(abc.ABC):
    """Port: one source of setting values."""

    @abc.abstractmethod
    def values(self, settings_class: type[Settings]) -> dict[str, Any]:
        """Coerced values for the fields this source defines."""

    def load(self, settings_class: type[T]) -> T:
        return build_settings(settings_class, self.values(settings_class))


class EnvSettingsLoader(SettingsLoader):
    """Read ``<PREFIX>_<FIELD>`` variables from the process environment.

    An explicit *environ* mapping replaces ``os.environ``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def values(self, settings_class: type[Settings]) -> dict[str, Any]:
        environ = os.environ if self._environ is None else self._environ
        out: dict[str, Any] = {}
        for field in dataclasses.fields(settings_class):  # type: ignore[arg-type]
            key = env_key(settings_class, field.name)
            raw = environ.get(key)
            if raw is None:
                continue
            try:
                out[field.name] = coerce(raw, field.type)
            except ValueError as exc:
                raise InvalidSettingValueError(key, raw, str(exc)) from exc
        return out


class DotenvSettingsLoader(SettingsLoader):
    """Read a ``.env`` file layered under the process environment.

    The file is parsed with :func:`dotenv.dotenv_values` and never written
    into ``os.environ``. Real environment variables win unless *override*
    is set.
    """

    def __init__(
        self,
        env_file: str | os.PathLike[str] = ".env",
        *,
        override: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._env_file = Path(env_file)
        self._override = override
        self._environ = environ

    def values(self, settings_class: type[Settings]) -> dict[str, Any]:
        if not self._env_file.is_file():
            raise ConfigError(
                f"Env file '{self._env_file}' does not exist",
                detail={"env_file": str(self._env_file)},
            )
        from_file = {k: v for k, v in dotenv_values(self._env_file).items() if v is not None}
        environ = dict(os.environ if self._environ is None else self._environ)
        layered = {**environ, **from_file} if self._override else {**from_file, **environ}
        return EnvSettingsLoader(layered).values(settings_class)


__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "SettingsLoader",
    "build_settings",
    "coerce",
    "env_key",
]
