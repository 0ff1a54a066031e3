"""Config settings – SettingsFactory."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence, TypeVar

from mp_access.config.settings.base import Settings
from mp_access.config.settings.loaders import SettingsLoader, build_settings
from mp_access.config.validation.errors import ConfigError

T = TypeVar("T", bound=Settings)
logger = logging.getLogger(__name__)


class SettingsFactory:
    """Layer several setting sources into one settings object.

    Sources are merged in order, later ones winning per field, and
    *overrides* win over every source.

    With ``strict=False`` a source that raises :class:`ConfigError` is
    logged and skipped, and the remaining sources still contribute. With
    ``strict=True`` the first such error propagates.
    """

    @staticmethod
    def merge(
        settings_cls: type[Settings],
        loaders: Sequence[SettingsLoader],
        *,
        strict: bool = False,
    ) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for loader in loaders:
            source = type(loader).__name__
            try:
                values = loader.values(settings_cls)
            except ConfigError as exc:
                if strict:
                    raise
                logger.warning("settings source skipped source=%s error=%s", source, exc.message)
                continue
            logger.debug("settings source loaded source=%s fields=%s", source, sorted(values))
            merged.update(values)
        return merged

    @staticmethod
    def create(
        settings_cls: type[T],
        loaders: Sequence[SettingsLoader] | None = None,
        overrides: Mapping[str, Any] | None = None,
        *,
        strict: bool = False,
    ) -> T:
        """Merge *loaders* and *overrides*, then build *settings_cls*.

        Raises the errors of
        :func:`~mp_access.config.settings.loaders.build_settings`.
        """
        merged = SettingsFactory.merge(settings_cls, loaders or [], strict=strict)
        if overrides:
            merged.update(overrides)
        return build_settings(settings_cls, merged)


__all__ = ["SettingsFactory"]
