"""Config – 12-factor engine settings and loaders."""

from mp_access.config.settings import (
    DotenvSettingsLoader,
    EngineSettings,
    EnvSettingsLoader,
    Settings,
    SettingsFactory,
    SettingsLoader,
)
from mp_access.config.validation import ConfigError, InvalidSettingValueError, MissingRequiredSettingError


def load_engine_settings(env_file: str | None = None, **overrides: object) -> EngineSettings:
    """Environment (layered over an optional ``.env`` file) plus *overrides*.

    Unlike a bare :meth:`SettingsFactory.create`, any source error
    (a missing env file, an uncoercible variable) is raised.
    """
    loaders: list[SettingsLoader] = [EnvSettingsLoader()]
    if env_file is not None:
        loaders.insert(0, DotenvSettingsLoader(env_file))
    return SettingsFactory.create(EngineSettings, loaders, overrides, strict=True)


__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EngineSettings",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
    "load_engine_settings",
]
