"""Config settings – 12-factor env-based configuration."""
from mp_access.config.settings.base import EngineSettings, Settings
from mp_access.config.settings.factory import SettingsFactory
from mp_access.config.settings.loaders import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    SettingsLoader,
    build_settings,
)

__all__ = [
    "DotenvSettingsLoader",
    "EngineSettings",
    "EnvSettingsLoader",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
    "build_settings",
]
