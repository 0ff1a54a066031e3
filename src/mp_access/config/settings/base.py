"""Config settings – Settings base class and EngineSettings."""
from __future__ import annotations

import dataclasses
import logging
from typing import ClassVar

from mp_access.config.validation import InvalidSettingValueError

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class EngineSettings(Settings):
    """Tunables of the provisioning engine.

    Read from ``MP_ACCESS_*`` environment variables, e.g.
    ``MP_ACCESS_MAX_CONCURRENCY=8``.
    """

    _prefix: ClassVar[str] = "MP_ACCESS"

    max_concurrency: int = 4
    max_attempts: int = 3
    retry_base_delay: float = 0.2
    retry_max_delay: float = 5.0
    provider_timeout: float = 30.0
    log_level: str = "INFO"
    log_json: bool = True

    def _validate(self) -> None:
        if self.max_concurrency < 1:
            raise InvalidSettingValueError("max_concurrency", self.max_concurrency, "must be >= 1")
        if self.max_attempts < 1:
            raise InvalidSettingValueError("max_attempts", self.max_attempts, "must be >= 1")
        if self.retry_base_delay < 0:
            raise InvalidSettingValueError("retry_base_delay", self.retry_base_delay, "must be >= 0")
        if self.retry_max_delay < self.retry_base_delay:
            raise InvalidSettingValueError(
                "retry_max_delay", self.retry_max_delay, "must be >= retry_base_delay"
            )
        if self.provider_timeout < 0:
            raise InvalidSettingValueError("provider_timeout", self.provider_timeout, "must be >= 0")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise InvalidSettingValueError(
                "log_level", self.log_level, f"must be one of {sorted(_LOG_LEVELS)}"
            )

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level.upper())


__all__ = ["EngineSettings", "Settings"]
