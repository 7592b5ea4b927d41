"""
Environment-backed configuration for the lifecycle runtime.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from lifecycle_host.lifecycle_host import logger as app_logger
from lifecycle_host.lifecycle_host.logger import DEFAULT_LOG_PATH

from .metrics_store import DEFAULT_METRICS_PATH

_LOGGER = app_logger.get_logger()

_ENV_PREFIX = "APP_LIFECYCLE_"
_MIN_RETENTION_DAYS = 1
_MAX_RETENTION_DAYS = 90
_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(eq=True)
class LifecycleSettings:
    diagnostics_enabled: bool = True
    log_level: str = "INFO"
    log_path: Path = field(default_factory=lambda: DEFAULT_LOG_PATH)
    metrics_path: Path = field(default_factory=lambda: DEFAULT_METRICS_PATH)
    metrics_retention_days: int = 30


class LifecycleSettingsManager:
    """Loads settings from ``APP_LIFECYCLE_*`` variables and clamps invalid data."""

    def __init__(self, *, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = os.environ if environ is None else environ

    def read_settings(self) -> LifecycleSettings:
        defaults = LifecycleSettings()
        return LifecycleSettings(
            diagnostics_enabled=self._read_bool("DIAGNOSTICS_ENABLED", defaults.diagnostics_enabled),
            log_level=self._read_log_level(defaults.log_level),
            log_path=self._read_path("LOG_PATH", defaults.log_path),
            metrics_path=self._read_path("METRICS_PATH", defaults.metrics_path),
            metrics_retention_days=self._read_retention(defaults.metrics_retention_days),
        )

    def _raw(self, name: str) -> Optional[str]:
        value = self._environ.get(_ENV_PREFIX + name)
        if value is None or not value.strip():
            return None
        return value.strip()

    def _read_bool(self, name: str, default: bool) -> bool:
        raw = self._raw(name)
        if raw is None:
            return default
        lowered = raw.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        _LOGGER.warning("Ignoring unrecognised boolean {}={!r}.", _ENV_PREFIX + name, raw)
        return default

    def _read_log_level(self, default: str) -> str:
        raw = self._raw("LOG_LEVEL")
        if raw is None:
            return default
        level = raw.upper()
        if level not in _LOG_LEVELS:
            _LOGGER.warning("Unknown log level {!r}; using {}.", raw, default)
            return default
        return level

    def _read_path(self, name: str, default: Path) -> Path:
        raw = self._raw(name)
        if raw is None:
            return default
        return Path(raw).expanduser()

    def _read_retention(self, default: int) -> int:
        raw = self._raw("METRICS_RETENTION_DAYS")
        if raw is None:
            return default
        try:
            value = int(raw)
        except ValueError:
            _LOGGER.warning("Metrics retention {!r} is not an integer; using {}.", raw, default)
            return default
        if value < _MIN_RETENTION_DAYS or value > _MAX_RETENTION_DAYS:
            _LOGGER.warning(
                "Metrics retention {} out of range. Clamping to safe bounds.",
                value,
            )
        return max(_MIN_RETENTION_DAYS, min(_MAX_RETENTION_DAYS, value))
