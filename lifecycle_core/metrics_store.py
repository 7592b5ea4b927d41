"""
Daily aggregated counters persisted to a JSON file.

Each counter is keyed by UTC day, pixel name, and its parameters. The first
fire of a key on a given day is the "daily" fire; every fire is counted.
Firing only touches memory; the file is written by ``flush``, which the host
schedules through ``on_dirty``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from lifecycle_host.lifecycle_host import logger as app_logger

_LOGGER = app_logger.get_logger()

DEFAULT_METRICS_PATH = Path.home() / ".local" / "state" / "app-lifecycle" / "daily_counts.json"


def counter_key(pixel_name: str, parameters: Optional[Mapping[str, str]] = None) -> str:
    """Build a stable key such as ``pixel|app_event=openURL|app_state=Init``."""
    parts = [pixel_name]
    for name in sorted(parameters or {}):
        parts.append(f"{name}={parameters[name]}")
    return "|".join(parts)


@dataclass
class DailyCountStore:
    """File-backed store of per-day counters."""

    path: Path = DEFAULT_METRICS_PATH
    on_dirty: Optional[Callable[[], None]] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self._days: Dict[str, Dict[str, int]] = self._load()
        self._dirty = False

    @property
    def dirty(self) -> bool:
        """True while counts exist that have not been flushed to disk."""
        return self._dirty

    def flush(self) -> None:
        if not self._dirty:
            return
        if self._save():
            self._dirty = False

    def fire_daily_and_count(
        self,
        pixel_name: str,
        parameters: Optional[Mapping[str, str]] = None,
        *,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Count one occurrence of ``pixel_name`` with ``parameters``.

        Returns True when this is the first occurrence of the key for the
        current UTC day.
        """
        day = _day_key(now or datetime.now(timezone.utc))
        key = counter_key(pixel_name, parameters)
        counters = self._days.setdefault(day, {})
        first_today = key not in counters
        counters[key] = counters.get(key, 0) + 1
        self._mark_dirty()
        if first_today:
            _LOGGER.debug("Daily pixel {} fired for {}", key, day)
        return first_today

    def counts_for(self, day: date | datetime) -> Dict[str, int]:
        return dict(self._days.get(_day_key(day), {}))

    def prune(self, retention_days: int, *, now: Optional[datetime] = None) -> int:
        """Drop days older than ``retention_days``; returns how many were removed."""
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=retention_days)
        cutoff_key = _day_key(cutoff)
        stale = [day for day in self._days if day < cutoff_key]
        for day in stale:
            del self._days[day]
        if stale:
            self._mark_dirty()
            _LOGGER.info("Pruned {} day(s) of lifecycle metrics older than {}", len(stale), cutoff_key)
        return len(stale)

    def _mark_dirty(self) -> None:
        self._dirty = True
        if self.on_dirty is not None:
            self.on_dirty()

    def _load(self) -> Dict[str, Dict[str, int]]:
        try:
            contents = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            _LOGGER.warning("Unable to read metrics store {}: {}", self.path, exc)
            return {}

        try:
            raw = json.loads(contents)
        except json.JSONDecodeError as exc:
            _LOGGER.warning("Metrics store {} is not valid JSON ({}); starting empty.", self.path, exc)
            return {}

        if not isinstance(raw, dict):
            _LOGGER.warning("Metrics store {} root must be a JSON object; starting empty.", self.path)
            return {}

        days: Dict[str, Dict[str, int]] = {}
        for day, counters in raw.items():
            if not isinstance(counters, dict):
                continue
            days[str(day)] = {
                str(key): int(value)
                for key, value in counters.items()
                if isinstance(value, int) and not isinstance(value, bool)
            }
        return days

    def _save(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(self._days, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            _LOGGER.error("Failed to persist metrics store {}: {}", self.path, exc)
            return False
        return True


def _day_key(value: date | datetime) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    return value.isoformat()
