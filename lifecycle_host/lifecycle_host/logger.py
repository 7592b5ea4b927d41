"""
Logging setup for the lifecycle host.

The console sink is human readable; the file sink writes one JSON record
per line so invalid-transition entries keep their ``app_state`` and
``app_event`` fields for later aggregation.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger as _logger

if TYPE_CHECKING:
    from lifecycle_core.settings import LifecycleSettings

_LOG_INITIALISED = False
LOG_DIR = Path.home() / ".local" / "state" / "app-lifecycle"
DEFAULT_LOG_PATH = LOG_DIR / "lifecycle.log"
DEFAULT_LEVEL = "INFO"

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "{extra[app_state]}/{extra[app_event]} | <level>{message}</level>"
)


def configure(settings: Optional["LifecycleSettings"] = None, *, force: bool = False) -> None:
    """
    Install the console and file sinks described by ``settings``.

    Runs once per process unless ``force`` is set, so a second caller cannot
    silently redirect the log file.
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED and not force:
        return
    target = Path(settings.log_path) if settings is not None else DEFAULT_LOG_PATH
    level = settings.log_level if settings is not None else DEFAULT_LEVEL
    target.parent.mkdir(parents=True, exist_ok=True)

    _logger.remove()
    # Records logged without lifecycle context still render in the console format.
    _logger.configure(extra={"app_state": "-", "app_event": "-"})
    if sys.stderr is not None:
        _logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT, enqueue=True)
    _logger.add(
        target,
        level="DEBUG",
        serialize=True,
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
        enqueue=True,
        diagnose=False,
    )
    _LOG_INITIALISED = True


def get_logger():
    """Return the shared logger instance."""
    return _logger
