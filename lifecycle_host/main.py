"""
Entry point for the lifecycle host.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Iterable, Optional

from PySide6.QtCore import QCoreApplication
from PySide6.QtGui import QGuiApplication

from lifecycle_core.diagnostics import LoggingDiagnosticsSink
from lifecycle_core.flush_timer import MetricsFlushTimer
from lifecycle_core.machine import LifecycleStateMachine
from lifecycle_core.metrics_store import DailyCountStore
from lifecycle_core.qt_adapter import QtLifecycleAdapter
from lifecycle_core.settings import LifecycleSettings, LifecycleSettingsManager
from lifecycle_host.lifecycle_host import logger as app_logger

_LOGGER = app_logger.get_logger()


@dataclass
class LifecycleHost:
    """Collaborators that must stay alive for the life of the process."""

    adapter: QtLifecycleAdapter
    flush_timer: Optional[MetricsFlushTimer] = None

    def stop(self) -> None:
        self.adapter.stop()
        if self.flush_timer is not None:
            self.flush_timer.stop()


def install_lifecycle(
    app: QCoreApplication,
    settings: Optional[LifecycleSettings] = None,
) -> LifecycleHost:
    """
    Wire a state machine onto ``app`` and report launch.

    Host UI code calls this once, before entering the event loop, and calls
    ``stop()`` on the result when the loop exits.
    """
    settings = settings or LifecycleSettingsManager().read_settings()

    store: Optional[DailyCountStore] = None
    flush_timer: Optional[MetricsFlushTimer] = None
    if settings.diagnostics_enabled:
        store = DailyCountStore(settings.metrics_path)
        flush_timer = MetricsFlushTimer(store)
        store.prune(settings.metrics_retention_days)
    else:
        _LOGGER.info("Lifecycle metrics disabled; invalid transitions will only be logged.")

    machine = LifecycleStateMachine(LoggingDiagnosticsSink(store))
    adapter = QtLifecycleAdapter(machine, app)
    adapter.stateChanged.connect(lambda state: _LOGGER.info("Lifecycle state is now {}", type(state).__name__))
    adapter.start(launch_options={"arguments": list(app.arguments()[1:])})
    return LifecycleHost(adapter=adapter, flush_timer=flush_timer)


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Launch a bare Qt application with lifecycle tracking attached."""
    settings = LifecycleSettingsManager().read_settings()
    app_logger.configure(settings)

    app = QGuiApplication(list(argv if argv is not None else sys.argv))
    host = install_lifecycle(app, settings)
    _LOGGER.info("Lifecycle host started; logging to {}", settings.log_path)
    try:
        return app.exec()
    finally:
        host.stop()


if __name__ == "__main__":
    raise SystemExit(main())
