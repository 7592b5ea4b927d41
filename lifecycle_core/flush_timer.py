"""
Debounced persistence of lifecycle metrics on the Qt event loop.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, QTimer

from .metrics_store import DailyCountStore

DEFAULT_FLUSH_DELAY_MS = 2000


class MetricsFlushTimer(QObject):
    """
    Writes a ``DailyCountStore`` to disk shortly after it changes, so
    counting an invalid transition never waits on file I/O. Bursts of
    changes collapse into one write.
    """

    def __init__(self, store: DailyCountStore, delay_ms: int = DEFAULT_FLUSH_DELAY_MS) -> None:
        super().__init__()
        self._store = store
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self._store.flush)  # type: ignore[arg-type]
        self._store.on_dirty = self.schedule

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    def schedule(self) -> None:
        if not self._timer.isActive():
            self._timer.start()

    def stop(self) -> None:
        """Cancel any pending write and flush immediately."""
        self._timer.stop()
        self._store.on_dirty = None
        self._store.flush()
