"""
Bridges Qt application lifecycle callbacks onto the lifecycle state machine.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from PySide6.QtCore import QCoreApplication, QEvent, QObject, Qt, Signal

from shared.app_event import Activating, AppEvent, Backgrounding, Launching, OpenURL, Suspending
from lifecycle_host.lifecycle_host import logger as app_logger

from .machine import LifecycleStateMachine, ReentrantDispatchError

_LOGGER = app_logger.get_logger()

_BACKGROUND_STATES = (
    Qt.ApplicationState.ApplicationHidden,
    Qt.ApplicationState.ApplicationSuspended,
)


class QtLifecycleAdapter(QObject):
    """
    Converts ``applicationStateChanged`` notifications and ``FileOpen`` URL
    events into lifecycle events, delivered in arrival order on the Qt main
    thread. Emits ``stateChanged`` with the resulting state after each event.
    """

    stateChanged = Signal(object)

    def __init__(self, machine: LifecycleStateMachine, app: Optional[QCoreApplication] = None) -> None:
        super().__init__()
        self._machine = machine
        self._app = app
        self._active = False
        self._last_qt_state: Optional[Qt.ApplicationState] = None

    @property
    def machine(self) -> LifecycleStateMachine:
        return self._machine

    def start(self, launch_options: Optional[Mapping[str, Any]] = None) -> None:
        """Report launch and begin listening for host callbacks."""
        if self._active:
            return
        self._active = True
        app = self._application()
        self._dispatch(Launching(app, launch_options))

        if app is None:
            _LOGGER.warning("No Qt application instance; lifecycle callbacks will not be observed.")
            return
        if hasattr(app, "applicationStateChanged"):
            app.applicationStateChanged.connect(self._on_application_state_changed)  # type: ignore[attr-defined]
        app.installEventFilter(self)

    def stop(self) -> None:
        """Stop listening for host callbacks."""
        if not self._active:
            return
        self._active = False
        app = self._application()
        if app is None:
            return
        if hasattr(app, "applicationStateChanged"):
            try:
                app.applicationStateChanged.disconnect(self._on_application_state_changed)  # type: ignore[attr-defined]
            except (RuntimeError, TypeError):
                _LOGGER.debug("applicationStateChanged was not connected.")
        app.removeEventFilter(self)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802 - Qt override
        if event.type() == QEvent.Type.FileOpen:
            url = event.url()  # type: ignore[attr-defined]
            self._dispatch(OpenURL(url.toString() if url is not None else None))
            return False
        return super().eventFilter(watched, event)

    def _on_application_state_changed(self, qt_state: Qt.ApplicationState) -> None:
        previous = self._last_qt_state
        self._last_qt_state = qt_state

        app = self._application()
        if qt_state == Qt.ApplicationState.ApplicationActive:
            self._dispatch(Activating(app))
        elif qt_state == Qt.ApplicationState.ApplicationInactive:
            # Inactive is on the way into the foreground unless we were just active.
            if previous != Qt.ApplicationState.ApplicationActive:
                _LOGGER.debug("Qt state {} following {} is a foreground entry", qt_state, previous)
                return
            self._dispatch(Suspending(app))
        elif qt_state in _BACKGROUND_STATES:
            # Hidden then Suspended is a single trip to the background; any
            # other background-to-background change is a re-entry.
            if (
                previous == Qt.ApplicationState.ApplicationHidden
                and qt_state == Qt.ApplicationState.ApplicationSuspended
            ):
                _LOGGER.debug("Ignoring Qt state {} following {}", qt_state, previous)
                return
            self._dispatch(Backgrounding(app))
        else:
            _LOGGER.warning("Unhandled Qt application state {}", qt_state)

    def _dispatch(self, event: AppEvent) -> None:
        try:
            state = self._machine.handle(event)
        except ReentrantDispatchError:
            # Qt slots must not raise; the outer event has already been applied.
            _LOGGER.exception("Dropped lifecycle event {} dispatched during another event", event.name)
            state = self._machine.state
        self.stateChanged.emit(state)

    def _application(self) -> Optional[QCoreApplication]:
        if self._app is not None:
            return self._app
        return QCoreApplication.instance()
