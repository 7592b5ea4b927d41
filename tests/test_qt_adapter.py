"""
Tests for the Qt lifecycle adapter. Slots are driven directly so no
platform plugin or event loop is needed.
"""

from __future__ import annotations

import pytest
from PySide6.QtCore import QEvent, QObject, Qt, QUrl

from lifecycle_core.machine import LifecycleStateMachine
from lifecycle_core.qt_adapter import QtLifecycleAdapter
from shared.app_event import OpenURL
from shared.app_state import Active, Background, DoubleBackground, Inactive, InactiveBackground, Launched


class _FileOpenEvent:
    def __init__(self, url: str) -> None:
        self._url = QUrl(url)

    def type(self):
        return QEvent.Type.FileOpen

    def url(self):
        return self._url


@pytest.fixture
def adapter(qt_app, sink):
    adapter = QtLifecycleAdapter(LifecycleStateMachine(sink), qt_app)
    yield adapter
    adapter.stop()


def test_start_reports_launch(adapter, qt_app):
    emitted = []
    adapter.stateChanged.connect(lambda state: emitted.append(state))

    adapter.start(launch_options={"arguments": []})
    adapter.start()

    assert adapter.machine.state == Launched(qt_app, {"arguments": []})
    assert emitted == [Launched(qt_app, {"arguments": []})]


def test_application_states_map_to_events(adapter, qt_app, sink):
    adapter.start()

    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationActive)
    assert adapter.machine.state == Active(qt_app)

    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationInactive)
    assert adapter.machine.state == Inactive(qt_app)

    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationHidden)
    assert isinstance(adapter.machine.state, Background)

    # Suspended right after Hidden is the same background entry.
    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationSuspended)
    assert isinstance(adapter.machine.state, Background)
    assert sink.calls == []


def test_background_before_activation(adapter, qt_app):
    adapter.start()

    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationSuspended)

    assert adapter.machine.state == InactiveBackground(qt_app)


def test_invalid_host_sequence_is_reported(adapter, sink):
    adapter.start()
    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationActive)
    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationActive)

    assert sink.calls == [("activating", "Active")]


def test_inactive_before_first_activation_is_not_a_suspension(adapter, qt_app, sink):
    adapter.start()

    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationInactive)
    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationActive)

    assert adapter.machine.state == Active(qt_app)
    assert sink.calls == []


def test_resume_from_background_is_clean(adapter, qt_app, sink):
    adapter.start()
    for qt_state in (
        Qt.ApplicationState.ApplicationActive,
        Qt.ApplicationState.ApplicationInactive,
        Qt.ApplicationState.ApplicationSuspended,
        Qt.ApplicationState.ApplicationInactive,
        Qt.ApplicationState.ApplicationActive,
    ):
        adapter._on_application_state_changed(qt_state)

    assert adapter.machine.state == Active(qt_app)
    assert [name for name, _ in adapter.machine.history] == [
        "launching",
        "activating",
        "suspending",
        "backgrounding",
        "activating",
    ]
    assert sink.calls == []


def test_background_reentry_reaches_double_background(adapter, sink):
    adapter.start()
    for qt_state in (
        Qt.ApplicationState.ApplicationActive,
        Qt.ApplicationState.ApplicationInactive,
        Qt.ApplicationState.ApplicationHidden,
        Qt.ApplicationState.ApplicationSuspended,
        Qt.ApplicationState.ApplicationHidden,
    ):
        adapter._on_application_state_changed(qt_state)

    state = adapter.machine.state
    assert isinstance(state, DoubleBackground)
    assert state.counter == 0
    assert sink.calls == []


def test_reentrant_dispatch_does_not_escape_slot(adapter, qt_app, log_records):
    adapter.start()
    adapter.machine.add_listener(
        lambda previous, current, event: adapter.machine.handle(OpenURL())
    )
    emitted = []
    adapter.stateChanged.connect(lambda state: emitted.append(state))

    adapter._on_application_state_changed(Qt.ApplicationState.ApplicationActive)

    assert adapter.machine.state == Active(qt_app)
    assert emitted == [Active(qt_app)]
    assert any(record["exception"] is not None for record in log_records)


def test_file_open_dispatches_open_url(adapter, qt_app):
    adapter.start()
    emitted = []
    adapter.stateChanged.connect(lambda state: emitted.append(state))

    consumed = adapter.eventFilter(qt_app, _FileOpenEvent("app://deep/link"))

    assert consumed is False
    assert emitted == [Launched(qt_app, None)]
    assert adapter.machine.history[-1] == ("openURL", "Launched")


def test_other_events_pass_through(adapter, qt_app):
    adapter.start()

    assert adapter.eventFilter(QObject(), QEvent(QEvent.Type.User)) is False
    assert adapter.machine.history == [("launching", "Launched")]
