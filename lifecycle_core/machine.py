"""
Single owner of the current lifecycle state.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional, Tuple

from shared.app_event import AppEvent
from shared.app_state import AppState, Init, state_name
from lifecycle_host.lifecycle_host import logger as app_logger

from .diagnostics import DiagnosticsSink, LoggingDiagnosticsSink, dispatch_diagnostic
from .transitions import transition

_LOGGER = app_logger.get_logger()

HISTORY_SIZE = 32

StateListener = Callable[[AppState, AppState, AppEvent], None]


class ReentrantDispatchError(RuntimeError):
    """Raised when an event is dispatched while another one is being handled."""


class LifecycleStateMachine:
    """
    Holds the current ``AppState`` and feeds it events one at a time.

    Access is single-writer: events must be delivered from one thread, in
    order. Dispatching a new event from inside a listener is rejected.
    Without an explicit sink, invalid transitions are logged but not counted.
    """

    def __init__(
        self,
        sink: Optional[DiagnosticsSink] = None,
        *,
        initial_state: Optional[AppState] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._sink: DiagnosticsSink = sink if sink is not None else LoggingDiagnosticsSink()
        self._state: AppState = initial_state if initial_state is not None else Init()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._listeners: List[StateListener] = []
        self._history: Deque[Tuple[str, str]] = deque(maxlen=HISTORY_SIZE)
        self._dispatching = False

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def history(self) -> List[Tuple[str, str]]:
        """Recent ``(event name, resulting state name)`` pairs, oldest first."""
        return list(self._history)

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def handle(self, event: AppEvent) -> AppState:
        if self._dispatching:
            raise ReentrantDispatchError(
                f"Reentrant lifecycle dispatch of {event.name} while in {state_name(self._state)}"
            )

        self._dispatching = True
        try:
            previous = self._state
            result = transition(previous, event, now=self._clock())
            if result.diagnostic is not None:
                dispatch_diagnostic(self._sink, result.diagnostic)
            elif result.state is not previous:
                _LOGGER.debug(
                    "Lifecycle {} -> {} on {}",
                    state_name(previous),
                    state_name(result.state),
                    event.name,
                )

            self._state = result.state
            self._history.append((event.name, state_name(result.state)))
            self._notify(previous, result.state, event)
            return result.state
        finally:
            self._dispatching = False

    def _notify(self, previous: AppState, current: AppState, event: AppEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(previous, current, event)
            except ReentrantDispatchError:
                raise
            except Exception:
                _LOGGER.exception("Lifecycle listener {!r} failed", listener)
