"""
Reporting for rejected lifecycle transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from lifecycle_host.lifecycle_host import logger as app_logger

from .metrics_store import DailyCountStore

_LOGGER = app_logger.get_logger()

UNEXPECTED_STATE_PIXEL = "app_did_transition_to_unexpected_state"
PARAM_APP_STATE = "app_state"
PARAM_APP_EVENT = "app_event"


@dataclass(frozen=True, slots=True)
class InvalidTransition:
    """An event that has no transition defined for the state it arrived in."""

    event_name: str
    state_name: str


class DiagnosticsSink(Protocol):
    def report(self, event_name: str, state_name: str) -> None:
        ...


class LoggingDiagnosticsSink:
    """
    Logs each invalid transition at error level and fires the daily
    counted pixel keyed by state type and event name.

    The store is optional so the sink can run log-only when metrics are
    disabled by configuration.
    """

    def __init__(
        self,
        store: Optional[DailyCountStore] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def report(self, event_name: str, state_name: str) -> None:
        _LOGGER.bind(app_state=state_name, app_event=event_name).error(
            "Invalid transition ({}) for state ({})",
            event_name,
            state_name,
        )
        if self._store is None:
            return
        self._store.fire_daily_and_count(
            UNEXPECTED_STATE_PIXEL,
            {PARAM_APP_STATE: state_name, PARAM_APP_EVENT: event_name},
            now=self._clock(),
        )


def dispatch_diagnostic(sink: DiagnosticsSink, diagnostic: InvalidTransition) -> None:
    """
    Hand a diagnostic to ``sink``. Sink failures are logged and never reach
    the lifecycle caller.
    """
    try:
        sink.report(diagnostic.event_name, diagnostic.state_name)
    except Exception:
        _LOGGER.exception(
            "Diagnostics sink failed while reporting {} for state {}",
            diagnostic.event_name,
            diagnostic.state_name,
        )
