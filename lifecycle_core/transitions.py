"""
Lifecycle transition table.

``transition`` is the pure core: it maps the current state and an incoming
event to the next state, and describes a rejected event as an
``InvalidTransition`` instead of raising. ``apply`` layers the diagnostic
report on top of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import NoReturn, Optional

from shared.app_event import (
    Activating,
    AppEvent,
    Backgrounding,
    Launching,
    OpenURL,
    Suspending,
)
from shared.app_state import (
    Active,
    AppState,
    Background,
    DoubleBackground,
    Inactive,
    InactiveBackground,
    Init,
    Launched,
    state_name,
)

from .diagnostics import DiagnosticsSink, InvalidTransition, LoggingDiagnosticsSink, dispatch_diagnostic


@dataclass(frozen=True, slots=True)
class TransitionResult:
    state: AppState
    diagnostic: Optional[InvalidTransition] = None

    @property
    def accepted(self) -> bool:
        return self.diagnostic is None


# The fallthrough helpers take NoReturn so a type checker flags any variant
# missing from a match; at runtime they reject foreign objects.
def _unknown_event(event: NoReturn) -> NoReturn:
    raise TypeError(f"Unknown lifecycle event type: {type(event).__name__}")


def _unknown_state(state: NoReturn) -> NoReturn:
    raise TypeError(f"Unknown lifecycle state type: {type(state).__name__}")


# Handlers return the next state, or None when the event is invalid for the state.
def _from_init(state: Init, event: AppEvent, now: datetime) -> Optional[AppState]:
    match event:
        case Launching(application=application, launch_options=launch_options):
            return Launched(application, launch_options)
        case Activating() | Backgrounding() | Suspending() | OpenURL():
            return None
        case _:
            _unknown_event(event)


def _from_launched(state: Launched, event: AppEvent, now: datetime) -> Optional[AppState]:
    match event:
        case Activating(application=application):
            return Active(application)
        case OpenURL():
            return state
        case Backgrounding(application=application):
            return InactiveBackground(application)
        case Launching() | Suspending():
            return None
        case _:
            _unknown_event(event)


def _from_active(state: Active, event: AppEvent, now: datetime) -> Optional[AppState]:
    match event:
        case Suspending(application=application):
            return Inactive(application)
        case OpenURL():
            return state
        case Launching() | Activating() | Backgrounding():
            return None
        case _:
            _unknown_event(event)


def _from_inactive(state: Inactive, event: AppEvent, now: datetime) -> Optional[AppState]:
    match event:
        case Backgrounding(application=application):
            return Background(application, timestamp=now)
        case Activating(application=application):
            return Active(application)
        case OpenURL():
            return state
        case Launching() | Suspending():
            return None
        case _:
            _unknown_event(event)


def _from_background(state: Background, event: AppEvent, now: datetime) -> Optional[AppState]:
    match event:
        case Activating(application=application):
            return Active(application)
        case OpenURL():
            return state
        case Backgrounding():
            return DoubleBackground(
                previous_did_enter_background_timestamp=state.timestamp,
                current_did_enter_background_timestamp=now,
                counter=0,
            )
        case Launching() | Suspending():
            return None
        case _:
            _unknown_event(event)


def _from_double_background(state: DoubleBackground, event: AppEvent, now: datetime) -> Optional[AppState]:
    match event:
        case Activating(application=application):
            return Active(application)
        case Suspending(application=application):
            return Inactive(application)
        case Backgrounding():
            # Only the current timestamp moves; previous and counter carry over.
            return DoubleBackground(
                previous_did_enter_background_timestamp=state.previous_did_enter_background_timestamp,
                current_did_enter_background_timestamp=now,
                counter=state.counter,
            )
        case Launching() | OpenURL():
            return state
        case _:
            _unknown_event(event)


def _from_inactive_background(state: InactiveBackground, event: AppEvent, now: datetime) -> Optional[AppState]:
    match event:
        case Activating(application=application):
            return Active(application)
        case Suspending(application=application):
            return Inactive(application)
        case Launching() | Backgrounding() | OpenURL():
            return state
        case _:
            _unknown_event(event)


def _next_state(state: AppState, event: AppEvent, now: datetime) -> Optional[AppState]:
    match state:
        case Init():
            return _from_init(state, event, now)
        case Launched():
            return _from_launched(state, event, now)
        case Active():
            return _from_active(state, event, now)
        case Inactive():
            return _from_inactive(state, event, now)
        case Background():
            return _from_background(state, event, now)
        case DoubleBackground():
            return _from_double_background(state, event, now)
        case InactiveBackground():
            return _from_inactive_background(state, event, now)
        case _:
            _unknown_state(state)


def transition(state: AppState, event: AppEvent, *, now: Optional[datetime] = None) -> TransitionResult:
    """
    Compute the next state for ``event`` without any side effects.

    Invalid events leave the state untouched and come back as a
    diagnostic on the result. Unknown state or event types are programming
    errors and raise ``TypeError``.
    """
    current_time = now or datetime.now(timezone.utc)
    next_state = _next_state(state, event, current_time)
    if next_state is None:
        return TransitionResult(
            state=state,
            diagnostic=InvalidTransition(event_name=event.name, state_name=state_name(state)),
        )
    return TransitionResult(state=next_state)


def apply(
    state: AppState,
    event: AppEvent,
    sink: Optional[DiagnosticsSink] = None,
    *,
    now: Optional[datetime] = None,
) -> AppState:
    """
    Return the next state, reporting a rejected event to ``sink`` once.

    Without a sink the rejection is still logged at error level.
    """
    result = transition(state, event, now=now)
    if result.diagnostic is not None:
        dispatch_diagnostic(sink if sink is not None else LoggingDiagnosticsSink(), result.diagnostic)
    return result.state
