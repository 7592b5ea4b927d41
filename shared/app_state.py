"""
Application lifecycle states shared by the core runtime and host adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

ApplicationHandle = Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Init:
    """Process started; no lifecycle event has arrived yet."""


@dataclass(frozen=True, slots=True)
class Launched:
    application: ApplicationHandle
    launch_options: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True, slots=True)
class Active:
    application: ApplicationHandle


@dataclass(frozen=True, slots=True)
class Inactive:
    application: ApplicationHandle


@dataclass(frozen=True, slots=True)
class Background:
    """
    App moved to the background once. ``timestamp`` records when it
    entered the background.
    """

    application: ApplicationHandle
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True, slots=True)
class DoubleBackground:
    """
    App was backgrounded again without an activation in between.
    """

    previous_did_enter_background_timestamp: datetime
    current_did_enter_background_timestamp: datetime = field(default_factory=_utcnow)
    counter: int = 0


@dataclass(frozen=True, slots=True)
class InactiveBackground:
    """Reached the background straight from launch, skipping activation."""

    application: ApplicationHandle = None


AppState = Union[
    Init,
    Launched,
    Active,
    Inactive,
    Background,
    DoubleBackground,
    InactiveBackground,
]

ALL_STATE_TYPES = (
    Init,
    Launched,
    Active,
    Inactive,
    Background,
    DoubleBackground,
    InactiveBackground,
)


def state_name(state: AppState) -> str:
    """Type name of a state, as reported to diagnostics."""
    return type(state).__name__
