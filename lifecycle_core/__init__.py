"""
Core lifecycle runtime: transition table, state owner, diagnostics, and
the Qt host adapter.
"""

from .diagnostics import DiagnosticsSink, InvalidTransition, LoggingDiagnosticsSink  # noqa: F401
from .machine import LifecycleStateMachine, ReentrantDispatchError  # noqa: F401
from .metrics_store import DailyCountStore  # noqa: F401
from .transitions import TransitionResult, apply, transition  # noqa: F401
