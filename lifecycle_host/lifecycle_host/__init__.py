"""
lifecycle_host package.

Process-level wiring for the lifecycle runtime: logging and the Qt entry
point live here, the state machine itself lives in ``lifecycle_core``.
"""

__all__ = [
    "logger",
]
