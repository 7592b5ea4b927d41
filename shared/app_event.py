"""
Lifecycle events delivered by the host operating system.

Each event carries a stable ``name`` used for logging and metrics only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional, Union

from .app_state import ApplicationHandle


@dataclass(frozen=True, slots=True)
class Launching:
    application: ApplicationHandle
    launch_options: Optional[Mapping[str, Any]] = None

    name: ClassVar[str] = "launching"


@dataclass(frozen=True, slots=True)
class Activating:
    application: ApplicationHandle

    name: ClassVar[str] = "activating"


@dataclass(frozen=True, slots=True)
class Backgrounding:
    application: ApplicationHandle

    name: ClassVar[str] = "backgrounding"


@dataclass(frozen=True, slots=True)
class Suspending:
    application: ApplicationHandle

    name: ClassVar[str] = "suspending"


@dataclass(frozen=True, slots=True)
class OpenURL:
    url: Optional[str] = None

    name: ClassVar[str] = "openURL"


AppEvent = Union[Launching, Activating, Backgrounding, Suspending, OpenURL]

ALL_EVENT_TYPES = (Launching, Activating, Backgrounding, Suspending, OpenURL)
