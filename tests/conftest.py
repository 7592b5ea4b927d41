from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Tuple

import pytest
from loguru import logger
from PySide6.QtCore import QCoreApplication


class RecordingSink:
    """Diagnostics sink that remembers every report."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []

    def report(self, event_name: str, state_name: str) -> None:
        self.calls.append((event_name, state_name))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def handle() -> object:
    return object()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 17, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture(scope="session")
def qt_app():
    return QCoreApplication.instance() or QCoreApplication([])
