from __future__ import annotations

from lifecycle_core.diagnostics import (
    UNEXPECTED_STATE_PIXEL,
    InvalidTransition,
    LoggingDiagnosticsSink,
    dispatch_diagnostic,
)
from lifecycle_core.metrics_store import DailyCountStore, counter_key


def test_logging_sink_logs_error_with_structured_fields(log_records):
    LoggingDiagnosticsSink().report("launching", "Active")

    errors = [record for record in log_records if record["level"].name == "ERROR"]
    assert len(errors) == 1
    assert errors[0]["message"] == "Invalid transition (launching) for state (Active)"
    assert errors[0]["extra"]["app_state"] == "Active"
    assert errors[0]["extra"]["app_event"] == "launching"


def test_logging_sink_counts_per_state_and_event(tmp_path, fixed_now):
    store = DailyCountStore(tmp_path / "counts.json")
    sink = LoggingDiagnosticsSink(store, clock=lambda: fixed_now)

    sink.report("launching", "Active")
    sink.report("launching", "Active")
    sink.report("suspending", "Background")

    counts = store.counts_for(fixed_now)
    active_key = counter_key(UNEXPECTED_STATE_PIXEL, {"app_state": "Active", "app_event": "launching"})
    background_key = counter_key(UNEXPECTED_STATE_PIXEL, {"app_state": "Background", "app_event": "suspending"})
    assert counts == {active_key: 2, background_key: 1}


def test_dispatch_contains_sink_failures(log_records):
    class BrokenSink:
        def report(self, event_name, state_name):
            raise ValueError("sink offline")

    dispatch_diagnostic(BrokenSink(), InvalidTransition("activating", "Init"))

    failures = [record for record in log_records if record["exception"] is not None]
    assert len(failures) == 1
    assert "activating" in failures[0]["message"]
