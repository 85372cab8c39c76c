"""Tests for the development logger."""

import json

from telemetry_bridge import dev_logger
from telemetry_bridge.dev_logger import (
    DevLogExporter,
    clear_dev_logs,
    export_dev_logs,
    get_dev_log_stats,
    get_dev_logs,
    log_dev_event,
    set_debug,
)
from telemetry_bridge.events import OccurrenceKind, OccurrenceStatus
from telemetry_bridge.models import Occurrence


def test_log_and_export_jsonl():
    """Test that records export as one JSON object per line."""
    log_dev_event("first", {"a": 1})
    log_dev_event("second", {"b": 2})

    lines = export_dev_logs().splitlines()

    assert [json.loads(line)["event_name"] for line in lines] == ["first", "second"]


def test_stats_and_clear():
    log_dev_event("first", {})
    stats = get_dev_log_stats()
    assert stats["event_count"] == 1
    assert stats["size_bytes"] > 0

    clear_dev_logs()

    assert get_dev_logs() == []
    assert get_dev_log_stats()["size_bytes"] == 0


def test_count_rotation_keeps_newest():
    original = dev_logger._max_events
    try:
        dev_logger.set_max_events(3)
        for i in range(5):
            log_dev_event(f"e{i}", {})

        assert [e["event_name"] for e in get_dev_logs()] == ["e2", "e3", "e4"]
        assert get_dev_log_stats()["event_count"] == 3
    finally:
        dev_logger.set_max_events(original)


def test_debug_output(capsys):
    set_debug(True)
    log_dev_event("Click", {"screen": "home"})

    assert '[Telemetry] Click: {"screen": "home"}' in capsys.readouterr().out


def test_exporter_records_occurrence():
    exporter = DevLogExporter()
    occurrence = Occurrence(
        kind=OccurrenceKind.DEPENDENCY,
        name="SQL Query",
        status=OccurrenceStatus.ERROR,
        attributes={"dependency.type": "SQL"},
        duration_ms=25.0,
    )

    exporter.export(occurrence)
    exporter.add_to_counter("Load", 2)

    logs = get_dev_logs()
    assert logs[0]["event_name"] == "SQL Query"
    assert logs[0]["properties"]["status"] == "error"
    assert logs[0]["properties"]["attributes"] == {"dependency.type": "SQL"}
    assert logs[1]["properties"] == {"metric_name": "Load", "delta": 2}
