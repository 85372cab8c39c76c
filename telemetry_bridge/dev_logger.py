"""
Development Logger

Provides local development logging with JSONL export for debugging.
Occurrences are logged to a rotating in-memory buffer with size limits.
"""

import json
import threading
from collections import deque
from datetime import UTC, datetime
from typing import Any

from .exporter import TelemetryExporter
from .models import Occurrence

# Configuration
_debug_enabled = False
_max_events = 1000  # Maximum events to keep in memory
_max_size_bytes = 10 * 1024 * 1024  # 10MB limit

# Event storage (deque for efficient rotation)
_event_buffer: deque[dict[str, Any]] = deque(maxlen=_max_events)
_current_size_bytes = 0
_buffer_lock = threading.Lock()


def _record_size(record: dict[str, Any]) -> int:
    return len(json.dumps(record, default=str).encode("utf-8"))


def set_debug(enabled: bool) -> None:
    """Enable or disable debug console output."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return _debug_enabled


def set_max_events(max_events: int) -> None:
    """Resize the buffer, keeping the newest events."""
    global _event_buffer, _max_events, _current_size_bytes
    with _buffer_lock:
        _max_events = max_events
        _event_buffer = deque(_event_buffer, maxlen=max_events)
        _current_size_bytes = sum(_record_size(event) for event in _event_buffer)


def log_dev_event(event_name: str, properties: dict[str, Any]) -> None:
    """
    Log a telemetry record for development/debugging.

    Records are stored in memory with automatic rotation when size limits are reached.
    If debug mode is enabled, records are also printed to console.

    Args:
        event_name: Name of the record
        properties: Record properties dictionary
    """
    global _current_size_bytes

    event = {
        "timestamp": datetime.now(UTC).isoformat(),
        "event_name": event_name,
        "properties": properties,
    }
    event_size = _record_size(event)

    with _buffer_lock:
        # Rotate due to size
        while _current_size_bytes + event_size > _max_size_bytes and len(_event_buffer) > 0:
            _current_size_bytes -= _record_size(_event_buffer.popleft())

        # Rotate due to count (deque would drop it silently)
        if len(_event_buffer) == _event_buffer.maxlen:
            _current_size_bytes -= _record_size(_event_buffer[0])

        _event_buffer.append(event)
        _current_size_bytes += event_size

    if _debug_enabled:
        print(f"[Telemetry] {event_name}: {json.dumps(properties, default=str)}")


def export_dev_logs() -> str:
    """
    Export all logged records as JSONL (JSON Lines) format.

    Returns:
        String containing one JSON object per line
    """
    with _buffer_lock:
        return "\n".join(json.dumps(event, default=str) for event in _event_buffer)


def clear_dev_logs() -> None:
    """Clear all logged records."""
    global _current_size_bytes
    with _buffer_lock:
        _event_buffer.clear()
        _current_size_bytes = 0


def get_dev_logs() -> list[dict[str, Any]]:
    """
    Get all logged records as a list.

    Returns:
        List of record dictionaries
    """
    with _buffer_lock:
        return list(_event_buffer)


def get_dev_log_stats() -> dict[str, Any]:
    """
    Get statistics about the dev logger.

    Returns:
        Dictionary with stats (event_count, size_bytes, max_events, max_size_bytes)
    """
    with _buffer_lock:
        return {
            "event_count": len(_event_buffer),
            "size_bytes": _current_size_bytes,
            "max_events": _max_events,
            "max_size_bytes": _max_size_bytes,
            "debug_enabled": _debug_enabled,
        }


class DevLogExporter(TelemetryExporter):
    """Exporter that writes every occurrence to the in-memory dev log."""

    def __init__(self, max_events: int | None = None):
        if max_events is not None and max_events != _max_events:
            set_max_events(max_events)

    def export(self, occurrence: Occurrence) -> None:
        log_dev_event(
            occurrence.name,
            {
                "kind": occurrence.kind.value,
                "span_kind": occurrence.span_kind.value,
                "status": occurrence.status.value,
                "status_message": occurrence.status_message,
                "duration_ms": occurrence.duration_ms,
                "occurred_at": occurrence.timestamp.isoformat(),
                "attributes": dict(occurrence.attributes),
            },
        )

    def add_to_counter(self, name: str, delta: int) -> None:
        log_dev_event("counter", {"metric_name": name, "delta": delta})
