"""Pytest configuration and fixtures."""

import os
import threading

# Keep the environment from leaking into the configuration under test
for _name in list(os.environ):
    if _name.startswith("TELEMETRY_"):
        del os.environ[_name]

import pytest

from telemetry_bridge import tracker
from telemetry_bridge.config import TelemetryConfig
from telemetry_bridge.context import clear_request_context, get_ambient_store
from telemetry_bridge.dev_logger import clear_dev_logs, set_debug
from telemetry_bridge.exporter import TelemetryExporter
from telemetry_bridge.models import Occurrence


class RecordingExporter(TelemetryExporter):
    """Exporter that keeps everything it receives in memory."""

    def __init__(self):
        self.occurrences: list[Occurrence] = []
        self.counter_calls: list[tuple[str, int]] = []
        self.flush_count = 0
        self.shutdown_count = 0
        self._lock = threading.Lock()

    def export(self, occurrence: Occurrence) -> None:
        with self._lock:
            self.occurrences.append(occurrence)

    def add_to_counter(self, name: str, delta: int) -> None:
        with self._lock:
            self.counter_calls.append((name, delta))

    def flush(self) -> None:
        self.flush_count += 1

    def shutdown(self) -> None:
        self.shutdown_count += 1

    @property
    def last(self) -> Occurrence:
        return self.occurrences[-1]


@pytest.fixture(autouse=True)
def reset_telemetry():
    """Return the facade, ambient context, counters and dev log to a clean state."""
    tracker._client = None
    tracker.get_metric_counters().reset()
    get_ambient_store().reset()
    clear_request_context()
    clear_dev_logs()
    set_debug(False)
    yield
    tracker._client = None
    tracker.get_metric_counters().reset()
    get_ambient_store().reset()
    clear_request_context()
    clear_dev_logs()


@pytest.fixture
def config():
    """Configuration without dev logger or Azure credentials."""
    return TelemetryConfig(enable_dev_logger=False)


@pytest.fixture
def exporter():
    return RecordingExporter()


@pytest.fixture
def initialized(config, exporter):
    """Initialize the facade with a recording exporter."""
    assert tracker.initialize_telemetry("https://ingest.example.com", config, exporter=exporter)
    return exporter


@pytest.fixture
def exporter_cls():
    """The recording exporter class, for tests that need several or a subclass."""
    return RecordingExporter
