"""Tests for the exporter adapters."""

from datetime import UTC, datetime

import pytest
from opencensus.stats import stats as stats_module
from opencensus.trace import base_exporter
from opencensus.trace import span as span_module

from telemetry_bridge.config import TelemetryConfig
from telemetry_bridge.events import OccurrenceKind, OccurrenceStatus, SpanKind
from telemetry_bridge.exporter import CompositeExporter, OpenCensusExporter
from telemetry_bridge.models import Occurrence


class CapturingSpanExporter(base_exporter.Exporter):
    """opencensus trace exporter that keeps span data in memory."""

    def __init__(self):
        self.span_datas = []

    def emit(self, span_datas):
        self.span_datas.extend(span_datas)

    def export(self, span_datas):
        self.emit(span_datas)


@pytest.fixture
def span_exporter():
    return CapturingSpanExporter()


def _occurrence(**overrides):
    fields = {
        "kind": OccurrenceKind.DEPENDENCY,
        "name": "HTTP Call",
        "span_kind": SpanKind.CLIENT,
        "attributes": {"dependency.target": "api.example.com", "dependency.success": True},
    }
    fields.update(overrides)
    return Occurrence(**fields)


class TestOpenCensusExporter:
    """Test span and counter export through opencensus."""

    def test_requires_credentials_without_span_exporter(self):
        with pytest.raises(ValueError):
            OpenCensusExporter(TelemetryConfig(enable_dev_logger=False))

    def test_span_attributes_and_kind(self, span_exporter):
        exporter = OpenCensusExporter(TelemetryConfig(), span_exporter=span_exporter)

        exporter.export(_occurrence())

        assert len(span_exporter.span_datas) == 1
        span_data = span_exporter.span_datas[0]
        assert span_data.name == "HTTP Call"
        assert span_data.span_kind == span_module.SpanKind.CLIENT
        assert span_data.attributes["dependency.target"] == "api.example.com"
        assert span_data.status.code == 0

    def test_error_status(self, span_exporter):
        exporter = OpenCensusExporter(TelemetryConfig(), span_exporter=span_exporter)

        exporter.export(_occurrence(status=OccurrenceStatus.ERROR, status_message="timeout"))

        status = span_exporter.span_datas[0].status
        assert status.code != 0
        assert status.message == "timeout"

    def test_span_times_follow_occurrence(self, span_exporter):
        exporter = OpenCensusExporter(TelemetryConfig(), span_exporter=span_exporter)

        exporter.export(
            _occurrence(
                kind=OccurrenceKind.REQUEST,
                span_kind=SpanKind.SERVER,
                duration_ms=1500.0,
                timestamp=datetime(2020, 1, 1, tzinfo=UTC),
            )
        )

        span_data = span_exporter.span_datas[0]
        assert span_data.start_time == "2020-01-01T00:00:00.000000Z"
        assert span_data.end_time == "2020-01-01T00:00:01.500000Z"

    def test_span_without_duration_is_instantaneous(self, span_exporter):
        exporter = OpenCensusExporter(TelemetryConfig(), span_exporter=span_exporter)

        exporter.export(
            _occurrence(
                kind=OccurrenceKind.EVENT,
                span_kind=SpanKind.INTERNAL,
                timestamp=datetime(2021, 6, 15, 12, 30, tzinfo=UTC),
            )
        )

        span_data = span_exporter.span_datas[0]
        assert span_data.start_time == span_data.end_time == "2021-06-15T12:30:00.000000Z"

    def test_each_occurrence_is_a_separate_span(self, span_exporter):
        exporter = OpenCensusExporter(TelemetryConfig(), span_exporter=span_exporter)

        exporter.export(_occurrence(name="first"))
        exporter.export(_occurrence(name="second", span_kind=SpanKind.INTERNAL))

        assert [sd.name for sd in span_exporter.span_datas] == ["first", "second"]
        assert len({sd.context.trace_id for sd in span_exporter.span_datas}) == 2

    def test_zero_sampling_exports_nothing(self, span_exporter):
        exporter = OpenCensusExporter(
            TelemetryConfig(sampling_ratio=0.0), span_exporter=span_exporter
        )

        for _ in range(20):
            exporter.export(_occurrence())

        assert span_exporter.span_datas == []

    def test_counter_registers_view(self, span_exporter):
        exporter = OpenCensusExporter(TelemetryConfig(), span_exporter=span_exporter)

        exporter.add_to_counter("telemetry_bridge_test_counter", 2)
        exporter.add_to_counter("telemetry_bridge_test_counter", 3)

        view_manager = stats_module.stats.view_manager
        assert view_manager.get_view("telemetry_bridge_test_counter") is not None

    def test_flush_pushes_counters(self, span_exporter):
        class RecordingMetricsExporter:
            def __init__(self):
                self.batches = []

            def export_metrics(self, metrics):
                self.batches.append(list(metrics))

        metrics_exporter = RecordingMetricsExporter()
        exporter = OpenCensusExporter(
            TelemetryConfig(), span_exporter=span_exporter, metrics_exporter=metrics_exporter
        )
        exporter.add_to_counter("telemetry_bridge_flushed_counter", 4)

        exporter.flush()

        assert len(metrics_exporter.batches) == 1
        names = [metric.descriptor.name for metric in metrics_exporter.batches[0]]
        assert "telemetry_bridge_flushed_counter" in names

    def test_identity_processor_sets_tags(self, span_exporter):
        config = TelemetryConfig(cloud_role_name="api", cloud_role_instance="api-0")
        exporter = OpenCensusExporter(config, span_exporter=span_exporter)

        class Envelope:
            tags = {}

        envelope = Envelope()
        assert exporter._stamp_identity(envelope) is True
        assert envelope.tags == {"ai.cloud.role": "api", "ai.cloud.roleInstance": "api-0"}


class TestCompositeExporter:
    """Test fan-out to several exporters."""

    def test_fans_out(self, exporter_cls):
        first, second = exporter_cls(), exporter_cls()
        composite = CompositeExporter([first, second])

        composite.export(_occurrence())
        composite.add_to_counter("Load", 2)
        composite.flush()
        composite.shutdown()

        for exporter in (first, second):
            assert len(exporter.occurrences) == 1
            assert exporter.counter_calls == [("Load", 2)]
            assert exporter.flush_count == 1
            assert exporter.shutdown_count == 1

    def test_one_failing_export_does_not_block_others(self, exporter_cls):
        class Broken(exporter_cls):
            def export(self, occurrence):
                raise ConnectionError("down")

        healthy = exporter_cls()
        CompositeExporter([Broken(), healthy]).export(_occurrence())

        assert len(healthy.occurrences) == 1

    def test_flush_failure_propagates_after_draining_all(self, exporter_cls):
        class Broken(exporter_cls):
            def flush(self):
                raise TimeoutError("drain timed out")

        healthy = exporter_cls()
        with pytest.raises(TimeoutError):
            CompositeExporter([Broken(), healthy]).flush()

        assert healthy.flush_count == 1
