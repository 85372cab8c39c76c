"""
Telemetry Exporters

The exporter boundary: finished occurrences and counter increments go in,
transport, batching, and backend encoding stay behind it.

``OpenCensusExporter`` ships occurrences to Azure Monitor (Application
Insights) as opencensus spans and accumulates counters as opencensus stats
views exported by the Azure metrics exporter.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

from opencensus.ext.azure import metrics_exporter as azure_metrics_exporter
from opencensus.ext.azure.trace_exporter import AzureExporter
from opencensus.stats import aggregation as aggregation_module
from opencensus.stats import measure as measure_module
from opencensus.stats import stats as stats_module
from opencensus.stats import view as view_module
from opencensus.tags import tag_map as tag_map_module
from opencensus.trace import base_exporter
from opencensus.trace import span as span_module
from opencensus.trace import stack_trace as stack_trace_module
from opencensus.trace.samplers import ProbabilitySampler
from opencensus.trace.status import Status
from opencensus.trace.tracer import Tracer

from .config import TelemetryConfig
from .events import SpanKind
from .models import Occurrence

logger = logging.getLogger(__name__)

# google.rpc.Code.UNKNOWN
_STATUS_CODE_UNKNOWN = 2

_SPAN_KINDS = {
    SpanKind.INTERNAL: span_module.SpanKind.UNSPECIFIED,
    SpanKind.CLIENT: span_module.SpanKind.CLIENT,
    SpanKind.SERVER: span_module.SpanKind.SERVER,
}


def _to_iso_str(dt: datetime) -> str:
    """Format as the naive-UTC ISO string opencensus uses for span times."""
    return dt.astimezone(UTC).replace(tzinfo=None).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class _RecordedTimeExporter(base_exporter.Exporter):
    """
    Forwards span data stamped with an occurrence's own start and end times.

    opencensus stamps a span with wall-clock times when it opens and
    finishes, which would report every occurrence as instantaneous and
    current.
    """

    def __init__(self, exporter: Any, start: datetime, end: datetime):
        self._exporter = exporter
        self._start_time = _to_iso_str(start)
        self._end_time = _to_iso_str(end)

    def emit(self, span_datas):
        self.export(span_datas)

    def export(self, span_datas):
        self._exporter.export(
            [
                span_data._replace(start_time=self._start_time, end_time=self._end_time)
                for span_data in span_datas
            ]
        )


class TelemetryExporter(ABC):
    """Accepts finished occurrences and counter increments and ships them."""

    @abstractmethod
    def export(self, occurrence: Occurrence) -> None:
        """Ship one finished occurrence."""

    @abstractmethod
    def add_to_counter(self, name: str, delta: int) -> None:
        """Add a delta to the monotonic counter for a metric name."""

    def flush(self) -> None:
        """Drain pending data before returning."""

    def shutdown(self) -> None:
        """Release transport resources."""


class CompositeExporter(TelemetryExporter):
    """Fans every call out to several exporters."""

    def __init__(self, exporters: Iterable[TelemetryExporter]):
        self.exporters = list(exporters)

    def export(self, occurrence: Occurrence) -> None:
        for exporter in self.exporters:
            try:
                exporter.export(occurrence)
            except Exception as e:
                logger.warning(f"[Telemetry] {type(exporter).__name__} failed to export: {e}")

    def add_to_counter(self, name: str, delta: int) -> None:
        for exporter in self.exporters:
            try:
                exporter.add_to_counter(name, delta)
            except Exception as e:
                logger.warning(f"[Telemetry] {type(exporter).__name__} failed to count: {e}")

    def flush(self) -> None:
        errors = []
        for exporter in self.exporters:
            try:
                exporter.flush()
            except Exception as e:
                errors.append(e)
        if errors:
            raise errors[0]

    def shutdown(self) -> None:
        for exporter in self.exporters:
            try:
                exporter.shutdown()
            except Exception as e:
                logger.warning(f"[Telemetry] {type(exporter).__name__} failed to shut down: {e}")


class OpenCensusExporter(TelemetryExporter):
    """
    Azure Monitor exporter built on opencensus.

    Each occurrence becomes its own single-span trace, so the sampling
    decision (ProbabilitySampler with the configured ratio) is made per
    occurrence.

    Args:
        config: Telemetry configuration
        span_exporter: opencensus trace exporter; defaults to AzureExporter
        metrics_exporter: opencensus metrics exporter; defaults to the Azure
            metrics exporter when the span exporter is also defaulted
    """

    def __init__(
        self,
        config: TelemetryConfig,
        span_exporter: Any | None = None,
        metrics_exporter: Any | None = None,
    ):
        self._config = config
        self._sampler = ProbabilitySampler(rate=config.sampling_ratio)
        self._measures: dict[str, measure_module.MeasureInt] = {}
        self._measures_lock = threading.Lock()

        if span_exporter is None:
            connection_string = config.resolved_connection_string()
            if not connection_string:
                raise ValueError(
                    "A connection string or instrumentation key is required for Azure Monitor"
                )

            span_exporter = AzureExporter(
                connection_string=connection_string,
                timeout=float(config.timeout_seconds),
            )
            span_exporter.add_telemetry_processor(self._stamp_identity)

            if metrics_exporter is None:
                metrics_exporter = azure_metrics_exporter.new_metrics_exporter(
                    connection_string=connection_string,
                    export_interval=float(config.flush_interval_seconds),
                    enable_standard_metrics=False,
                )
                metrics_exporter.add_telemetry_processor(self._stamp_identity)

        self.span_exporter = span_exporter
        self.metrics_exporter = metrics_exporter

    def _stamp_identity(self, envelope: Any) -> bool:
        """Telemetry processor: set cloud role and version tags on every envelope."""
        tags = {
            "ai.cloud.role": self._config.cloud_role_name,
            "ai.cloud.roleInstance": self._config.cloud_role_instance,
            "ai.application.ver": self._config.app_version,
        }
        for key, value in tags.items():
            if value:
                envelope.tags[key] = value
        return True

    def export(self, occurrence: Occurrence) -> None:
        start = occurrence.timestamp
        end = start + timedelta(milliseconds=occurrence.duration_ms or 0)
        tracer = Tracer(
            exporter=_RecordedTimeExporter(self.span_exporter, start, end),
            sampler=self._sampler,
        )
        with tracer.span(name=occurrence.name) as span:
            span.span_kind = _SPAN_KINDS[occurrence.span_kind]
            for key, value in occurrence.attributes.items():
                span.add_attribute(key, value)

            exception = occurrence.exception
            if exception is not None and exception.__traceback__ is not None:
                span.stack_trace = stack_trace_module.StackTrace.from_traceback(
                    exception.__traceback__
                )

            if occurrence.is_error:
                span.status = Status(
                    code=_STATUS_CODE_UNKNOWN, message=occurrence.status_message
                )
            else:
                span.status = Status.as_ok()

    def _measure_for(self, name: str) -> measure_module.MeasureInt:
        with self._measures_lock:
            measure = self._measures.get(name)
            if measure is None:
                measure = measure_module.MeasureInt(name, f"Accumulated {name}", "1")
                view = view_module.View(
                    name,
                    f"Accumulated {name}",
                    [],
                    measure,
                    aggregation_module.SumAggregation(),
                )
                stats_module.stats.view_manager.register_view(view)
                self._measures[name] = measure
            return measure

    def add_to_counter(self, name: str, delta: int) -> None:
        measure = self._measure_for(name)
        mmap = stats_module.stats.stats_recorder.new_measurement_map()
        mmap.measure_int_put(measure, delta)
        mmap.record(tag_map_module.TagMap())

    def flush(self) -> None:
        # AzureExporter buffers span data in a local queue drained by a worker thread
        queue = getattr(self.span_exporter, "_queue", None)
        if queue is not None and hasattr(queue, "flush"):
            queue.flush(timeout=float(self._config.timeout_seconds))

        # Counters otherwise wait for the next periodic metrics export
        if self.metrics_exporter is not None and hasattr(self.metrics_exporter, "export_metrics"):
            self.metrics_exporter.export_metrics(stats_module.stats.get_metrics())

    def shutdown(self) -> None:
        for exporter in (self.metrics_exporter, self.span_exporter):
            if exporter is not None and hasattr(exporter, "shutdown"):
                exporter.shutdown()
