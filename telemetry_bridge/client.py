"""
Telemetry Client

Runs the reporting pipeline for one exporter: normalize the typed input,
redact properties, attach context, and hand the finished occurrence to the
exporter. A client without an exporter is a silent no-op, and no reporting
call ever raises into the caller.
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from .config import TelemetryConfig
from .context import AmbientContextStore, get_ambient_store, get_request_context
from .counters import MetricCounters
from .enricher import enrich
from .events import SeverityLevel
from .exporter import TelemetryExporter
from .models import (
    AvailabilityTelemetry,
    DependencyTelemetry,
    EventTelemetry,
    ExceptionTelemetry,
    MetricTelemetry,
    Occurrence,
    PageViewTelemetry,
    RequestTelemetry,
    TelemetryItem,
    TraceTelemetry,
)
from .normalizer import normalize

logger = logging.getLogger(__name__)

Properties = Mapping[Any, Any] | None
Metrics = Mapping[str, float] | None


class TelemetryClient:
    """
    Reports occurrences through a single exporter.

    Args:
        config: Telemetry configuration (defaults to an all-default config)
        exporter: Exporter handle; None makes every report a no-op
        context_store: Ambient context store (defaults to the process-wide one)
        counters: Monotonic counters (a fresh set when omitted)
    """

    def __init__(
        self,
        config: TelemetryConfig | None = None,
        exporter: TelemetryExporter | None = None,
        context_store: AmbientContextStore | None = None,
        counters: MetricCounters | None = None,
    ):
        self.config = config or TelemetryConfig(enable_dev_logger=False)
        self.exporter = exporter
        self.context_store = context_store or get_ambient_store()
        self.counters = counters or MetricCounters()

    @property
    def is_ready(self) -> bool:
        return self.exporter is not None

    def build(self, item: TelemetryItem) -> Occurrence:
        """Normalize and enrich an item without exporting it."""
        occurrence = normalize(item, self.config)
        return enrich(
            occurrence,
            self.config,
            self.context_store.snapshot(),
            get_request_context(),
        )

    def track(self, item: TelemetryItem) -> Occurrence | None:
        """
        Report a typed telemetry item.

        Returns:
            The exported occurrence, or None if nothing was exported
        """
        exporter = self.exporter
        if exporter is None:
            return None

        try:
            occurrence = self.build(item)
            if isinstance(item, MetricTelemetry):
                delta = self.counters.add(item.name, item.value)
                if delta:
                    exporter.add_to_counter(item.name, delta)
            exporter.export(occurrence)
            return occurrence
        except Exception as e:
            logger.warning(f"[Telemetry] Dropped {type(item).__name__}: {e}")
            return None

    def _track(self, model: type[TelemetryItem], **fields: Any) -> Occurrence | None:
        if self.exporter is None:
            return None
        try:
            item = model(**fields)
        except Exception as e:
            logger.warning(f"[Telemetry] Invalid {model.__name__}: {e}")
            return None
        return self.track(item)

    def track_event(
        self,
        name: str,
        properties: Properties = None,
        metrics: Metrics = None,
        *,
        timestamp: datetime | int | None = None,
    ) -> Occurrence | None:
        return self._track(
            EventTelemetry,
            name=name,
            properties=properties,
            metrics=metrics,
            timestamp=timestamp,
        )

    def track_trace(
        self,
        message: str,
        severity: SeverityLevel | str | int = SeverityLevel.INFO,
        properties: Properties = None,
        metrics: Metrics = None,
    ) -> Occurrence | None:
        return self._track(
            TraceTelemetry,
            message=message,
            severity=severity,
            properties=properties,
            metrics=metrics,
        )

    def track_exception(
        self,
        exception: BaseException | str,
        properties: Properties = None,
        metrics: Metrics = None,
    ) -> Occurrence | None:
        """Report an exception object, or a plain message describing one."""
        if isinstance(exception, BaseException):
            fields = {"exception": exception}
        else:
            fields = {"message": str(exception)}
        return self._track(ExceptionTelemetry, properties=properties, metrics=metrics, **fields)

    def track_metric(
        self,
        name: str,
        value: float,
        properties: Properties = None,
        metrics: Metrics = None,
    ) -> Occurrence | None:
        return self._track(
            MetricTelemetry,
            name=name,
            value=value,
            properties=properties,
            metrics=metrics,
        )

    def track_dependency(
        self,
        name: str,
        type: str,
        target: str,
        success: bool,
        duration_ms: float | timedelta,
        *,
        data: str | None = None,
        properties: Properties = None,
        metrics: Metrics = None,
    ) -> Occurrence | None:
        return self._track(
            DependencyTelemetry,
            name=name,
            type=type,
            target=target,
            success=success,
            duration_ms=duration_ms,
            data=data,
            properties=properties,
            metrics=metrics,
        )

    def track_page_view(
        self,
        name: str,
        properties: Properties = None,
        metrics: Metrics = None,
        *,
        url: str | None = None,
        duration_ms: float | timedelta | None = None,
    ) -> Occurrence | None:
        return self._track(
            PageViewTelemetry,
            name=name,
            url=url,
            duration_ms=duration_ms,
            properties=properties,
            metrics=metrics,
        )

    def track_availability(
        self,
        name: str,
        duration_ms: float | timedelta,
        success: bool,
        message: str | None = None,
        *,
        run_location: str | None = None,
        properties: Properties = None,
        metrics: Metrics = None,
    ) -> Occurrence | None:
        return self._track(
            AvailabilityTelemetry,
            name=name,
            duration_ms=duration_ms,
            success=success,
            message=message,
            run_location=run_location,
            properties=properties,
            metrics=metrics,
        )

    def track_request(
        self,
        name: str,
        url: str,
        method: str,
        duration_ms: float | timedelta,
        success: bool,
        *,
        status_code: int | None = None,
        properties: Properties = None,
        metrics: Metrics = None,
    ) -> Occurrence | None:
        return self._track(
            RequestTelemetry,
            name=name,
            url=url,
            method=method,
            duration_ms=duration_ms,
            success=success,
            status_code=status_code,
            properties=properties,
            metrics=metrics,
        )

    def flush(self) -> None:
        """Force the exporter to drain; exporter failures propagate."""
        if self.exporter is not None:
            self.exporter.flush()

    def shutdown(self) -> None:
        """Flush and release the exporter; the client becomes a no-op."""
        exporter, self.exporter = self.exporter, None
        if exporter is None:
            return
        try:
            exporter.flush()
        finally:
            exporter.shutdown()
