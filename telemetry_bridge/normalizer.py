"""
Occurrence Normalization

Turns each typed telemetry input into a canonical ``Occurrence``: kind tag,
span name, routing hints, status, and a flat attribute set built from the
kind-specific fields plus the redacted properties and the metrics.
"""

import json
import logging
import traceback
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from .config import TelemetryConfig
from .events import OccurrenceKind, OccurrenceStatus, SpanKind, SpanNames, TelemetryAttributes
from .models import (
    AttributeValue,
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
from .redaction import redact

logger = logging.getLogger(__name__)


def _stringify(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        if isinstance(value, (set, frozenset)):
            value = sorted(value, key=str)
        return json.dumps(value, default=str, sort_keys=True)
    return str(value)


def normalize_properties(
    properties: Mapping[Any, Any] | None, config: TelemetryConfig
) -> dict[str, str]:
    """
    Convert a property bag into redacted string properties.

    Nested mappings and sequences are JSON-encoded, None values are dropped,
    and long values are truncated when payload truncation is enabled.
    """
    if not properties:
        return {}

    flattened: dict[str, str] = {}
    for key, value in properties.items():
        text = _stringify(value)
        if text is None:
            continue
        if config.truncate_large_payloads and len(text) > config.max_payload_size:
            text = text[: config.max_payload_size]
        flattened[str(key)] = text

    return redact(flattened, config.sensitive_keys) or {}


def normalize_metrics(metrics: Mapping[Any, Any] | None) -> dict[str, float]:
    """Keep the numeric entries of a metric mapping as floats."""
    if not metrics:
        return {}

    result: dict[str, float] = {}
    for key, value in metrics.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.debug(f"[Telemetry] Skipping non-numeric metric {key!r}")
            continue
        result[str(key)] = float(value)
    return result


def _status(success: bool) -> OccurrenceStatus:
    return OccurrenceStatus.OK if success else OccurrenceStatus.ERROR


def _build(
    kind: OccurrenceKind,
    name: str,
    item: TelemetryItem,
    config: TelemetryConfig,
    fields: dict[str, AttributeValue | None],
    span_kind: SpanKind = SpanKind.INTERNAL,
    status: OccurrenceStatus = OccurrenceStatus.OK,
    **extra: Any,
) -> Occurrence:
    properties = normalize_properties(item.properties, config)
    metrics = normalize_metrics(item.metrics)

    attributes: dict[str, AttributeValue] = {}
    if config.property_encoding == "json":
        if properties:
            attributes[TelemetryAttributes.PROPERTIES] = json.dumps(properties, sort_keys=True)
    else:
        attributes.update(properties)
    attributes.update(metrics)
    attributes.update({key: value for key, value in fields.items() if value is not None})
    attributes[TelemetryAttributes.TELEMETRY_TYPE] = kind.value

    return Occurrence(
        kind=kind,
        name=name,
        span_kind=span_kind,
        status=status,
        attributes=attributes,
        properties=properties,
        metrics=metrics,
        timestamp=item.timestamp or datetime.now(UTC),
        **extra,
    )


def normalize_event(item: EventTelemetry, config: TelemetryConfig) -> Occurrence:
    fields: dict[str, AttributeValue | None] = {}
    if item.timestamp is not None:
        fields[TelemetryAttributes.EVENT_TIMESTAMP] = int(item.timestamp.timestamp() * 1000)
    return _build(OccurrenceKind.EVENT, item.name, item, config, fields)


def normalize_trace(item: TraceTelemetry, config: TelemetryConfig) -> Occurrence:
    fields = {
        TelemetryAttributes.LOG_MESSAGE: item.message,
        TelemetryAttributes.LOG_SEVERITY: item.severity.name,
        TelemetryAttributes.LOG_SEVERITY_LEVEL: int(item.severity),
    }
    return _build(
        OccurrenceKind.TRACE, SpanNames.TRACE, item, config, fields, severity=item.severity
    )


def normalize_exception(item: ExceptionTelemetry, config: TelemetryConfig) -> Occurrence:
    """Exceptions always carry error status."""
    exception = item.exception
    if exception is not None:
        exception_type = type(exception).__name__
        message = item.message or str(exception)
        stacktrace = (
            "".join(traceback.format_exception(exception))
            if exception.__traceback__ is not None
            else None
        )
    else:
        exception_type = "Exception"
        message = item.message or ""
        stacktrace = None

    fields = {
        TelemetryAttributes.EXCEPTION_TYPE: exception_type,
        TelemetryAttributes.EXCEPTION_MESSAGE: message,
        TelemetryAttributes.EXCEPTION_STACKTRACE: stacktrace,
    }
    return _build(
        OccurrenceKind.EXCEPTION,
        SpanNames.EXCEPTION,
        item,
        config,
        fields,
        status=OccurrenceStatus.ERROR,
        status_message=message,
        exception=exception,
    )


def normalize_metric(item: MetricTelemetry, config: TelemetryConfig) -> Occurrence:
    """The value attribute keeps full precision; counter truncation happens elsewhere."""
    fields = {
        TelemetryAttributes.METRIC_NAME: item.name,
        TelemetryAttributes.METRIC_VALUE: item.value,
    }
    return _build(OccurrenceKind.METRIC, SpanNames.METRIC, item, config, fields)


def normalize_dependency(item: DependencyTelemetry, config: TelemetryConfig) -> Occurrence:
    fields = {
        TelemetryAttributes.DEPENDENCY_TYPE: item.type,
        TelemetryAttributes.DEPENDENCY_TARGET: item.target,
        TelemetryAttributes.DEPENDENCY_DATA: item.data,
        TelemetryAttributes.DEPENDENCY_SUCCESS: item.success,
        TelemetryAttributes.DEPENDENCY_DURATION_MS: item.duration_ms,
    }
    return _build(
        OccurrenceKind.DEPENDENCY,
        item.name,
        item,
        config,
        fields,
        span_kind=SpanKind.CLIENT,
        status=_status(item.success),
        duration_ms=item.duration_ms,
    )


def normalize_page_view(item: PageViewTelemetry, config: TelemetryConfig) -> Occurrence:
    fields = {
        TelemetryAttributes.PAGE_NAME: item.name,
        TelemetryAttributes.PAGE_URL: item.url,
        TelemetryAttributes.PAGE_DURATION_MS: item.duration_ms,
    }
    return _build(
        OccurrenceKind.PAGE_VIEW,
        SpanNames.PAGE_VIEW,
        item,
        config,
        fields,
        duration_ms=item.duration_ms,
    )


def normalize_availability(item: AvailabilityTelemetry, config: TelemetryConfig) -> Occurrence:
    fields = {
        TelemetryAttributes.AVAILABILITY_NAME: item.name,
        TelemetryAttributes.AVAILABILITY_DURATION_MS: item.duration_ms,
        TelemetryAttributes.AVAILABILITY_SUCCESS: item.success,
        TelemetryAttributes.AVAILABILITY_MESSAGE: item.message,
        TelemetryAttributes.AVAILABILITY_RUN_LOCATION: item.run_location,
    }
    return _build(
        OccurrenceKind.AVAILABILITY,
        SpanNames.AVAILABILITY,
        item,
        config,
        fields,
        status=_status(item.success),
        status_message=None if item.success else item.message,
        duration_ms=item.duration_ms,
    )


def normalize_request(item: RequestTelemetry, config: TelemetryConfig) -> Occurrence:
    fields = {
        TelemetryAttributes.HTTP_URL: item.url,
        TelemetryAttributes.HTTP_METHOD: item.method,
        TelemetryAttributes.HTTP_DURATION_MS: item.duration_ms,
        TelemetryAttributes.HTTP_SUCCESS: item.success,
        TelemetryAttributes.HTTP_STATUS_CODE: item.status_code,
    }
    return _build(
        OccurrenceKind.REQUEST,
        item.name,
        item,
        config,
        fields,
        span_kind=SpanKind.SERVER,
        status=_status(item.success),
        duration_ms=item.duration_ms,
    )


_NORMALIZERS = {
    EventTelemetry: normalize_event,
    TraceTelemetry: normalize_trace,
    ExceptionTelemetry: normalize_exception,
    MetricTelemetry: normalize_metric,
    DependencyTelemetry: normalize_dependency,
    PageViewTelemetry: normalize_page_view,
    AvailabilityTelemetry: normalize_availability,
    RequestTelemetry: normalize_request,
}


def normalize(item: TelemetryItem, config: TelemetryConfig) -> Occurrence:
    """Dispatch to the normalizer for the item's kind."""
    normalizer = _NORMALIZERS.get(type(item))
    if normalizer is None:
        raise TypeError(f"Unsupported telemetry item: {type(item).__name__}")
    return normalizer(item, config)
