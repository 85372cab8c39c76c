"""Telemetry data models.

One input model per occurrence kind, each enumerating its optional fields
explicitly, and the finished ``Occurrence`` record handed to the exporter.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .events import OccurrenceKind, OccurrenceStatus, SeverityLevel, SpanKind

AttributeValue = str | bool | int | float


def _epoch_ms_to_datetime(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    return value


def _timedelta_to_ms(value: Any) -> Any:
    if isinstance(value, timedelta):
        return value.total_seconds() * 1000
    return value


class TelemetryItem(BaseModel):
    """Fields shared by every occurrence kind."""

    model_config = ConfigDict(frozen=True)

    properties: dict[Any, Any] | None = None
    metrics: dict[Any, Any] | None = None
    timestamp: datetime | None = Field(
        default=None, description="Explicit occurrence time (datetime or epoch milliseconds)"
    )

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> Any:
        return _epoch_ms_to_datetime(value)


class EventTelemetry(TelemetryItem):
    """A named custom event."""

    name: str


class TraceTelemetry(TelemetryItem):
    """A log-style trace message."""

    message: str
    severity: SeverityLevel = SeverityLevel.INFO

    @field_validator("severity", mode="before")
    @classmethod
    def _parse_severity(cls, value: Any) -> SeverityLevel:
        return SeverityLevel.parse(value)


class ExceptionTelemetry(TelemetryItem):
    """An exception object, or just a message when no object is at hand."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    exception: BaseException | None = None
    message: str | None = None


class MetricTelemetry(TelemetryItem):
    name: str
    value: float


class DependencyTelemetry(TelemetryItem):
    """A call from this application to an external component."""

    name: str
    type: str
    target: str
    success: bool
    duration_ms: float
    data: str | None = Field(default=None, description="Command or query text of the call")

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        return _timedelta_to_ms(value)


class PageViewTelemetry(TelemetryItem):
    name: str
    url: str | None = None
    duration_ms: float | None = None

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        return _timedelta_to_ms(value)


class AvailabilityTelemetry(TelemetryItem):
    """Result of an availability (ping/health) test."""

    name: str
    duration_ms: float
    success: bool
    message: str | None = None
    run_location: str | None = None

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        return _timedelta_to_ms(value)


class RequestTelemetry(TelemetryItem):
    """An incoming request handled by this application."""

    name: str
    url: str
    method: str
    duration_ms: float
    success: bool
    status_code: int | None = None

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        return _timedelta_to_ms(value)


class Occurrence(BaseModel):
    """A finished occurrence record, consumed once by the exporter."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: OccurrenceKind
    name: str
    span_kind: SpanKind = SpanKind.INTERNAL
    status: OccurrenceStatus = OccurrenceStatus.OK
    status_message: str | None = None
    attributes: dict[str, AttributeValue] = Field(default_factory=dict)
    properties: dict[str, str] = Field(default_factory=dict)
    metrics: dict[str, float] = Field(default_factory=dict)
    duration_ms: float | None = None
    severity: SeverityLevel | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    exception: BaseException | None = None

    @property
    def is_error(self) -> bool:
        return self.status == OccurrenceStatus.ERROR
