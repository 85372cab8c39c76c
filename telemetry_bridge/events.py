"""
Telemetry Vocabulary

Occurrence kinds, severity levels, routing hints, and the attribute names
stamped on every exported record. Keeping the names in one place makes the
exported shape easy to query on the backend side.
"""

from enum import Enum, IntEnum


class OccurrenceKind(str, Enum):
    """Kind of a reported occurrence; the value is the ``telemetry.type`` tag."""

    EVENT = "event"
    TRACE = "trace"
    EXCEPTION = "exception"
    METRIC = "metric"
    DEPENDENCY = "dependency"
    PAGE_VIEW = "pageview"
    AVAILABILITY = "availability"
    REQUEST = "request"


class SeverityLevel(IntEnum):
    """Trace severity, ordered VERBOSE < INFO < WARN < ERROR < CRITICAL."""

    VERBOSE = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    CRITICAL = 4

    @classmethod
    def parse(cls, value: "str | int | SeverityLevel | None") -> "SeverityLevel":
        """
        Parse a severity from a level name or ordinal.

        Names are matched case-insensitively. Anything unrecognized maps to INFO.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                return cls.INFO
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper(), cls.INFO)
        return cls.INFO


class SpanKind(str, Enum):
    """Routing hint for the exporter."""

    INTERNAL = "internal"
    CLIENT = "client"
    SERVER = "server"


class OccurrenceStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


class TelemetryAttributes:
    """Centralized attribute names."""

    TELEMETRY_TYPE = "telemetry.type"
    PROPERTIES = "properties"

    # Event
    EVENT_TIMESTAMP = "event.timestamp"

    # Trace
    LOG_MESSAGE = "log.message"
    LOG_SEVERITY = "log.severity"
    LOG_SEVERITY_LEVEL = "log.severity_level"

    # Exception
    EXCEPTION_TYPE = "exception.type"
    EXCEPTION_MESSAGE = "exception.message"
    EXCEPTION_STACKTRACE = "exception.stacktrace"

    # Metric
    METRIC_NAME = "metric.name"
    METRIC_VALUE = "metric.value"

    # Dependency
    DEPENDENCY_TYPE = "dependency.type"
    DEPENDENCY_TARGET = "dependency.target"
    DEPENDENCY_DATA = "dependency.data"
    DEPENDENCY_SUCCESS = "dependency.success"
    DEPENDENCY_DURATION_MS = "dependency.duration_ms"

    # Page view
    PAGE_NAME = "page.name"
    PAGE_URL = "page.url"
    PAGE_DURATION_MS = "page.duration_ms"

    # Availability
    AVAILABILITY_NAME = "availability.name"
    AVAILABILITY_DURATION_MS = "availability.duration_ms"
    AVAILABILITY_SUCCESS = "availability.success"
    AVAILABILITY_MESSAGE = "availability.message"
    AVAILABILITY_RUN_LOCATION = "availability.run_location"

    # Request
    HTTP_URL = "http.url"
    HTTP_METHOD = "http.method"
    HTTP_DURATION_MS = "http.duration_ms"
    HTTP_SUCCESS = "http.success"
    HTTP_STATUS_CODE = "http.status_code"

    # Configuration identity
    CLOUD_ROLE_NAME = "cloud.role_name"
    CLOUD_ROLE_INSTANCE = "cloud.role_instance"
    APPLICATION_VERSION = "application.version"
    INSTRUMENTATION_KEY = "instrumentation_key"

    # Ambient context
    USER_ID = "user.id"
    SESSION_ID = "session.id"
    DEVICE_ID = "device.id"
    APP_VERSION = "app.version"


class SpanNames:
    """Fixed span names for kinds that do not use the caller's name."""

    TRACE = "Trace"
    EXCEPTION = "Exception"
    METRIC = "Metric"
    PAGE_VIEW = "PageView"
    AVAILABILITY = "Availability"


def parse_severity(value: str | int | SeverityLevel | None) -> SeverityLevel:
    """Parse a severity level; unknown input maps to INFO."""
    return SeverityLevel.parse(value)
