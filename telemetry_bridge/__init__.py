"""
Telemetry Bridge

Central export point for all telemetry functionality.
Import everything from this single entry point.
"""

from .client import TelemetryClient
from .config import DEFAULT_SENSITIVE_KEYS, TelemetryConfig, get_telemetry_config
from .context import (
    AmbientContext,
    AmbientContextStore,
    clear_custom_dimensions,
    clear_request_context,
    generate_correlation_id,
    get_ambient_context,
    get_request_context,
    remove_custom_dimension,
    set_app_version,
    set_custom_dimension,
    set_device_id,
    set_request_context,
    set_session_id,
    set_user_id,
)
from .counters import MetricCounters
from .dev_logger import (
    DevLogExporter,
    clear_dev_logs,
    export_dev_logs,
    get_dev_log_stats,
    get_dev_logs,
    is_debug_enabled,
    set_debug,
)
from .enricher import enrich, enrich_attributes
from .events import (
    OccurrenceKind,
    OccurrenceStatus,
    SeverityLevel,
    SpanKind,
    TelemetryAttributes,
    parse_severity,
)
from .exporter import CompositeExporter, OpenCensusExporter, TelemetryExporter
from .middleware import TelemetryMiddleware
from .models import (
    AvailabilityTelemetry,
    DependencyTelemetry,
    EventTelemetry,
    ExceptionTelemetry,
    MetricTelemetry,
    Occurrence,
    PageViewTelemetry,
    RequestTelemetry,
    TraceTelemetry,
)
from .normalizer import normalize
from .redaction import REDACTED, is_sensitive_key, redact
from .tracker import (
    flush_telemetry,
    get_counter_value,
    get_telemetry_client,
    initialize_telemetry,
    is_initialized,
    shutdown_telemetry,
    track_availability,
    track_debug,
    track_dependency,
    track_error,
    track_event,
    track_exception,
    track_info,
    track_metric,
    track_page_view,
    track_request,
    track_trace,
    track_warning,
)

__all__ = [
    # Config
    "TelemetryConfig",
    "get_telemetry_config",
    "DEFAULT_SENSITIVE_KEYS",
    # Context
    "AmbientContext",
    "AmbientContextStore",
    "get_ambient_context",
    "set_user_id",
    "set_session_id",
    "set_device_id",
    "set_app_version",
    "set_custom_dimension",
    "remove_custom_dimension",
    "clear_custom_dimensions",
    "get_request_context",
    "set_request_context",
    "clear_request_context",
    "generate_correlation_id",
    # Vocabulary
    "OccurrenceKind",
    "OccurrenceStatus",
    "SeverityLevel",
    "SpanKind",
    "TelemetryAttributes",
    "parse_severity",
    # Models
    "EventTelemetry",
    "TraceTelemetry",
    "ExceptionTelemetry",
    "MetricTelemetry",
    "DependencyTelemetry",
    "PageViewTelemetry",
    "AvailabilityTelemetry",
    "RequestTelemetry",
    "Occurrence",
    # Pipeline
    "REDACTED",
    "redact",
    "is_sensitive_key",
    "normalize",
    "enrich",
    "enrich_attributes",
    "MetricCounters",
    "TelemetryClient",
    # Exporters
    "TelemetryExporter",
    "CompositeExporter",
    "OpenCensusExporter",
    # Tracking
    "initialize_telemetry",
    "get_telemetry_client",
    "is_initialized",
    "get_counter_value",
    "track_event",
    "track_trace",
    "track_info",
    "track_warning",
    "track_error",
    "track_debug",
    "track_exception",
    "track_metric",
    "track_dependency",
    "track_page_view",
    "track_availability",
    "track_request",
    "flush_telemetry",
    "shutdown_telemetry",
    # Dev Logger
    "DevLogExporter",
    "export_dev_logs",
    "clear_dev_logs",
    "get_dev_logs",
    "get_dev_log_stats",
    "set_debug",
    "is_debug_enabled",
    # Middleware
    "TelemetryMiddleware",
]
