"""
Telemetry Tracker

Process-wide reporting facade. Call ``initialize_telemetry`` once at
application startup; until then (or when telemetry is disabled) every
``track_*`` call is a silent no-op.
"""

import logging
from datetime import datetime, timedelta

from .client import Metrics, Properties, TelemetryClient
from .config import TelemetryConfig, get_telemetry_config
from .counters import MetricCounters
from .dev_logger import DevLogExporter
from .events import SeverityLevel
from .exporter import CompositeExporter, OpenCensusExporter, TelemetryExporter
from .models import Occurrence

logger = logging.getLogger(__name__)

# Global instance (singleton); None until initialized
_client: TelemetryClient | None = None

# Counters outlive re-initialization
_counters = MetricCounters()


def _build_exporter(config: TelemetryConfig) -> TelemetryExporter | None:
    exporters: list[TelemetryExporter] = []

    if config.enable_dev_logger:
        exporters.append(DevLogExporter(max_events=config.dev_logger_max_events))

    if config.resolved_connection_string():
        try:
            exporters.append(OpenCensusExporter(config))
        except Exception as e:
            logger.error(f"[Telemetry] Failed to initialize Azure Monitor exporter: {e}")
    else:
        logger.warning(
            "[Telemetry] No connection string or instrumentation key found. "
            "Azure Monitor export disabled."
        )

    if not exporters:
        return None
    if len(exporters) == 1:
        return exporters[0]
    return CompositeExporter(exporters)


def _replace_client(client: TelemetryClient | None) -> None:
    global _client
    previous, _client = _client, client
    if previous is not None:
        try:
            previous.shutdown()
        except Exception as e:
            logger.warning(f"[Telemetry] Failed to shut down previous exporter: {e}")


def initialize_telemetry(
    endpoint: str | None = None,
    config: TelemetryConfig | None = None,
    exporter: TelemetryExporter | None = None,
) -> bool:
    """
    Initialize telemetry.

    Call this once at application startup. Calling it again replaces the
    previous configuration and exporter (last call wins); ambient context
    and counters are kept.

    Args:
        endpoint: Ingestion endpoint, overrides config.endpoint when given
        config: Telemetry configuration (defaults to the environment config)
        exporter: Exporter to use instead of the one built from config

    Returns:
        True if telemetry is active, False if disabled or no exporter is available
    """
    try:
        config = config or get_telemetry_config()
        if endpoint is not None:
            config = config.model_copy(update={"endpoint": endpoint})
    except Exception as e:
        logger.error(f"[Telemetry] Invalid telemetry configuration: {e}")
        return False

    if not config.enabled:
        logger.info("[Telemetry] Telemetry disabled by configuration")
        _replace_client(None)
        return False

    if exporter is None:
        exporter = _build_exporter(config)
    if exporter is None:
        logger.warning("[Telemetry] No exporter available. Telemetry disabled.")
        _replace_client(None)
        return False

    _replace_client(TelemetryClient(config=config, exporter=exporter, counters=_counters))
    logger.info(f"[Telemetry] Initialized with {type(exporter).__name__}")
    return True


def get_telemetry_client() -> TelemetryClient | None:
    """
    Get the active telemetry client.

    Returns:
        Client instance if initialized, None otherwise
    """
    return _client


def is_initialized() -> bool:
    return _client is not None


def get_metric_counters() -> MetricCounters:
    return _counters


def get_counter_value(name: str) -> int:
    """Get the accumulated (truncated) counter total for a metric name."""
    return _counters.get(name)


def track_event(
    name: str,
    properties: Properties = None,
    metrics: Metrics = None,
    *,
    timestamp: datetime | int | None = None,
) -> Occurrence | None:
    """
    Track a custom event.

    Automatically includes configuration identity, ambient context, and
    request context; sensitive properties are redacted.

    Args:
        name: Event name
        properties: Additional event properties
        metrics: Numeric measurements attached to the event
        timestamp: Explicit event time (datetime or epoch milliseconds)
    """
    client = _client
    if client is None:
        return None
    return client.track_event(name, properties, metrics, timestamp=timestamp)


def track_trace(
    message: str,
    severity: SeverityLevel | str | int = SeverityLevel.INFO,
    properties: Properties = None,
    metrics: Metrics = None,
) -> Occurrence | None:
    """
    Track a trace message.

    Args:
        message: Trace message
        severity: Severity level or name (unknown names map to INFO)
        properties: Additional trace properties
        metrics: Numeric measurements
    """
    client = _client
    if client is None:
        return None
    return client.track_trace(message, severity, properties, metrics)


def track_info(message: str, properties: Properties = None) -> Occurrence | None:
    return track_trace(message, SeverityLevel.INFO, properties)


def track_warning(message: str, properties: Properties = None) -> Occurrence | None:
    return track_trace(message, SeverityLevel.WARN, properties)


def track_error(message: str, properties: Properties = None) -> Occurrence | None:
    return track_trace(message, SeverityLevel.ERROR, properties)


def track_debug(message: str, properties: Properties = None) -> Occurrence | None:
    return track_trace(message, SeverityLevel.VERBOSE, properties)


def track_exception(
    exception: BaseException | str,
    properties: Properties = None,
    metrics: Metrics = None,
) -> Occurrence | None:
    """
    Track an exception/error.

    Args:
        exception: Exception instance, or a message when no instance exists
        properties: Additional error properties
        metrics: Numeric measurements
    """
    client = _client
    if client is None:
        return None
    return client.track_exception(exception, properties, metrics)


def track_metric(
    name: str,
    value: float,
    properties: Properties = None,
    metrics: Metrics = None,
) -> Occurrence | None:
    """
    Track a custom metric.

    The value is added (truncated toward zero) to a monotonic counter of the
    same name and reported at full precision on the metric record.

    Args:
        name: Metric name
        value: Metric value
        properties: Additional metric properties
        metrics: Additional numeric measurements
    """
    client = _client
    if client is None:
        return None
    return client.track_metric(name, value, properties, metrics)


def track_dependency(
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
    """
    Track a call to an external dependency (database, HTTP service, file).

    Args:
        name: Dependency call name
        type: Dependency type (SQL, HTTP, ...)
        target: Called target (server, database, host)
        success: Whether the call succeeded
        duration_ms: Call duration in milliseconds (or a timedelta)
        data: Command or query text
    """
    client = _client
    if client is None:
        return None
    return client.track_dependency(
        name,
        type,
        target,
        success,
        duration_ms,
        data=data,
        properties=properties,
        metrics=metrics,
    )


def track_page_view(
    name: str,
    properties: Properties = None,
    metrics: Metrics = None,
    *,
    url: str | None = None,
    duration_ms: float | timedelta | None = None,
) -> Occurrence | None:
    client = _client
    if client is None:
        return None
    return client.track_page_view(name, properties, metrics, url=url, duration_ms=duration_ms)


def track_availability(
    name: str,
    duration_ms: float | timedelta,
    success: bool,
    message: str | None = None,
    *,
    run_location: str | None = None,
    properties: Properties = None,
    metrics: Metrics = None,
) -> Occurrence | None:
    client = _client
    if client is None:
        return None
    return client.track_availability(
        name,
        duration_ms,
        success,
        message,
        run_location=run_location,
        properties=properties,
        metrics=metrics,
    )


def track_request(
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
    """
    Track an incoming request.

    Args:
        name: Request name (usually "METHOD /path")
        url: Full request URL
        method: HTTP method
        duration_ms: Handling time in milliseconds (or a timedelta)
        success: Whether the request succeeded
        status_code: HTTP response status code
    """
    client = _client
    if client is None:
        return None
    return client.track_request(
        name,
        url,
        method,
        duration_ms,
        success,
        status_code=status_code,
        properties=properties,
        metrics=metrics,
    )


def flush_telemetry() -> None:
    """Flush telemetry immediately (useful before application shutdown)."""
    client = _client
    if client is not None:
        client.flush()


def shutdown_telemetry() -> None:
    """Flush and release the exporter; further reports become no-ops."""
    global _client
    client, _client = _client, None
    if client is not None:
        client.shutdown()
