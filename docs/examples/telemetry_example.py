"""Example demonstrating the telemetry workflow for an application.

This example shows how an app should:
1. Initialize telemetry once at startup
2. Set ambient identity (user, session, custom dimensions)
3. Report events, dependencies, metrics, traces, and exceptions
4. Flush before exit

Run with TELEMETRY_CONNECTION_STRING set to ship to Azure Monitor; without
it, occurrences only land in the in-memory dev logger.
"""

import os

from telemetry_bridge import (
    SeverityLevel,
    TelemetryConfig,
    export_dev_logs,
    flush_telemetry,
    initialize_telemetry,
    set_custom_dimension,
    set_session_id,
    set_user_id,
    track_dependency,
    track_event,
    track_exception,
    track_metric,
    track_trace,
)

ENDPOINT = os.environ.get("TELEMETRY_ENDPOINT")


def main():
    config = TelemetryConfig(
        cloud_role_name="telemetry-example",
        app_version="1.0.0",
        sensitive_keys={"password", "credit_card"},
    )
    initialize_telemetry(ENDPOINT, config)

    set_user_id("user123")
    set_session_id("session456")
    set_custom_dimension("env", "dev")

    track_event("ButtonClicked", {"button": "checkout", "password": "hunter2"})

    track_dependency("SQL Query", "SQL", "users_db", True, 25)
    track_dependency("HTTP Call", "HTTP", "api.example.com", True, 120)
    track_dependency("File Read", "File", "local_storage", False, 500)

    track_metric("PageLoadTime", 2.5, {"page": "home"})
    track_metric("MemoryUsage", 85.7)

    track_trace("TMS download failed", SeverityLevel.WARN, {"attempt": 3})

    try:
        raise ValueError("Reason why logon failed: 10")
    except ValueError as e:
        track_exception(e, {"screen": "login"})

    flush_telemetry()
    print(export_dev_logs())


if __name__ == "__main__":
    main()
