"""
Telemetry Configuration

Centralized configuration for the telemetry bridge: exporter connection
settings, application identity, sampling, privacy, and development options.

The configuration is immutable once built. Pass it to ``initialize_telemetry``
or let the bridge load it from ``TELEMETRY_*`` environment variables.
"""

from collections.abc import Iterable
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Property keys containing any of these substrings are masked
DEFAULT_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "pass",
        "pwd",
        "credit_card",
        "cc",
        "ssn",
        "secret",
        "token",
        "auth",
        "authorization",
    }
)


class TelemetryConfig(BaseSettings):
    """Telemetry configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TELEMETRY_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    # Connection
    endpoint: str | None = Field(default=None, description="Ingestion endpoint URL")
    connection_string: str | None = Field(
        default=None, description="Azure Monitor connection string"
    )
    instrumentation_key: str | None = Field(
        default=None, description="Instrumentation key (used when no connection string)"
    )
    timeout_seconds: int = Field(default=30, gt=0, description="Exporter request timeout")
    enabled: bool = True

    # Application Identity
    cloud_role_name: str | None = None
    cloud_role_instance: str | None = None
    app_version: str | None = None

    # Sampling
    sampling_ratio: float = Field(default=1.0, ge=0.0, le=1.0)  # 1.0 = 100%

    # Privacy
    sensitive_keys: frozenset[str] = DEFAULT_SENSITIVE_KEYS
    truncate_large_payloads: bool = True
    max_payload_size: int = Field(default=8192, gt=0)  # characters per property value

    # Shape of properties on the exported record: one attribute per key, or a JSON blob
    property_encoding: Literal["flat", "json"] = "flat"

    # Performance
    flush_interval_seconds: int = Field(default=5, gt=0)

    # Development
    enable_dev_logger: bool = True
    dev_logger_max_events: int = Field(default=1000, gt=0)

    @field_validator("sensitive_keys", mode="before")
    @classmethod
    def _normalize_sensitive_keys(cls, value: str | Iterable[str] | None) -> frozenset[str]:
        """Lowercase the sensitive substrings; accept a comma-separated string."""
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = value.split(",")
        return frozenset(key.strip().lower() for key in value if key and key.strip())

    def resolved_instrumentation_key(self) -> str | None:
        """Get the instrumentation key, falling back to the connection string segment."""
        if self.instrumentation_key:
            return self.instrumentation_key
        if not self.connection_string:
            return None
        for part in self.connection_string.split(";"):
            name, _, value = part.partition("=")
            if name.strip().lower() == "instrumentationkey" and value.strip():
                return value.strip()
        return None

    def resolved_connection_string(self) -> str | None:
        """
        Get the connection string for the Azure exporter.

        If connection_string is set, use it, with endpoint (when set)
        replacing its IngestionEndpoint segment.
        Otherwise, construct one from the instrumentation key and endpoint.
        """
        if self.connection_string:
            if not self.endpoint:
                return self.connection_string
            parts = [
                part
                for part in self.connection_string.split(";")
                if part.strip() and part.partition("=")[0].strip().lower() != "ingestionendpoint"
            ]
            parts.append(f"IngestionEndpoint={self.endpoint}")
            return ";".join(parts)
        if not self.instrumentation_key:
            return None
        connection_string = f"InstrumentationKey={self.instrumentation_key}"
        if self.endpoint:
            connection_string += f";IngestionEndpoint={self.endpoint}"
        return connection_string


# Global instance (lazy loaded)
_config: TelemetryConfig | None = None


def get_telemetry_config() -> TelemetryConfig:
    """Get the global telemetry configuration instance."""
    global _config
    if _config is None:
        _config = TelemetryConfig()
    return _config
