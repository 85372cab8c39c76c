"""
Context Enrichment

Builds the ambient attribute set (configuration identity, ambient context,
request context) and merges it under an occurrence's own attributes.
Enrichment only reads state; it never fails on missing fields.
"""

from collections.abc import Mapping
from typing import Any

from .config import TelemetryConfig
from .context import AmbientContext
from .events import TelemetryAttributes
from .models import AttributeValue, Occurrence
from .redaction import redact


def context_attributes(
    config: TelemetryConfig | None,
    context: AmbientContext | None,
    request_context: Mapping[str, Any] | None = None,
) -> dict[str, AttributeValue]:
    """
    Collect the attributes contributed by configuration and context.

    Configuration app version and ambient app version are independent fields
    and are attached under separate names.

    Args:
        config: Telemetry configuration, may be None
        context: Ambient context snapshot, may be None
        request_context: Request-scoped properties, may be None

    Returns:
        Attribute mapping containing only the fields that are set
    """
    attributes: dict[str, AttributeValue] = {}

    if config is not None:
        identity = {
            TelemetryAttributes.CLOUD_ROLE_NAME: config.cloud_role_name,
            TelemetryAttributes.CLOUD_ROLE_INSTANCE: config.cloud_role_instance,
            TelemetryAttributes.APPLICATION_VERSION: config.app_version,
            TelemetryAttributes.INSTRUMENTATION_KEY: config.resolved_instrumentation_key(),
        }
        attributes.update({key: value for key, value in identity.items() if value})

    if context is not None:
        sensitive_keys = config.sensitive_keys if config is not None else ()
        attributes.update(redact(context.custom_dimensions, sensitive_keys) or {})

        ambient = {
            TelemetryAttributes.USER_ID: context.user_id,
            TelemetryAttributes.SESSION_ID: context.session_id,
            TelemetryAttributes.DEVICE_ID: context.device_id,
            TelemetryAttributes.APP_VERSION: context.app_version,
        }
        attributes.update({key: value for key, value in ambient.items() if value is not None})

    for key, value in (request_context or {}).items():
        if value is not None:
            attributes[key] = value if isinstance(value, (str, bool, int, float)) else str(value)

    return attributes


def enrich_attributes(
    attributes: Mapping[str, AttributeValue],
    config: TelemetryConfig | None,
    context: AmbientContext | None,
    request_context: Mapping[str, Any] | None = None,
) -> dict[str, AttributeValue]:
    """Return a new attribute mapping with context merged under the given attributes."""
    return {**context_attributes(config, context, request_context), **attributes}


def enrich(
    occurrence: Occurrence,
    config: TelemetryConfig | None,
    context: AmbientContext | None,
    request_context: Mapping[str, Any] | None = None,
) -> Occurrence:
    """Return a copy of the occurrence with ambient attributes attached."""
    attributes = enrich_attributes(occurrence.attributes, config, context, request_context)
    return occurrence.model_copy(update={"attributes": attributes})
