"""
Ambient Context and Correlation IDs

Two layers of context are attached to every occurrence:

- Ambient context: process-wide identity fields (user, session, device,
  app version) and custom dimensions. Writers and readers may run on any
  thread; every read takes an atomic snapshot so a single occurrence never
  mixes fields from two different writes.
- Request context: request-scoped properties stored in a ContextVar, set by
  the HTTP middleware for the duration of one request.
"""

import threading
import uuid
from collections.abc import Mapping
from contextvars import ContextVar
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AmbientContext(BaseModel):
    """Immutable snapshot of the ambient context, threaded through one call."""

    model_config = ConfigDict(frozen=True)

    user_id: str | None = None
    session_id: str | None = None
    device_id: str | None = None
    app_version: str | None = None
    custom_dimensions: dict[str, str] = Field(default_factory=dict)


class AmbientContextStore:
    """Lock-guarded store for the ambient context (last write wins per field)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fields: dict[str, str | None] = {
            "user_id": None,
            "session_id": None,
            "device_id": None,
            "app_version": None,
        }
        self._custom_dimensions: dict[str, str] = {}

    def set_field(self, name: str, value: str | None) -> None:
        if name not in self._fields:
            raise KeyError(f"Unknown ambient context field: {name}")
        with self._lock:
            self._fields[name] = value

    def set_custom_dimension(self, key: str, value: str) -> None:
        with self._lock:
            self._custom_dimensions[key] = value

    def remove_custom_dimension(self, key: str) -> None:
        with self._lock:
            self._custom_dimensions.pop(key, None)

    def clear_custom_dimensions(self) -> None:
        with self._lock:
            self._custom_dimensions.clear()

    def reset(self) -> None:
        """Forget every field and dimension."""
        with self._lock:
            for name in self._fields:
                self._fields[name] = None
            self._custom_dimensions.clear()

    def snapshot(self) -> AmbientContext:
        """Read all fields and dimensions in one atomic step."""
        with self._lock:
            return AmbientContext(
                **self._fields,
                custom_dimensions=dict(self._custom_dimensions),
            )


# Process-wide ambient context
_ambient_store = AmbientContextStore()


def get_ambient_store() -> AmbientContextStore:
    """Get the process-wide ambient context store."""
    return _ambient_store


def get_ambient_context() -> AmbientContext:
    """Get a snapshot of the process-wide ambient context."""
    return _ambient_store.snapshot()


def set_user_id(user_id: str | None) -> None:
    _ambient_store.set_field("user_id", user_id)


def set_session_id(session_id: str | None) -> None:
    _ambient_store.set_field("session_id", session_id)


def set_device_id(device_id: str | None) -> None:
    _ambient_store.set_field("device_id", device_id)


def set_app_version(app_version: str | None) -> None:
    _ambient_store.set_field("app_version", app_version)


def set_custom_dimension(key: str, value: Any) -> None:
    """Attach a custom dimension to every subsequent occurrence."""
    _ambient_store.set_custom_dimension(str(key), str(value))


def remove_custom_dimension(key: str) -> None:
    _ambient_store.remove_custom_dimension(key)


def clear_custom_dimensions() -> None:
    _ambient_store.clear_custom_dimensions()


# Request-scoped context storage
_request_context: ContextVar[Mapping[str, Any] | None] = ContextVar(
    "request_context", default=None
)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracing."""
    return str(uuid.uuid4())


def set_request_context(request_id: str, **kwargs: Any) -> None:
    """
    Set the request context for the current async context.

    This context is automatically included in all occurrences reported
    while the request is being handled.

    Args:
        request_id: Correlation ID for request tracing
        **kwargs: Additional context properties (None values are skipped)
    """
    context = {"request_id": request_id}
    context.update({key: value for key, value in kwargs.items() if value is not None})
    _request_context.set(context)


def get_request_context() -> dict[str, Any]:
    """
    Get the current request context.

    Returns:
        Dictionary containing request_id and any additional properties
    """
    return dict(_request_context.get() or {})


def clear_request_context() -> None:
    """Clear the request context for the current async context."""
    _request_context.set(None)
