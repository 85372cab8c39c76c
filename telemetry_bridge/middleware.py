"""
Telemetry Middleware for FastAPI

Automatically reports every HTTP request as a Request occurrence with timing,
status code, and exceptions. Injects correlation IDs and request context so
occurrences reported while handling a request carry its request_id.
"""

import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .context import clear_request_context, generate_correlation_id, set_request_context
from .tracker import track_exception, track_request

REQUEST_ID_HEADER = "X-Request-ID"
SESSION_ID_HEADER = "X-Session-ID"


class TelemetryMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for automatic request telemetry tracking.

    Captures:
    - One Request occurrence per request (url, method, duration, status code)
    - Exceptions escaping the application, plus a failed Request occurrence

    Automatically injects:
    - request_id (correlation ID, echoed in the X-Request-ID response header)
    - session_id (from the X-Session-ID header if present)
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process the request and track telemetry."""
        start_time = time.perf_counter()

        request_id = generate_correlation_id()
        session_id = request.headers.get(SESSION_ID_HEADER)

        set_request_context(request_id=request_id, session_id=session_id)
        request.state.request_id = request_id

        name = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            track_request(
                name,
                str(request.url),
                request.method,
                duration_ms,
                response.status_code < 400,
                status_code=response.status_code,
            )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000

            track_exception(
                e,
                {
                    "endpoint": request.url.path,
                    "method": request.method,
                },
            )
            track_request(
                name,
                str(request.url),
                request.method,
                duration_ms,
                False,
                status_code=500,
            )
            raise

        finally:
            clear_request_context()
