"""
Custom middleware for request tracing and latency logging.

Provides:
- **Request ID injection**: every request/response carries a trace ID
  (``X-Request-ID`` header).  The ID is also published to
  :data:`app.core.logging.request_id_ctx`, so every log line written while
  serving the request carries it.
- **Request timing**: logs the wall-clock duration of every request and adds
  an ``X-Process-Time`` header.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import request_id_ctx

logger = logging.getLogger(__name__)

# If the client/gateway already supplies one, we honour it; otherwise we generate.
REQUEST_ID_HEADER = "X-Request-ID"

SLOW_REQUEST_MS = 500


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Injects a unique request ID into every request/response cycle.

    - An incoming ``X-Request-ID`` (set by an API gateway) is reused,
      otherwise a new UUID4 is generated.
    - The ID is stored on ``request.state.request_id`` and in the logging
      context variable for the duration of the request.
    - The ID is echoed back in the response header.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        token = request_id_ctx.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Logs the wall-clock duration of every HTTP request.

    Requests slower than ``SLOW_REQUEST_MS`` are logged at WARNING, the rest
    at DEBUG.  Method, path, status and duration are passed as structured
    ``extra`` fields for the JSON log files.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}ms"

        extra = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "elapsed_ms": round(elapsed_ms, 2),
            "client_ip": request.client.host if request.client else None,
        }
        if elapsed_ms > SLOW_REQUEST_MS:
            logger.warning(
                "%s %s completed in %.2fms (SLOW)",
                request.method,
                request.url.path,
                elapsed_ms,
                extra=extra,
            )
        else:
            logger.debug(
                "%s %s completed in %.2fms",
                request.method,
                request.url.path,
                elapsed_ms,
                extra=extra,
            )

        return response
