"""
Glyphbin Backend — Request Logging Middleware
==============================================

What:  One log line per HTTP request with method, path, status and duration.
Who:   Applied to every request via Starlette middleware.
When:  After RequestIDMiddleware (uses request ID for correlation).

Example line:
    2026-10-17T11:33:00 [INFO] glyphbin.access: POST /api/pastes 201 12.4ms 98B [1f0c9a2e] from 127.0.0.1

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, response size, IP, request ID
    ❌ Don't log: request bodies (paste content may be private)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from glyphbin.middleware.request_id import request_id_var

logger = logging.getLogger("glyphbin.access")


# Load balancer probes would drown out real traffic
QUIET_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request once its response is ready; level follows the status class."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms %sB [%s] from %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            response.headers.get("content-length", "-"),
            request_id_var.get(""),
            request.client.host if request.client else "unknown",
        )
        return response
