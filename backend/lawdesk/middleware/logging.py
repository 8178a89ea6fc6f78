"""
LawDesk Backend — Access Log Middleware
=========================================

What:  Emits one "lawdesk.access" line per request once the response is ready.
When:  Wrapped by RequestIDMiddleware, so request.state.request_id is set.

    GET /posts/contract-law-basics-1700000000000 200 3.2ms 1843B [a1b2c3d4] 10.0.0.7

Level:
    5xx → ERROR, 4xx → WARNING, image downloads under /uploads → DEBUG,
    everything else → INFO. /health probes are not logged at all.

Why no bodies: testimonials carry client names and addresses.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("lawdesk.access")

UNLOGGED_PATHS = frozenset({"/health"})
STATIC_PREFIX = "/uploads/"


def access_level(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    if path.startswith(STATIC_PREFIX):
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with status, latency, response size and correlation ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        level = access_level(request.url.path, response.status_code)
        if not logger.isEnabledFor(level):
            return response

        request_id = getattr(request.state, "request_id", "")
        client = request.client.host if request.client else "-"
        size = response.headers.get("content-length", "-")
        logger.log(
            level,
            "%s %s %d %.1fms %sB [%s] %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            size,
            request_id,
            client,
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
            },
        )
        return response
