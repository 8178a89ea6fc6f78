"""
LawDesk Backend — Request ID Middleware
=========================================

What:  Tags every request with a short correlation ID.
How:   Accepts the client's X-Request-ID when it is a plain token of at most
       64 characters, otherwise generates 8 hex chars. The ID is kept in a
       ContextVar (error bodies) and request.state (access log), and echoed
       back in the response header.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"

# Echoed into log lines and JSON bodies, so nothing but a simple token
_ACCEPTED_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def pick_request_id(supplied: Optional[str]) -> str:
    if supplied and _ACCEPTED_ID.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Why no reset of request_id_var: unhandled exceptions are answered by
    ServerErrorMiddleware, outside this one, and that 500 body still needs
    the ID. Each request runs in its own task context, so nothing leaks.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = pick_request_id(request.headers.get(HEADER))
        request_id_var.set(request_id)
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[HEADER] = request_id
        return response
