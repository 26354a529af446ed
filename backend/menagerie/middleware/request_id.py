"""
Menagerie Backend: Request ID Middleware
=========================================

What:  Assigns a correlation ID to each request and echoes it in X-Request-ID.
Why:   Error bodies carry the same ID, so a client report can be matched to
       the server log lines of that exact request.
How:   Uses the client's X-Request-ID when present, otherwise a short UUID;
       stores it in a ContextVar read by the error renderers and the access log.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests in one thread each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a unique ID to each request for tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 characters are enough to correlate log lines and easier to read
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
