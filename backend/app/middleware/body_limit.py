"""
Trophy API - Body Size Limit Middleware
=========================================

What:  Rejects request bodies larger than the configured maximum with 413.
Why:   Images are embedded in JSON as base64, so bodies are legitimately
       large; the cap keeps a single request from exhausting memory.
How:   Checks Content-Length first. When the header is absent (chunked
       uploads) the body is read and measured; Starlette replays the cached
       body to the route.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from app.exceptions import PayloadTooLargeError

logger = logging.getLogger(__name__)

BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class BodyLimitMiddleware(BaseHTTPMiddleware):
    """Return 413 when a request body exceeds `max_bytes`."""

    def __init__(self, app: ASGIApp, max_bytes: int = 10_485_760):
        super().__init__(app)
        self.max_bytes = max_bytes

    def _reject(self, request: Request, size: int) -> Response:
        logger.warning(
            "Request body too large: %d bytes (max %d) on %s",
            size,
            self.max_bytes,
            request.url.path,
        )
        return PayloadTooLargeError(
            max_bytes=self.max_bytes,
            context={"size": size, "path": request.url.path},
        ).to_response()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method not in BODY_METHODS:
            return await call_next(request)

        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                size = None  # Malformed header; the server will reject it
            if size is not None and size > self.max_bytes:
                return self._reject(request, size)
        elif "chunked" in request.headers.get("transfer-encoding", "").lower():
            body = await request.body()
            if len(body) > self.max_bytes:
                return self._reject(request, len(body))

        return await call_next(request)
