"""
Trophy API - Request Logging Middleware
=========================================

What:  One access log line per HTTP request: method, path, status, duration.
Why:   Operational visibility; replaces uvicorn's access log, which has no
       request id or duration.
How:   Times the downstream call and logs at a level chosen from the status.

Log line:
    GET /api/trophies 200 12.3ms [a1b2c3d4] from 127.0.0.1

What we DON'T log: request bodies (they carry multi-megabyte base64 images).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("trophy_api.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status, duration, request id and client IP.

    Level by status:
        5xx → ERROR, 4xx → WARNING, otherwise INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        try:
            response = await call_next(request)
        except Exception:
            # Still one line per request when an error escapes the inner layers
            self._log(method, path, 500, start_time, rid, client_ip)
            raise

        self._log(method, path, response.status_code, start_time, rid, client_ip)
        return response

    def _log(
        self,
        method: str,
        path: str,
        status: int,
        start_time: float,
        rid: str,
        client_ip: str,
    ) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000

        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
