"""
Trophy API - Rate Limiting Middleware
=======================================

What:  Per-IP sliding window rate limiter for paths under a prefix (/api).
Why:   Without authentication, this is the only brake on a single client
       flooding the API.
How:   Tracks request timestamps per IP in memory.

Algorithm: Sliding Window Log
    1. Each IP gets a list of request timestamps
    2. On each request, drop timestamps older than the window
    3. If remaining count >= limit, reject with 429
    4. Otherwise, record the current timestamp and allow through

    Why sliding window (not fixed window):
    - Fixed window: 100 req/15min resets on the boundary → 200 can burst across it
    - Sliding window: always counts the last N seconds

State is per process. Several workers would each enforce their own window.
"""

import logging
import time
from collections import defaultdict
from typing import Callable, Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from app.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# Prune idle IPs after this many recorded requests
CLEANUP_INTERVAL = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Args:
        max_requests:    Requests allowed per client within the window
        window_seconds:  Window length
        path_prefix:     Only paths equal to or under this prefix are limited
        clock:           Time source (time.monotonic); replaceable in tests

    Response on rate limit:
        HTTP 429 with a Retry-After header (seconds until the oldest request
        in the window expires).
    """

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 100,
        window_seconds: int = 900,
        path_prefix: str = "/api",
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix.rstrip("/")
        self._clock = clock
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._since_cleanup = 0

    def applies_to(self, path: str) -> bool:
        # "/api" matches "/api" and "/api/..." but not "/apiary"
        return path == self.path_prefix or path.startswith(self.path_prefix + "/")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.applies_to(request.url.path):
            return await call_next(request)

        # Behind a proxy this is the proxy's IP; run uvicorn with
        # --proxy-headers so request.client reflects X-Forwarded-For
        client_ip = request.client.host if request.client else "unknown"

        now = self._clock()
        window_start = now - self.window_seconds

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                self.window_seconds,
            )
            return RateLimitExceededError(
                retry_after=retry_after,
                context={"client_ip": client_ip},
            ).to_response()

        timestamps.append(now)

        self._since_cleanup += 1
        if self._since_cleanup >= CLEANUP_INTERVAL:
            self._since_cleanup = 0
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Remove IPs that have no requests within the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
