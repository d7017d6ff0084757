"""
Trophy API - Origin Allow-List Middleware
===========================================

What:  Rejects browser requests whose Origin is not on the allow-list.
Why:   Starlette's CORSMiddleware only withholds CORS response headers from
       unknown origins; the request itself still runs. This middleware refuses
       it outright with 403 before any route sees it.
How:   No Origin header → allowed (curl, server-to-server, same-origin GETs).
       Origin exactly in the allow-list → allowed. Anything else → 403.

CORSMiddleware still runs inside this one to answer preflight requests and
set Access-Control-Allow-Origin for allowed origins.

Known permissive behavior: a non-browser client can bypass the check by not
sending Origin. Browsers always send it on cross-origin requests.
"""

import logging
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from app.exceptions import CorsRejectedError

logger = logging.getLogger(__name__)


class OriginAllowListMiddleware(BaseHTTPMiddleware):
    """403 for requests carrying an Origin outside `allowed_origins`."""

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str] = ()):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    def is_allowed(self, origin) -> bool:
        return origin is None or origin in self.allowed_origins

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        origin = request.headers.get("origin")
        if not self.is_allowed(origin):
            logger.warning("Rejected origin %s for %s %s", origin, request.method, request.url.path)
            return CorsRejectedError(origin=origin).to_response()
        return await call_next(request)
