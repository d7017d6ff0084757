"""
Trophy API - Security Headers Middleware
==========================================

What:  Adds defensive HTTP headers to every response, errors included.
Why:   The API is called from a browser frontend; these headers stop MIME
       sniffing, framing and referrer leakage by default.
How:   Outermost middleware, so responses produced by the other middleware
       (429, 403, 413) carry the headers too.
"""

from typing import Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

DEFAULT_SECURITY_HEADERS: Dict[str, str] = {
    "Content-Security-Policy": (
        "default-src 'self'; "
        "base-uri 'self'; "
        "font-src 'self' https: data:; "
        "form-action 'self'; "
        "frame-ancestors 'self'; "
        "img-src 'self' data:; "
        "object-src 'none'; "
        "script-src 'self'; "
        "script-src-attr 'none'; "
        "style-src 'self' https: 'unsafe-inline'; "
        "upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    # Prevent MIME type sniffing
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    # Prevent clickjacking
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    # Legacy XSS auditors do more harm than good; disable explicitly
    "X-XSS-Protection": "0",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to responses, without overriding headers a route set."""

    def __init__(self, app: ASGIApp, headers: Optional[Dict[str, str]] = None):
        super().__init__(app)
        self._headers = dict(DEFAULT_SECURITY_HEADERS if headers is None else headers)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self._headers.items():
            response.headers.setdefault(name, value)
        return response
