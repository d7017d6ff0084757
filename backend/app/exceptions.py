"""
Trophy API - Custom Exception Hierarchy
=========================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages, without leaking internals.
How:   Each exception class carries a message, an optional context dict and
       the HTTP status it maps to. Global exception handlers (main.py) and the
       rejecting middleware both turn them into `{"message": ...}` bodies.
Who:   Raised by the store, the validation layer, routes and middleware.

Exception Hierarchy:
    TrophyAPIError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── InvalidIdError           → 400 Bad Request (malformed trophy id)
    ├── NotFoundError            → 404 Not Found
    ├── RouteNotFoundError       → 404 Not Found (no matching route)
    ├── CorsRejectedError        → 403 Forbidden
    ├── PayloadTooLargeError     → 413 Payload Too Large
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── DatabaseError            → 500 Internal Server Error
    └── ConfigurationError       → fatal at startup
"""

from typing import Any, Dict, Optional

from starlette.responses import JSONResponse


class TrophyAPIError(Exception):
    """
    Base exception for all Trophy API errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status used when the error reaches a client
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "Server Error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def headers(self) -> Dict[str, str]:
        """Extra response headers for this error (none by default)."""
        return {}

    def to_response(self) -> JSONResponse:
        """Render the error as the API's JSON error body."""
        return JSONResponse(
            status_code=self.status_code,
            content={"message": self.message},
            headers=self.headers or None,
        )


class ValidationError(TrophyAPIError):
    """
    Raised when client input fails validation.

    When:    Missing or blank required fields, unparseable request body.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidIdError(TrophyAPIError):
    """
    Raised when a path id is not a well-formed trophy identifier.

    Kept apart from NotFoundError so a typo in a client is visible as a 400
    rather than looking like a record that was already deleted.
    """

    status_code = 400

    def __init__(self, resource_id: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["resource_id"] = resource_id
        super().__init__(message="Invalid trophy id", context=ctx)
        self.resource_id = resource_id


class NotFoundError(TrophyAPIError):
    """
    Raised when a requested resource does not exist.

    What:    The client referenced a record that is not in the store.
    When:    DELETE /api/trophies/{id} with an unknown id.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows; the store converts that None
    into this exception so the route stays free of HTTP logic.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class RouteNotFoundError(TrophyAPIError):
    """No route matches the request path and method."""

    status_code = 404

    def __init__(self, path: str = "", context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message="Route not found", context=ctx)


class CorsRejectedError(TrophyAPIError):
    """
    Raised when a browser request carries an Origin outside the allow-list.

    HTTP:    403 Forbidden
    """

    status_code = 403

    def __init__(self, origin: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["origin"] = origin
        super().__init__(message="Not allowed by CORS", context=ctx)
        self.origin = origin


class PayloadTooLargeError(TrophyAPIError):
    """Request body exceeds the configured maximum size."""

    status_code = 413

    def __init__(self, max_bytes: int, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["max_bytes"] = max_bytes
        super().__init__(message="request entity too large", context=ctx)
        self.max_bytes = max_bytes


class DatabaseError(TrophyAPIError):
    """
    Raised when database operations fail unexpectedly.

    What:    A connection, query, insert or delete failed.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Driver errors and SQL are kept in `context` and logged server-side only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(TrophyAPIError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    What:    Client sent too many requests within the rate limit window.
    HTTP:    429 Too Many Requests, with a Retry-After header.
    """

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message="Too many requests, please try again later.", context=ctx)
        self.retry_after = retry_after

    @property
    def headers(self) -> Dict[str, str]:
        return {"Retry-After": str(self.retry_after)}


class ConfigurationError(TrophyAPIError):
    """
    Raised when required settings are missing or invalid.

    Never reaches a client: startup aborts instead of serving in a degraded state.
    """
