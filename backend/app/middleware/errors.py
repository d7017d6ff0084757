"""
Trophy API - Unhandled Error Middleware
=========================================

What:  Turns exceptions that escape the route handlers into the API's
       generic 500 `{"message": "Server Error"}` response.
Why:   FastAPI's `Exception` handler runs in Starlette's outermost error
       middleware, past every other layer. Converting the error here, at the
       inner end of the chain, lets the outer layers still add security
       headers, the request id and the access log line.
How:   Innermost BaseHTTPMiddleware wrapping call_next in try/except.
"""

import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.exceptions import TrophyAPIError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server Error"


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Catch-all for exceptions the registered handlers did not answer."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except TrophyAPIError as e:
            return e.to_response()
        except Exception as e:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                request_id_var.get(""),
                request.method,
                request.url.path,
                str(e),
                exc_info=e,
            )
            return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})
