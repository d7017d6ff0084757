"""
Trophy API - FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, route mounting,
       exception handling and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn app.main:app) and by the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain (outermost first):                     │
    │  Security Headers → Request ID → Logging → Body Limit    │
    │  → Origin Allow-List → CORS → Rate Limit → Catch-All     │
    │                                                          │
    │  Routes:                                                 │
    │  GET /api/health   GET|POST /api/trophies                │
    │  DELETE /api/trophies/{id}                               │
    │                                                          │
    │  Exception Handlers:                                     │
    │  TrophyAPIError→own status │ unmatched route→404          │
    │  bad body→400 │ anything else→500                        │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (abort on missing DATABASE_URL)
    3. Connect the database and create missing tables (abort on failure)

    Shutdown:
    1. Dispose the database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import Database
from app.exceptions import (
    ConfigurationError,
    DatabaseError,
    RouteNotFoundError,
    TrophyAPIError,
)
from app.middleware.body_limit import BodyLimitMiddleware
from app.middleware.cors import OriginAllowListMiddleware
from app.middleware.errors import UnhandledErrorMiddleware
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.middleware.security_headers import SecurityHeadersMiddleware
from app.routes import health, trophies

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (containers capture it)
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access middleware replaces uvicorn's access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Validate configuration, hold the database open while serving, close it on exit.

    Startup failures are logged and re-raised: uvicorn then reports
    "Application startup failed" and exits instead of serving without a database.
    """
    app_settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(app_settings.log_level)
    logger.info("Trophy API %s starting up...", __version__)

    try:
        app_settings.validate_required()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e.message)
        raise

    try:
        await database.connect()
    except DatabaseError as e:
        logger.error("Database connection failed: %s | Context: %s", e.message, e.context)
        raise

    logger.info("Server ready on %s:%d", app_settings.host, app_settings.port)

    try:
        yield
    finally:
        logger.info("Trophy API shutting down...")
        await database.disconnect()
        logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{"message": ...}` JSON responses.

    Handler hierarchy:
        TrophyAPIError (all app errors)  → exc.status_code
        RequestValidationError           → 400 Invalid request body
        HTTPException 404/405            → 404 Route not found
        HTTPException (other)            → its own status
        Exception (fallback)             → 500 Server Error

    Details (driver errors, stack traces) are logged, never returned.
    """

    @app.exception_handler(TrophyAPIError)
    async def handle_app_error(request: Request, exc: TrophyAPIError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed JSON or wrongly typed fields."""
        rid = request_id_var.get("")
        # Locations only: the rejected input may be a multi-megabyte image
        locations = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
        logger.warning("[%s] Invalid request body at %s", rid, locations)
        return JSONResponse(status_code=400, content={"message": "Invalid request body"})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # 405 means the path exists for another method; to clients it is still no route
        if exc.status_code in (404, 405):
            return RouteNotFoundError(path=request.url.path).to_response()
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500, full stack trace in the server log only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "Server Error"})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:  Configuration; defaults to the environment-loaded singleton
        database:  Database handle; defaults to one built from `settings`.
                   Tests pass an already connected handle.
    """
    settings = settings or default_settings
    database = database or Database.from_settings(settings)

    app = FastAPI(
        title="Trophy API",
        description="Store and list trophies with embedded base64 images.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    # ── Register Middleware ───────────────────────────────────────────────
    # Starlette runs the LAST added middleware FIRST, so this list is the
    # chain read from the route outwards.

    app.add_middleware(UnhandledErrorMiddleware)

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window,
        path_prefix=settings.rate_limit_path_prefix,
    )

    # Answers preflight requests and sets Access-Control-Allow-Origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    app.add_middleware(OriginAllowListMiddleware, allowed_origins=settings.cors_origins_list)
    app.add_middleware(BodyLimitMiddleware, max_bytes=settings.max_body_size)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(trophies.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
