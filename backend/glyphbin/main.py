"""
Glyphbin Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn glyphbin.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────┐ ┌──────┐ │
    │  │ Req ID   │→│  Logging        │→│ GZip │→│ CORS │ │
    │  └──────────┘ └─────────────────┘ └──────┘ └──────┘ │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ /api/pastes  │ │ / , /paste/* │ │ GET /health │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ Invalid→400 │ NotFound→404 │ Unavailable→503  │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build the Highlighter catalog (fatal on an unknown theme)
    3. Create tables if DB_CREATE_TABLES is set
    4. Build the PasteService and publish both on app.state

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, Response

from glyphbin import __version__
from glyphbin.config import settings
from glyphbin.database import dispose_engine, init_models
from glyphbin.exceptions import (
    ConflictError,
    DatabaseError,
    GlyphbinError,
    InvalidIdentifierError,
    NotFoundError,
    StorageUnavailableError,
    UnknownThemeError,
    ValidationError,
)
from glyphbin.middleware.logging import RequestLoggingMiddleware
from glyphbin.middleware.request_id import RequestIDMiddleware, request_id_var
from glyphbin.routes import health, pages, pastes
from glyphbin.services.highlighter import Highlighter
from glyphbin.services.paste_service import PasteService
from glyphbin.templating import templates

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,  # Override any existing logging config
    )

    # These log at DEBUG/INFO for every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    The Highlighter is built here rather than at import time so that a bad
    HIGHLIGHT_THEME stops startup with a clear log line. After this point
    the catalog is only ever read.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Glyphbin %s starting up...", __version__)

    try:
        highlighter = Highlighter(settings.highlight_theme)
    except UnknownThemeError as e:
        logger.critical("Configuration error: %s", e.message)
        logger.critical("Set HIGHLIGHT_THEME to a Pygments style name and restart.")
        raise

    if settings.db_create_tables:
        await init_models()
        logger.info("Database tables ensured")

    app.state.highlighter = highlighter
    app.state.paste_service = PasteService(highlighter, max_paste_size=settings.max_paste_size)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Glyphbin shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Response:
    """
    Builds an error response in the format the caller expects.

    /api/* callers get the JSON ErrorResponse body; everything else is a
    browser looking at a page and gets the HTML error page with the same
    status code.
    """
    rid = request_id_var.get("")
    if not request.url.path.startswith("/api"):
        return templates.TemplateResponse(
            request,
            "error.html",
            {"status_code": status_code, "message": message, "request_id": rid},
            status_code=status_code,
            headers=headers,
        )
    content: Dict[str, Any] = {"error": error, "message": message, "request_id": rid}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError          → 400 Bad Request
        InvalidIdentifierError   → 400 Bad Request
        NotFoundError            → 404 Not Found
        StorageUnavailableError  → 503 Service Unavailable (Retry-After)
        ConflictError            → 500 (second ID collision in a row)
        DatabaseError            → 500 Internal Server Error
        GlyphbinError (base)     → 500 Internal Server Error
        Exception (fallback)     → 500 Internal Server Error

    Exception handlers never put stack traces or SQL in the response;
    details are logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(request, 400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(InvalidIdentifierError)
    async def handle_invalid_identifier(request: Request, exc: InvalidIdentifierError):
        return error_response(request, 400, "invalid_identifier", exc.message, details=exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(request, 404, "not_found", exc.message)

    @app.exception_handler(StorageUnavailableError)
    async def handle_storage_unavailable(request: Request, exc: StorageUnavailableError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage unavailable: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(
            request,
            503,
            "storage_unavailable",
            exc.message,
            details={"retry_after": exc.retry_after},
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.error("[%s] Paste ID collided twice: %s", rid, exc.context)
        return error_response(
            request, 500, "server_error", "Could not allocate a paste ID. Please try again."
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(
            request, 500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(GlyphbinError)
    async def handle_glyphbin_error(request: Request, exc: GlyphbinError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return error_response(
            request, 500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: stack trace goes to the log, a request ID goes to the client."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Glyphbin API",
        description=(
            "Pastebin with server-side syntax highlighting. Submit text with a "
            "language name and get back a permanent, hard-to-guess link."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location", "Retry-After"],
    )

    # Rendered pastes are verbose HTML and compress well
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(pastes.router)
    app.include_router(pages.router)
    app.include_router(health.router)

    return app


# uvicorn expects `glyphbin.main:app` to be importable
app = create_app()
