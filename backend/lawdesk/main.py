"""
LawDesk Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings, database) wires settings, the Database, stores'
       collaborators, middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn lawdesk.main:app`) and the test suite.

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware:  Request ID → Logging → GZip → CORS          │
    │                                                           │
    │  Routes:                                                  │
    │  ┌──────────────┐ ┌───────────────┐ ┌──────────┐ ┌──────┐ │
    │  │ posts        │ │ feedback      │ │ uploads  │ │health│ │
    │  └──────────────┘ └───────────────┘ └──────────┘ └──────┘ │
    │                                                           │
    │  Exception Handlers (one body shape for all):             │
    │  Validation→400 │ Unauthorized→401 │ NotFound→404         │
    │  DuplicateSlug→409 │ FileStorage/Database→500             │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration warnings → upload directory →
              optional table creation
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from lawdesk import __version__
from lawdesk.config import Settings, settings as default_settings
from lawdesk.database import Database
from lawdesk.exceptions import (
    DatabaseError,
    DuplicateSlugError,
    FileStorageError,
    LawDeskError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from lawdesk.middleware.logging import RequestLoggingMiddleware
from lawdesk.middleware.request_id import RequestIDMiddleware, request_id_var
from lawdesk.routes import feedback, health, posts, uploads
from lawdesk.schemas.common import error_details
from lawdesk.services.image_storage import ImageStorage
from lawdesk.services.markdown_renderer import MarkdownRenderer

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once at startup.

    Format: 2024-01-15T12:00:00 [INFO] lawdesk.services.post_store: Post created: ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("MARKDOWN").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("LawDesk Backend starting up (version %s)", __version__)

    for warning in settings.warnings_for_production():
        logger.warning("Configuration: %s", warning)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", upload_dir.resolve())

    if settings.db_create_tables:
        await database.create_all()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("LawDesk Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def current_request_id(request: Request) -> str:
    """
    The correlation ID assigned by RequestIDMiddleware.

    Why request.state first: the catch-all handler runs in
    ServerErrorMiddleware, outside the middleware that set the ContextVar.
    """
    return getattr(request.state, "request_id", None) or request_id_var.get("")


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Build the single error body: {error, message, details, request_id}."""
    request_id = current_request_id(request)
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": details or None,
            "request_id": request_id,
        },
        headers={**(headers or {}), "X-Request-ID": request_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes.

    Handler table:
        ValidationError / RequestValidationError → 400 validation_error
        UnauthorizedError                        → 401 unauthorized
        NotFoundError                            → 404 not_found
        DuplicateSlugError                       → 409 duplicate_title
        FileStorageError / DatabaseError         → 500 server_error
        LawDeskError (base)                      → 500 server_error
        Exception (fallback)                     → 500 internal_server_error

    Why one shape: clients and support staff read `request_id` from any
    failure, including the fallback 500.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", current_request_id(request), exc.message)
        return error_response(request, 400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        return error_response(
            request,
            400,
            "validation_error",
            "Request validation failed",
            {"errors": error_details(exc)},
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return error_response(
            request,
            401,
            "unauthorized",
            exc.message,
            headers={"WWW-Authenticate": "X-Admin-Key"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(request, 404, "not_found", exc.message, exc.context)

    @app.exception_handler(DuplicateSlugError)
    async def handle_duplicate_slug(request: Request, exc: DuplicateSlugError):
        return error_response(request, 409, "duplicate_title", exc.message, exc.context)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | Context: %s",
                     current_request_id(request), exc.message, exc.context)
        return error_response(request, 500, "server_error", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s",
                     current_request_id(request), exc.message, exc.context)
        return error_response(request, 500, "server_error", exc.message, exc.context)

    @app.exception_handler(LawDeskError)
    async def handle_app_error(request: Request, exc: LawDeskError):
        logger.error("[%s] Application error: %s", current_request_id(request), exc.message)
        return error_response(request, 500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            current_request_id(request),
            str(exc),
            exc_info=True,
        )
        return error_response(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


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
        settings: Configuration; defaults to the environment-loaded settings
        database: Database to use; defaults to one built from settings.database_url
    """
    settings = settings or default_settings
    database = database or Database.from_settings(settings)

    app = FastAPI(
        title="LawDesk API",
        description=(
            "Blog posts and client testimonials for the firm's website, "
            "with a moderation workflow for testimonials."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.image_storage = ImageStorage(
        upload_dir=settings.upload_dir,
        max_size=settings.max_image_size,
    )
    app.state.renderer = MarkdownRenderer()

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(posts.router)
    app.include_router(feedback.router)
    app.include_router(feedback.admin_router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


# uvicorn entry point: `uvicorn lawdesk.main:app`
app = create_app()
