"""
PasteShare — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn pasteshare.main:app,
       or python -m pasteshare).

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware:  Req ID → Rate Limit (POST) → Logging   │
    │                                                      │
    │  Routes:      /api/pastes…  /api/browse…  /api/diff… │
    │               /api/home     /health                  │
    │                                                      │
    │  Exception Handlers:                                 │
    │   Validation→400 │ NotFound→404 │ Storage→500        │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the pastes table if configured
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from pasteshare import __version__
from pasteshare.config import settings
from pasteshare.database import dispose_engine, init_models
from pasteshare.exceptions import (
    InvariantViolationError,
    NotFoundError,
    PasteShareError,
    StorageError,
    ValidationError,
)
from pasteshare.middleware.logging import RequestLoggingMiddleware
from pasteshare.middleware.rate_limit import RateLimitMiddleware
from pasteshare.middleware.request_id import RequestIDMiddleware, request_id_var
from pasteshare.routes import browse, health, pastes

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
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("PasteShare %s starting up...", __version__)

    if settings.auto_create_schema:
        await init_models()
        logger.info("Database schema ready")

    logger.info("Server ready at %s", settings.external_base_url)

    yield

    logger.info("PasteShare shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and JSON error bodies.

        ValidationError          → 400 Bad Request
        NotFoundError            → 404 Not Found
        StorageError             → 500 Internal Server Error
        InvariantViolationError  → 500 Internal Server Error
        PasteShareError (base)   → 500 Internal Server Error
        Exception (fallback)     → 500 Internal Server Error

    Storage details (SQL, constraint names) are logged, never returned.
    429 responses are built by RateLimitMiddleware, outside the routing layer.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
            exc_info=exc.__cause__,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(InvariantViolationError)
    async def handle_invariant_violation(request: Request, exc: InvariantViolationError):
        logger.error(
            "[%s] Invariant violation: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(PasteShareError)
    async def handle_app_error(request: Request, exc: PasteShareError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="PasteShare API",
        description=(
            "Paste sharing service: submit text snippets, annotate them in "
            "threads, browse the public feed and diff two pastes."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → RateLimit → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After", "Location"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window=settings.rate_limit_window,
    )
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(pastes.router)
    app.include_router(browse.router)
    app.include_router(health.router)

    return app


# uvicorn expects `pasteshare.main:app` to be importable
app = create_app()
