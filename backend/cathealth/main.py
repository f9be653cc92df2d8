"""
CatHealth Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the per-app collaborators (Database, FileService,
       AuthService), stores them on app.state, registers middleware,
       exception handlers and routers. Tests pass their own collaborators.
Who:   uvicorn (`uvicorn cathealth.main:app`) and the test-suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                     FastAPI App                      │
    │  Middleware:  CORS → GZip → Request ID → Logging     │
    │                                                      │
    │  Public:      /health, /api/files/*, register, login │
    │  Gated:       cats, records, insurance, calendar,    │
    │               todos, auth/verify, auth/user          │
    │                                                      │
    │  Errors:      CatHealthError → its status_code       │
    │               RequestValidationError → 400           │
    │               unknown route → 404 "Endpoint not found"│
    │               anything else → 500                    │
    └──────────────────────────────────────────────────────┘

Error body:
    {"message": "...", "request_id": "a1b2c3d4"}
    plus "error" (exception detail) when APP_ENV=development
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cathealth import __version__
from cathealth.config import Settings, settings as default_settings
from cathealth.database import Database
from cathealth.exceptions import CatHealthError, DatabaseError, FileStorageError
from cathealth.middleware.logging import RequestLoggingMiddleware
from cathealth.middleware.request_id import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from cathealth.routes import auth, calendar, cats, files, health, insurance, records, todos
from cathealth.services.auth_service import AuthService
from cathealth.services.file_service import FileService

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An unexpected error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(config: Settings) -> None:
    """
    Configures the root logger once, at startup.

    Format: 2024-01-15T12:00:00 [INFO] cathealth.services.cat_service [a1b2c3d4]: ...
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Replaced by cathealth.access
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Logging
        2. Configuration check: a placeholder JWT secret only passes in development
        3. Database ping (logged, not fatal: /health reports it)
    Shutdown:
        Dispose the connection pool.
    """
    config: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(config)
    logger.info("CatHealth Backend %s starting (env=%s)", __version__, config.app_env)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        if not config.is_development:
            logger.critical("Configuration error: %s", str(e))
            raise
        logger.warning("Configuration warning (development only): %s", str(e))

    try:
        await database.ping()
        logger.info("Database reachable")
    except Exception as e:
        logger.error("Database not reachable at startup: %s", str(e))

    logger.info("Storage directory: %s", app.state.file_service.storage_root)
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)

    yield

    logger.info("CatHealth Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request_id_var.get("")


def error_body(request: Request, message: str, detail: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"message": message, "request_id": _request_id(request)}
    if detail is not None and request.app.state.settings.is_development:
        body["error"] = detail
    return body


def _describe_validation_errors(exc: RequestValidationError) -> str:
    """First problem as "field: reason", e.g. "name: Field required"."""
    errors = exc.errors()
    if not errors:
        return "Validation failed"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    reason = first.get("msg", "Invalid value")
    # Pydantic prefixes messages raised from validators
    if reason.startswith("Value error, "):
        reason = reason[len("Value error, "):]
    return f"{'.'.join(loc)}: {reason}" if loc else reason


def register_exception_handlers(app: FastAPI) -> None:
    """
    Handler map:
        CatHealthError subclasses  → exc.status_code, exc.message
        DatabaseError              → 500, generic message (details logged)
        FileStorageError           → 500, exc.message
        RequestValidationError     → 400
        Starlette HTTPException    → its status; 404 is "Endpoint not found"
        Exception                  → 500, generic message
    """

    @app.exception_handler(CatHealthError)
    async def handle_app_error(request: Request, exc: CatHealthError):
        rid = _request_id(request)
        if isinstance(exc, DatabaseError):
            logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
            message = GENERIC_SERVER_ERROR
        elif isinstance(exc, FileStorageError):
            logger.error("[%s] File storage error: %s | Context: %s", rid, exc.message, exc.context)
            message = exc.message
        else:
            logger.info("[%s] %s (%d): %s", rid, type(exc).__name__, exc.status_code, exc.message)
            message = exc.message

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, message, detail=f"{type(exc).__name__}: {exc.context}"),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _describe_validation_errors(exc)
        logger.info("[%s] Request validation failed: %s", _request_id(request), message)
        return JSONResponse(
            status_code=400,
            content=error_body(request, message, detail=str(exc.errors())),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = "Endpoint not found"
        elif exc.status_code == 405:
            message = "Method not allowed"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(request, GENERIC_SERVER_ERROR, detail=repr(exc)),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
    file_service: Optional[FileService] = None,
    auth_service: Optional[AuthService] = None,
) -> FastAPI:
    """
    Assembles the application.

    Args:
        config:       Settings to use (defaults to the env-loaded settings)
        database:     Connection pool owner (defaults to one on config.database_url)
        file_service: Upload storage (defaults to config.storage_root)
        auth_service: Password/token handling (defaults to config's JWT/bcrypt values)
    """
    config = config or default_settings

    app = FastAPI(
        title="CatHealth API",
        description=(
            "Track your cats' health: profiles, vaccinations, checkups, "
            "medications, insurance policies, a health calendar and reminders."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.database = database or Database(config.database_url, config)
    app.state.file_service = file_service or FileService.from_settings(config)
    app.state.auth_service = auth_service or AuthService.from_settings(config)

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(cats.router)
    app.include_router(records.router)
    app.include_router(insurance.router)
    app.include_router(calendar.router)
    app.include_router(todos.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


app = create_app()
