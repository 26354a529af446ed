"""
Menagerie Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn menagerie.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ HTML views   │ │ /animals API │ │ GET /health │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers (outside the API controller):   │
    │  BadRequest→400 │ NotFound→404 │ Storage→409/500    │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the Database (unless one was injected)
    Shutdown: dispose the Database if the app created it
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from menagerie import __version__
from menagerie.config import Settings, settings as default_settings
from menagerie.controllers.resource import GENERIC_SERVER_ERROR
from menagerie.database import Database
from menagerie.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    StorageError,
)
from menagerie.middleware.logging import RequestLoggingMiddleware
from menagerie.middleware.request_id import RequestIDMiddleware, request_id_var
from menagerie.routes import animals, health, views

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout so
    container runtimes capture it.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These libraries log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own the connection pool for the lifetime of the process.

    A Database injected through create_app() belongs to the caller and is
    left open at shutdown.
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("Menagerie backend %s starting up...", __version__)

    owns_database = app.state.database is None
    if owns_database:
        app.state.database = Database(app_settings)
    logger.info(
        "Connection pool: size=%d overflow=%d timeout=%.0fs",
        app_settings.db_pool_size,
        app_settings.db_max_overflow,
        app_settings.db_pool_timeout,
    )
    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)

    yield

    logger.info("Menagerie backend shutting down...")
    if owns_database:
        await app.state.database.dispose()
        app.state.database = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Error rendering for everything outside the Resource Controller.

    The API routes never raise these; the controller already turned its
    outcome into a response. Views and dependencies do raise them.
    Handlers NEVER put driver text or tracebacks in the response.
    """

    @app.exception_handler(BadRequestError)
    async def handle_bad_request(request: Request, exc: BadRequestError):
        rid = request_id_var.get("")
        logger.warning("[%s] Bad request: %s", rid, exc.message)
        content = {"error": exc.error_code, "message": exc.message, "request_id": rid}
        if exc.details:
            content["details"] = exc.details
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={"error": exc.error_code, "message": exc.message, "request_id": rid},
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        """Conflicts keep their message; other storage failures get the generic one."""
        rid = request_id_var.get("")
        if isinstance(exc, ConflictError):
            return JSONResponse(
                status_code=409,
                content={"error": exc.error_code, "message": exc.message, "request_id": rid},
            )
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"error": "server_error", "message": GENERIC_SERVER_ERROR, "request_id": rid},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: stack trace is logged server-side ONLY."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "server_error", "message": GENERIC_SERVER_ERROR, "request_id": rid},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None, database: Optional[Database] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: configuration; the module-level singleton when omitted
        database: an already constructed Database (tests inject one); when
                  omitted the lifespan creates and disposes its own
    """
    app_settings = settings or default_settings

    app = FastAPI(
        title="Menagerie API",
        description="CRUD service for animals, with a small HTML front end.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.database = database

    # Middleware executes in REVERSE order of addition (last added = first to run)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Views first: "/animals/new" must not be captured by "/animals/{resource_id}"
    app.include_router(views.router)
    app.include_router(animals.router)
    app.include_router(health.router)

    return app


# uvicorn expects `menagerie.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve on BACKEND_HOST:BACKEND_PORT."""
    import uvicorn

    uvicorn.run(
        "menagerie.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
    )
