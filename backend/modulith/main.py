"""
Modulith Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the store client, middleware chain, exception
       handlers and routes; `run()` binds the uvicorn listener.
Who:   uvicorn imports `modulith.main:app`; tests call create_app() directly.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware Chain (execution order):                    │
    │  Rate Limit → Request ID → Logging → Timeout → CORS     │
    │                                                         │
    │  Routes:                                                │
    │  /tasks/* (modulith.routes.api_router)   GET /health    │
    │                                                         │
    │  Exception Handlers:                                    │
    │  RequestValidationError→400 │ DatabaseError→500 │ *→500 │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, schedule the store connectivity check
              (a failure is logged, the server still starts)
    Shutdown: cancel the check if still pending, dispose the engine
"""

import asyncio
import logging
import sys
import traceback
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from modulith import __version__
from modulith.config import Settings, settings as default_settings
from modulith.database import Database
from modulith.exceptions import DatabaseError
from modulith.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    RequestTimeoutMiddleware,
    request_id_var,
)
from modulith.routes import api_router, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] modulith.access: GET /tasks 200 ...
    Output goes to stdout (containers capture it).
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Request lines come from modulith.access; SQL echo is opt-in via DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

async def check_database(database: Database) -> bool:
    """Log whether the store is reachable. Never raises."""
    status = await database.check_connection()
    if status.connected:
        logger.info("Database connection established")
    else:
        logger.error("Database connection failed: %s", status.error)
    return status.connected


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("Modulith %s starting (environment=%s)", __version__, config.environment)

    # Not awaited: the listener comes up even when the store is down
    app.state.database_check = asyncio.create_task(check_database(database))

    logger.info("Server ready at http://%s:%d", config.host, config.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Modulith shutting down...")
    check = app.state.database_check
    if not check.done():
        check.cancel()
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # Handlers for unexpected errors run outside the middleware's context,
    # request.state (shared through the ASGI scope) still has the ID
    return getattr(request.state, "request_id", None) or request_id_var.get("")


def register_exception_handlers(app: FastAPI, config: Settings) -> None:
    """
    Map exceptions that escape the controllers to JSON responses.

    Handler hierarchy:
        RequestValidationError → 400 {"error": [issues]}  (query/path params)
        DatabaseError          → 500
        Exception (fallback)   → 500

    500 bodies are {"error": "Internal Server Error", "request_id": ...},
    plus "stack" (traceback lines) outside production. Full details always
    go to the server log.
    """

    def internal_error(request: Request, exc: Exception) -> JSONResponse:
        rid = _request_id(request)
        logger.error(
            "[%s] Unhandled error on %s %s: %s",
            rid,
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        content: Dict[str, Any] = {"error": "Internal Server Error", "request_id": rid}
        if not config.is_production:
            content["stack"] = "".join(traceback.format_exception(exc)).splitlines()
        return JSONResponse(status_code=500, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Bad query or path parameter, same issue shape as body validation."""
        issues = [
            {"code": err["type"], "path": list(err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"error": issues})

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error context: %s", _request_id(request), exc.context)
        return internal_error(request, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        return internal_error(request, exc)


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
        settings: Configuration; defaults to the process-wide settings.
        database: Store client; built from `settings` when omitted. Exactly
            one client exists per app, reachable as app.state.database.
    """
    config = settings or default_settings

    app = FastAPI(
        title="Modulith API",
        description="Modular monolith REST API with an example tasks module.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.database = database or Database(config=config)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → Timeout → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials="*" not in config.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "RateLimit-Limit",
            "RateLimit-Remaining",
            "RateLimit-Reset",
            "Retry-After",
        ],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)

    if config.request_timeout > 0:
        app.add_middleware(RequestTimeoutMiddleware, timeout=config.request_timeout)

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    if config.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            limit=config.rate_limit_requests,
            window=config.rate_limit_window,
        )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, config)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(api_router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: `modulith`."""
    uvicorn.run(
        "modulith.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `modulith.main:app` to be importable
app = create_app()
