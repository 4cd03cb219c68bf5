"""
Evernote REST — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn evernote_rest.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐                   │
    │  │ Req ID   │→│  Logging        │                   │
    │  └──────────┘ └─────────────────┘                   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────────┐ ┌──────────────┐  │
    │  │ POST /{store}/{methodName}   │ │ GET /health  │  │
    │  └──────────────────────────────┘ └──────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Deserialization→400 │ NotFound→404 │ ...→502 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (problems are logged, not fatal)
    3. Register the NoteStore/UserStore client operations with the dispatcher
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from evernote_rest import __version__
from evernote_rest.config import settings
from evernote_rest.dispatch import Dispatcher, OperationRegistry
from evernote_rest.exceptions import (
    DeserializationError,
    EvernoteRestError,
    InvocationError,
    MethodNotFoundError,
    MissingAccessTokenError,
    ParameterNameResolutionError,
    StoreConnectionError,
)
from evernote_rest.middleware.logging import RequestLoggingMiddleware
from evernote_rest.middleware.request_id import RequestIDMiddleware, request_id_var
from evernote_rest.routes import health, store
from evernote_rest.services.evernote import register_store_clients

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

    # Thrift's HTTP transport and uvicorn's access log are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("thrift").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, configuration check, store client registration.

    A missing Evernote SDK or a bad configuration does not stop the server:
    /health reports "degraded" and store requests return structured errors.
    """
    setup_logging()
    logger.info("Evernote REST starting up (environment=%s)...",
                settings.evernote_environment.value)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    try:
        register_store_clients(app.state.dispatcher.registry)
    except StoreConnectionError as e:
        logger.error("Store clients unavailable: %s", e.message)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(exc: EvernoteRestError, details: bool = True) -> JSONResponse:
    content = {
        "error": exc.error_code,
        "message": exc.message,
        "request_id": request_id_var.get(""),
    }
    if details and exc.context:
        content["details"] = exc.context
    return JSONResponse(status_code=exc.status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the dispatch error family to HTTP responses.

    Handler hierarchy:
        DeserializationError          → 400 (client can fix the JSON)
        MissingAccessTokenError       → 401
        MethodNotFoundError           → 404
        ParameterNameResolutionError  → 500 (server configuration)
        InvocationError               → 502 (Evernote rejected or failed the call)
        StoreConnectionError          → 502
        EvernoteRestError (base)      → its own status code
        Exception (fallback)          → 500, traceback logged server-side only
    """

    @app.exception_handler(DeserializationError)
    async def handle_deserialization_error(request: Request, exc: DeserializationError):
        logger.warning("[%s] %s", request_id_var.get(""), exc.message)
        return _error_response(exc)

    @app.exception_handler(MissingAccessTokenError)
    async def handle_missing_token(request: Request, exc: MissingAccessTokenError):
        return _error_response(exc)

    @app.exception_handler(MethodNotFoundError)
    async def handle_method_not_found(request: Request, exc: MethodNotFoundError):
        return _error_response(exc)

    @app.exception_handler(ParameterNameResolutionError)
    async def handle_parameter_names(request: Request, exc: ParameterNameResolutionError):
        logger.error("[%s] %s", request_id_var.get(""), exc.message, exc_info=exc.cause)
        return _error_response(exc)

    @app.exception_handler(InvocationError)
    async def handle_invocation_error(request: Request, exc: InvocationError):
        logger.warning("[%s] %s", request_id_var.get(""), exc.message)
        return _error_response(exc)

    @app.exception_handler(StoreConnectionError)
    async def handle_store_connection(request: Request, exc: StoreConnectionError):
        logger.error("[%s] %s | Cause: %r", request_id_var.get(""), exc.message, exc.cause)
        return _error_response(exc)

    @app.exception_handler(EvernoteRestError)
    async def handle_evernote_rest_error(request: Request, exc: EvernoteRestError):
        logger.error("[%s] %s", request_id_var.get(""), exc.message, exc_info=exc.cause)
        return _error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    The dispatcher (and its operation registry) lives on app.state so route
    dependencies and tests share one instance per application.
    """
    app = FastAPI(
        title="Evernote REST",
        description=(
            "JSON-over-HTTP bridge to the Evernote NoteStore and UserStore APIs. "
            "POST a JSON object to /{noteStore|userStore}/{methodName}."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.dispatcher = Dispatcher(OperationRegistry())

    # Last added executes first: RequestID wraps Logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(store.router)
    app.include_router(health.router)

    return app


app = create_app()
