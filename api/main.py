"""
api/main.py -- FastAPI application entry point for Messagely.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. log_requests   -- one log line per request with status and latency
  2. CORSMiddleware -- adds CORS headers for allowed browser origins

Lifespan builds everything exactly once: Settings, the Engine, both stores,
TokenIssuer, CredentialStore, AuthenticationGate, and the MessagingService.
Route handlers read them from app.state. The one import-time read is the
CORS header list, which has to name the configured auth header.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.messages import router as messages_router
from api.routes.v1.users import router as users_router
from auth.credentials import CredentialStore
from auth.dependencies import AuthenticationGate
from auth.exceptions import MessagelyError, Unauthenticated
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import Settings, get_settings
from core.database import create_db_engine
from messages.service import MessagingService
from messages.store import MessageStore

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("messagely.api")


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def wire_services(app: FastAPI, settings: Settings, engine: Engine) -> None:
    """Build the core components from one Settings object and attach them to app.state.

    The lifespan calls this at startup; tests call it with their own Settings
    and an in-memory engine.
    """
    users = UserStore(engine)
    tokens = TokenIssuer(settings)
    credentials = CredentialStore(users, settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.auth_gate = AuthenticationGate(tokens, header_name=settings.auth_header_name)
    app.state.messaging = MessagingService(
        credentials=credentials,
        users=users,
        messages=MessageStore(engine),
        tokens=tokens,
        listing_scope=settings.message_listing_scope,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create shared resources on startup and dispose of them on shutdown."""
    logger.info("Messagely API starting up")
    settings = get_settings()
    engine = create_db_engine(settings.database_url)
    wire_services(app, settings, engine)
    logger.info(
        "Auth initialized (token_expiry=%s, listing_scope=%s)",
        settings.token_expire_seconds if settings.token_expiry_enabled else "disabled",
        settings.message_listing_scope,
    )

    yield

    engine.dispose()
    logger.info("Messagely API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Messagely API",
    description="Direct messages between registered users, behind bearer-token auth.",
    version=__version__,
    lifespan=lifespan,
)


def cors_allow_headers(settings: Settings) -> list[str]:
    """Request headers browsers may send: JSON bodies plus the configured auth header."""
    return ["Content-Type", settings.auth_header_name]


app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost", "http://localhost:3000", "http://127.0.0.1"],
    allow_methods=["GET", "POST"],
    allow_headers=cors_allow_headers(get_settings()),
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(messages_router, prefix="/api/v1", tags=["Messages"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


@app.exception_handler(MessagelyError)
async def messagely_error_handler(request: Request, exc: MessagelyError) -> JSONResponse:
    """Render a classified core error with its stable code and status.

    Unauthenticated carries WWW-Authenticate so clients know to send a bearer
    token. Its body is identical for missing, malformed, tampered, and expired
    tokens.
    """
    response = _error_response(exc.status_code, exc.code, exc.message)
    if isinstance(exc, Unauthenticated):
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or params fail validation."""
    return _error_response(422, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for FastAPI/Starlette HTTP exceptions (e.g. 404 on unknown paths)."""
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    Security note: the raw exception is written to the log only, never to the
    response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)
