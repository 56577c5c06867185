"""
api/main.py -- FastAPI application entry point for the marina backend.

Run with:      uvicorn asgi:app --reload

Middleware, in registration order (Starlette runs the last registered first):
  1. CORSMiddleware     -- CORS headers for allowed browser origins
  2. SessionMiddleware  -- signed cookie session, used for one-shot flash messages
  3. setup_redirect     -- first-run redirect to /setup while no user exists
  4. method_override    -- POST ?_method=PUT|DELETE from HTML forms
  5. log_requests       -- one log line per request with latency

Every failure, whatever raised it, goes through core.normalizer.normalize() in
the exception handlers below and comes out as either the JSON error envelope or
the HTML error page (content negotiation: core.negotiation.wants_json). The
HTML renderer lives in web/ and is attached to app.state.error_page by asgi.py,
so api/ never imports web/.

Lifespan builds the stores, the entity services and the TokenService. The
signing secret is read from Settings exactly once, here.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from api.models import ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from auth.services import UserService
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings
from core.errors import MarinaError, NotFoundError, ValidationFailure
from core.negotiation import wants_json
from core.normalizer import Normalized, normalize
from marina.services import CatwayService, ReservationService
from marina.store import MarinaStore

VERSION = "0.1.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, _settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("marina.api")

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build and tear down application-level resources.

    Everything before yield runs on startup; everything after yield on shutdown.
    """
    settings = get_settings()
    logger.info("Marina backend starting up")
    app.state.tokens = TokenService(secret_key=settings.secret_key)

    app.state.user_store = UserStore(settings.database_url)
    app.state.marina_store = MarinaStore(settings.database_url)
    app.state.users = UserService(app.state.user_store)
    app.state.catways = CatwayService(app.state.marina_store)
    app.state.reservations = ReservationService(app.state.marina_store, app.state.catways)

    app.state.setup_required = not app.state.user_store.has_users()
    logger.info("Stores initialized (setup_required=%s)", app.state.setup_required)

    yield

    app.state.marina_store.close()
    app.state.user_store.close()
    logger.info("Marina backend shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Marina API",
    description="Catways, reservations and back-office users of the marina.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SessionMiddleware, secret_key=_settings.secret_key, https_only=_settings.secure_cookies)

# ---------------------------------------------------------------------------
# HTTP middleware
# ---------------------------------------------------------------------------

_SETUP_EXEMPT = ("/setup", "/api/v1/health")
_OVERRIDABLE = {"PUT", "PATCH", "DELETE"}


@app.middleware("http")
async def setup_redirect(request: Request, call_next):
    """Redirect every request to /setup while no user exists (first-run state).

    setup_required is set in lifespan and cleared by POST /setup once the first
    user is created.
    """
    if getattr(request.app.state, "setup_required", False):
        path = request.url.path
        if path not in _SETUP_EXEMPT and not path.startswith("/static/"):
            return RedirectResponse("/setup", status_code=302)
    return await call_next(request)


@app.middleware("http")
async def method_override(request: Request, call_next):
    """Let HTML forms reach PUT and DELETE routes with POST ?_method=PUT.

    The method is rewritten on the ASGI scope before routing, so the router
    sees the overridden verb.
    """
    if request.method == "POST":
        override = request.query_params.get("_method", "").upper()
        if override in _OVERRIDABLE:
            request.scope["method"] = override
    return await call_next(request)


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
# Web UI routers are mounted by asgi.py, not here.

# ---------------------------------------------------------------------------
# Exception handlers
#
# All of them call normalize() and then _error_response(), so a failure looks
# the same whichever route raised it.
# ---------------------------------------------------------------------------


def _error_response(request: Request, normalized: Normalized) -> Response:
    """Render a normalized failure as JSON or as the HTML error page."""
    if not wants_json(request.headers, request.url.path, request.method):
        error_page = getattr(request.app.state, "error_page", None)
        if error_page is not None:
            return error_page(request, normalized)
    return JSONResponse(
        status_code=normalized.status_code,
        content=ErrorResponse.from_normalized(normalized).model_dump(),
    )


@app.exception_handler(MarinaError)
async def marina_error_handler(request: Request, exc: MarinaError) -> Response:
    normalized = normalize(exc)
    if normalized.status_code < 500:
        logger.info("%s %s -> %d %s", request.method, request.url.path, normalized.status_code, normalized.code)
    return _error_response(request, normalized)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    """Body or query parameters that FastAPI itself rejected."""
    messages = [f"{'.'.join(str(p) for p in e['loc'][1:])}: {e['msg']}" for e in exc.errors()]
    return _error_response(request, normalize(ValidationFailure(messages)))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Unknown paths and unsupported methods raised by the router itself."""
    if exc.status_code == 404:
        return _error_response(request, normalize(NotFoundError()))
    return _error_response(
        request,
        Normalized(exc.status_code, f"http_{exc.status_code}", [str(exc.detail)]),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Catch-all for unexpected server errors.

    The raw exception goes to the log only; the client gets a generic message.
    """
    return _error_response(request, normalize(exc))


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=VERSION)
