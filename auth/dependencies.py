"""
auth/dependencies.py -- The auth gate, as FastAPI Depends() helpers.

Per-request states:
  no token            -> rejected (AuthorizationFailure, 401)
  token present       -> verifying
  verifying, bad      -> rejected (InvalidTokenError, 401)
  verifying, good     -> authenticated: claim stored on request.state.user,
                         downstream handler runs once

Token sources, in priority order:
  1. "authToken" cookie -- set by the login flow.
  2. Authorization: Bearer <token> header -- API clients.

Verification is stateless: the claim comes from the token, not from the
credential store. A rejected request is never retried; the client must log in
again.

try_get_claim() is the soft variant (returns None on failure).
require_claim() raises, and is what protected routers depend on:
    router = APIRouter(dependencies=[Depends(require_claim)])
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.tokens import AUTH_COOKIE, TokenService
from core.errors import AuthorizationFailure, InvalidTokenError

logger = logging.getLogger("marina.auth")


def _token_from(request: Request) -> str | None:
    token = request.cookies.get(AUTH_COOKIE)
    if not token:
        token = request.headers.get("Authorization") or None
    return token


def try_get_claim(request: Request) -> dict | None:
    """Return the verified claim for this request, or None. Never raises."""
    token = _token_from(request)
    if not token:
        return None
    tokens: TokenService = request.app.state.tokens
    try:
        return tokens.verify(token)
    except InvalidTokenError:
        return None


def require_claim(request: Request) -> dict:
    """Require a valid session token. Raises AuthorizationFailure (401) otherwise."""
    token = _token_from(request)
    if not token:
        raise AuthorizationFailure()
    tokens: TokenService = request.app.state.tokens
    try:
        claim = tokens.verify(token)
    except InvalidTokenError:
        logger.info("Rejected token on %s %s", request.method, request.url.path)
        raise
    request.state.user = claim
    return claim
