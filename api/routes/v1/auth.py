"""
api/routes/v1/auth.py -- JSON authentication endpoints.

Routes:
  POST /api/v1/auth/login   -- email/password login; returns the token and sets the cookie
  POST /api/v1/auth/logout  -- clears the cookie
  GET  /api/v1/auth/me      -- claim of the current session (requires auth)

Security:
  authenticate_user() runs bcrypt even for unknown emails and raises the same
  AuthenticationFailure for unknown email and wrong password. The exception
  handler in api/main.py turns it into a 401 with one generic message.
  Login responses carry Cache-Control: no-store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import ClaimResponse, LoginRequest, LoginResponse, MessageResponse
from auth.dependencies import require_claim
from auth.store import UserStore
from auth.tokens import SESSION_TTL_SECONDS, TokenService, authenticate_user, clear_auth_cookie, issue_session, set_auth_cookie
from core.config import get_settings

router = APIRouter()


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return the token and set the cookie."""
    user_store: UserStore = request.app.state.user_store
    tokens: TokenService = request.app.state.tokens
    user = authenticate_user(user_store, body.email, body.password)
    token = issue_session(tokens, user)
    resp = JSONResponse(
        content=LoginResponse(
            access_token=token,
            expires_in=SESSION_TTL_SECONDS,
            user=ClaimResponse(**user.to_claim()),
        ).model_dump(),
    )
    set_auth_cookie(resp, token, secure=get_settings().secure_cookies)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
async def logout() -> JSONResponse:
    resp = JSONResponse(content=MessageResponse(message="Déconnecté.").model_dump())
    clear_auth_cookie(resp)
    return resp


@router.get("/auth/me", response_model=ClaimResponse)
async def me(claim: dict = Depends(require_claim)) -> ClaimResponse:
    """Return the identity carried by the caller's session token."""
    return ClaimResponse(**claim)
