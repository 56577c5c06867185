"""
auth/tokens.py -- Password hashing, session tokens, and the login flow.

Security design decisions:
  Passwords: bcrypt with a per-call random salt (bcrypt.gensalt()). Same input
       hashes differently every time; verify_password() recomputes with the salt
       embedded in the stored hash. bcrypt's cost factor makes brute force slow.
       A malformed stored hash is an internal failure (UnexpectedFailure), not a
       password mismatch.

  Tokens: python-jose with HS256. TokenService is constructed with the signing
       secret (read once from Settings by the app lifespan) and an optional clock.
       The token carries a copy of the user claim and an absolute expiry; the
       server keeps no session table. verify() raises InvalidTokenError on any
       failure -- bad signature, malformed token, missing claim, or expiry.

  Login: authenticate_user() always runs bcrypt, against a dummy hash when the
       email is unknown, so neither the message nor the response time tells an
       attacker which emails exist.

Layer rule: no imports from api/, web/ or marina/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from core.errors import AuthenticationFailure, InvalidTokenError, UnexpectedFailure

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("marina.auth")

AUTH_COOKIE = "authToken"
SESSION_TTL_SECONDS = 24 * 60 * 60

_ALGORITHM = "HS256"
_BEARER = "bearer "

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes of input. Passwords are capped well
    below that by the user schemas.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    Raises UnexpectedFailure if the stored hash cannot be read by bcrypt.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError) as exc:
        raise UnexpectedFailure(f"password hash could not be verified: {exc}") from exc


# Computed once at import so the first unknown-email login costs the same as
# every later one.
_DUMMY_HASH: str = hash_password("marina_timing_dummy")


# ---------------------------------------------------------------------------
# Token service
# ---------------------------------------------------------------------------


def strip_bearer(token: str) -> str:
    """Remove an optional, case-insensitive "bearer " prefix."""
    if token[: len(_BEARER)].lower() == _BEARER:
        return token[len(_BEARER) :].strip()
    return token.strip()


class TokenService:
    """Issues and verifies signed, self-contained session tokens.

    Stateless and reentrant: the only state is the immutable secret and the
    clock, both fixed at construction.

    Usage:
        tokens = TokenService(secret_key=settings.secret_key)
        token = tokens.issue(user.to_claim(), SESSION_TTL_SECONDS)
        claim = tokens.verify(token)  # raises InvalidTokenError
    """

    def __init__(self, secret_key: str, clock: Callable[[], float] = time.time) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a signing secret.")
        self._secret_key = secret_key
        self._clock = clock

    def issue(self, claim: dict, ttl_seconds: int) -> str:
        """Encode claim with an absolute expiry of now + ttl_seconds."""
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must not be negative.")
        payload = {"user": claim, "exp": self._clock() + ttl_seconds}
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> dict:
        """Return the embedded claim, or raise InvalidTokenError.

        Expiry is checked against the injected clock rather than by python-jose,
        so the service and its tests agree on what "now" is.
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                strip_bearer(token),
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise InvalidTokenError() from exc

        claim = payload.get("user")
        expires_at = payload.get("exp")
        if not isinstance(claim, dict) or not isinstance(expires_at, (int, float)):
            raise InvalidTokenError()
        if self._clock() > expires_at:
            raise InvalidTokenError()
        return claim


# ---------------------------------------------------------------------------
# Login flow
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User:
    """Check an email/password pair against the credential store.

    Surrounding whitespace is stripped from email, then the lookup is an exact,
    case-sensitive match on the stored value.
    Raises AuthenticationFailure (same message for unknown email and wrong
    password) or UnexpectedFailure when the stored hash is unreadable.
    """
    user = store.get_by_email(email.strip())
    if user is None:
        # Equalize timing -- do NOT return before running bcrypt
        verify_password(password, _DUMMY_HASH)
        raise AuthenticationFailure()
    if not verify_password(password, user.hashed_password):
        raise AuthenticationFailure()
    return user


def issue_session(tokens: TokenService, user: User) -> str:
    """Issue a 24-hour session token for an authenticated user."""
    return tokens.issue(user.to_claim(), SESSION_TTL_SECONDS)


# ---------------------------------------------------------------------------
# Cookie helper
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str, secure: bool = False) -> None:
    """Write the session token as an httpOnly cookie on the response.

    httponly=True: JS cannot read the cookie.
    samesite="lax": not sent on cross-site POST.
    max_age: matches the token lifetime so both expire together.
    """
    response.set_cookie(
        AUTH_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=secure,
        max_age=SESSION_TTL_SECONDS,
    )


def clear_auth_cookie(response) -> None:
    response.delete_cookie(AUTH_COOKIE)
