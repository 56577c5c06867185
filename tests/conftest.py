"""
tests/conftest.py -- Shared test fixtures for the marina backend.

This module provides:
  - make_stores(): isolated in-memory DBs for users and the marina
  - _patch_lifespan(): wires test stores and services into app.state
  - web_client: module-scoped TestClient (follow_redirects=False) plus a seeded user
  - client / token / auth_headers: per-test views of web_client
  - marina_services / user_service: service objects over a fresh store, no HTTP

Named shared-memory SQLite URIs (not plain :memory:) are required because
TestClient runs sync route handlers in a thread pool. Plain :memory: DBs are
per-connection and would present a blank schema to each worker thread.

The DEBUG env var must be set before any api/ import so get_settings()
auto-generates SECRET_KEY instead of raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# Set DEBUG before any api/ or core/ import.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from asgi import app
from auth.models import User
from auth.services import UserService
from auth.store import UserStore
from auth.tokens import SESSION_TTL_SECONDS, TokenService, hash_password
from marina.services import CatwayService, ReservationService
from marina.store import MarinaStore

TEST_SECRET = "test-secret-key-that-is-long-enough-0123456789"

SEED_NAME = "Capitaine"
SEED_EMAIL = "capitaine@port-russell.fr"
SEED_PASSWORD = "amarrage42"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_stores(db_suffix: str) -> tuple[UserStore, MarinaStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB names so test modules
                   never share rows.
    """
    users_url = f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true"
    marina_url = f"sqlite:///file:test_marina_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=users_url), MarinaStore(db_url=marina_url)


def _patch_lifespan(user_store: UserStore, marina_store: MarinaStore, tokens: TokenService):
    """Return a lifespan that puts the test stores on app.state instead of the real ones."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.tokens = tokens
        app.state.user_store = user_store
        app.state.marina_store = marina_store
        app.state.users = UserService(user_store)
        app.state.catways = CatwayService(marina_store)
        app.state.reservations = ReservationService(marina_store, app.state.catways)
        app.state.setup_required = False
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@dataclass
class WebContext:
    client: TestClient
    token: str
    user_id: int


@pytest.fixture(scope="module")
def web_client(request: pytest.FixtureRequest) -> Generator[WebContext, None, None]:
    """Yield a WebContext for web route integration tests.

    follow_redirects=False is essential: tests assert on redirect Location
    headers, which disappear once the client follows the redirect.
    """
    user_store, marina_store = make_stores(request.module.__name__.rsplit(".", 1)[-1])
    tokens = TokenService(secret_key=TEST_SECRET)

    seeded = User(name=SEED_NAME, email=SEED_EMAIL, hashed_password=hash_password(SEED_PASSWORD))
    seeded.id = user_store.create_user(seeded)
    token = tokens.issue(seeded.to_claim(), SESSION_TTL_SECONDS)

    app.router.lifespan_context = _patch_lifespan(user_store, marina_store, tokens)

    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield WebContext(client=client, token=token, user_id=seeded.id)

    user_store.close()
    marina_store.close()


@pytest.fixture()
def client(web_client: WebContext) -> Generator[TestClient, None, None]:
    """The module's client, with its cookie jar emptied after each test."""
    yield web_client.client
    web_client.client.cookies.clear()


@pytest.fixture()
def token(web_client: WebContext) -> str:
    return web_client.token


@pytest.fixture()
def secret() -> str:
    """Signing secret of the TokenService on app.state."""
    return TEST_SECRET


@pytest.fixture()
def seed() -> dict[str, str]:
    """Credentials of the user seeded into every web_client database."""
    return {"name": SEED_NAME, "email": SEED_EMAIL, "password": SEED_PASSWORD}


@pytest.fixture()
def auth_headers(token: str) -> dict[str, str]:
    """Bearer header for the seeded user. Leaves the cookie jar free for the session cookie."""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def json_headers(auth_headers: dict[str, str]) -> dict[str, str]:
    return {**auth_headers, "Accept": "application/json"}


# ---------------------------------------------------------------------------
# Service fixtures -- no HTTP
# ---------------------------------------------------------------------------


@pytest.fixture()
def marina_services() -> Generator[tuple[CatwayService, ReservationService], None, None]:
    user_store, marina_store = make_stores(f"svc_{uuid.uuid4().hex}")
    catways = CatwayService(marina_store)
    yield catways, ReservationService(marina_store, catways)
    marina_store.close()
    user_store.close()


@pytest.fixture()
def user_service() -> Generator[UserService, None, None]:
    user_store, marina_store = make_stores(f"svc_{uuid.uuid4().hex}")
    yield UserService(user_store)
    user_store.close()
    marina_store.close()
