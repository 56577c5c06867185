"""
tests/test_authenticate.py -- The login flow, as a function and over HTTP.

Coverage:
  - authenticate_user(): success, unknown email, wrong password, corrupt hash
  - unknown email and wrong password are indistinguishable to the client
  - POST /authenticate (form): dashboard + httpOnly authToken cookie, or home page 401
  - POST /api/v1/auth/login (JSON): token body + cookie, or 401 envelope
  - logout deletes the cookie
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from auth.models import User
from auth.services import UserService
from auth.tokens import AUTH_COOKIE, SESSION_TTL_SECONDS, authenticate_user, hash_password
from core.errors import AuthenticationFailure, UnexpectedFailure


def _set_cookie_headers(resp) -> list[str]:
    return resp.headers.get_list("set-cookie")


@pytest.fixture()
def store(user_service: UserService):
    user_service.store.create_user(
        User(name="Marin", email="marin@port.fr", hashed_password=hash_password("ancre123"))
    )
    return user_service.store


class TestAuthenticateUser:
    def test_valid_credentials_return_user(self, store) -> None:
        user = authenticate_user(store, "marin@port.fr", "ancre123")
        assert user.email == "marin@port.fr"
        assert user.to_claim() == {"id": user.id, "name": "Marin", "email": "marin@port.fr"}

    def test_claim_never_carries_the_password(self, store) -> None:
        claim = authenticate_user(store, "marin@port.fr", "ancre123").to_claim()
        assert "password" not in claim
        assert "hashed_password" not in claim

    def test_unknown_email_and_wrong_password_look_the_same(self, store) -> None:
        with pytest.raises(AuthenticationFailure) as unknown:
            authenticate_user(store, "personne@port.fr", "ancre123")
        with pytest.raises(AuthenticationFailure) as wrong:
            authenticate_user(store, "marin@port.fr", "mauvais")
        assert unknown.value.messages == wrong.value.messages

    def test_email_match_is_case_sensitive(self, store) -> None:
        with pytest.raises(AuthenticationFailure):
            authenticate_user(store, "MARIN@port.fr", "ancre123")

    def test_email_is_trimmed_before_lookup(self, store) -> None:
        assert authenticate_user(store, "  marin@port.fr ", "ancre123").email == "marin@port.fr"

    def test_corrupt_hash_is_unexpected_failure(self, store) -> None:
        store.create_user(User(name="Casse", email="casse@port.fr", hashed_password="garbage"))
        with pytest.raises(UnexpectedFailure):
            authenticate_user(store, "casse@port.fr", "ancre123")


class TestFormLogin:
    def test_success_renders_dashboard_and_sets_cookie(self, client: TestClient, seed: dict) -> None:
        resp = client.post("/authenticate", data={"email": seed["email"], "password": seed["password"]})
        assert resp.status_code == 200
        assert seed["name"] in resp.text
        cookie = next(h for h in _set_cookie_headers(resp) if h.startswith(f"{AUTH_COOKIE}="))
        assert "httponly" in cookie.lower()
        assert f"max-age={SESSION_TTL_SECONDS}" in cookie.lower()
        assert resp.headers["cache-control"] == "no-store"

    def test_cookie_from_login_opens_protected_pages(self, client: TestClient, seed: dict) -> None:
        client.post("/authenticate", data={"email": seed["email"], "password": seed["password"]})
        assert client.get("/dashboard").status_code == 200

    def test_wrong_password_renders_home_with_401(self, client: TestClient, seed: dict) -> None:
        resp = client.post("/authenticate", data={"email": seed["email"], "password": "mauvais"})
        assert resp.status_code == 401
        assert "Identifiants erronés" in resp.text
        assert AUTH_COOKIE not in resp.cookies

    def test_unknown_email_gets_identical_page(self, client: TestClient, seed: dict) -> None:
        wrong = client.post("/authenticate", data={"email": seed["email"], "password": "mauvais"})
        unknown = client.post("/authenticate", data={"email": "inconnu@port.fr", "password": "mauvais"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.text.replace(seed["email"], "") == unknown.text.replace("inconnu@port.fr", "")

    def test_logout_deletes_cookie(self, client: TestClient, seed: dict) -> None:
        client.post("/authenticate", data={"email": seed["email"], "password": seed["password"]})
        resp = client.post("/logout")
        assert resp.status_code == 302
        assert resp.headers["location"] == "/"
        assert any(h.startswith(f"{AUTH_COOKIE}=") for h in _set_cookie_headers(resp))
        assert client.get("/dashboard").status_code == 401


class TestApiLogin:
    def _login(self, client: TestClient, seed: dict):
        return client.post("/api/v1/auth/login", json={"email": seed["email"], "password": seed["password"]})

    def test_success_returns_token_and_claim(self, client: TestClient, seed: dict) -> None:
        resp = self._login(client, seed)
        assert resp.status_code == 200
        body = resp.json()
        assert body["token_type"] == "bearer"
        assert body["expires_in"] == SESSION_TTL_SECONDS
        assert body["user"]["email"] == seed["email"]
        assert resp.headers["cache-control"] == "no-store"
        assert AUTH_COOKIE in resp.cookies

    def test_padded_email_logs_in(self, client: TestClient, seed: dict) -> None:
        resp = client.post("/api/v1/auth/login", json={"email": f" {seed['email']} ", "password": seed["password"]})
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == seed["email"]

    def test_returned_token_works_as_bearer(self, client: TestClient, seed: dict) -> None:
        token = self._login(client, seed).json()["access_token"]
        client.cookies.clear()
        resp = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["name"] == seed["name"]

    def test_token_verifies_with_app_token_service(self, client: TestClient, seed: dict) -> None:
        token = self._login(client, seed).json()["access_token"]
        assert client.app.state.tokens.verify(token)["email"] == seed["email"]

    @pytest.mark.parametrize("email", ["capitaine@port-russell.fr", "inconnu@port.fr"])
    def test_failure_is_generic_401(self, client: TestClient, email: str) -> None:
        resp = client.post("/api/v1/auth/login", json={"email": email, "password": "mauvais"})
        assert resp.status_code == 401
        assert resp.json() == {
            "error": {
                "code": "invalid_credentials",
                "message": "Identifiants erronés, veuillez réessayer.",
                "messages": ["Identifiants erronés, veuillez réessayer."],
            }
        }

    def test_api_logout_clears_cookie(self, client: TestClient) -> None:
        resp = client.post("/api/v1/auth/logout")
        assert resp.status_code == 200
        assert any(h.startswith(f"{AUTH_COOKIE}=") for h in _set_cookie_headers(resp))
