"""
tests/test_normalizer.py -- Outcome-to-response mapping and content negotiation.

Unit tests for core.normalizer.normalize(), core.negotiation.wants_json() and
core.validation.parse_id(), then the same mapping observed through the HTTP
exception handlers.
"""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from core.errors import (
    AuthenticationFailure,
    AuthorizationFailure,
    DuplicateKeyError,
    InvalidTokenError,
    MalformedIdentifierError,
    NotFoundError,
    UnexpectedFailure,
    ValidationFailure,
)
from core.negotiation import wants_json
from core.normalizer import normalize
from core.validation import parse_id


class TestNormalize:
    @pytest.mark.parametrize(
        "exc, status, code",
        [
            (ValidationFailure(["Le nom est obligatoire"]), 400, "validation_failed"),
            (MalformedIdentifierError("abc"), 400, "malformed_identifier"),
            (DuplicateKeyError("catway_number"), 400, "duplicate_key"),
            (AuthenticationFailure(), 401, "invalid_credentials"),
            (AuthorizationFailure(), 401, "unauthorized"),
            (InvalidTokenError(), 401, "unauthorized"),
            (NotFoundError(), 404, "not_found"),
            (UnexpectedFailure("disk full"), 500, "internal_error"),
        ],
    )
    def test_status_table(self, exc, status: int, code: str) -> None:
        normalized = normalize(exc)
        assert normalized.status_code == status
        assert normalized.code == code

    def test_validation_keeps_every_field_message(self) -> None:
        messages = ["Le nom est obligatoire", "L'email est obligatoire"]
        assert normalize(ValidationFailure(messages)).messages == messages

    def test_default_messages_are_localized(self) -> None:
        assert normalize(NotFoundError()).message == "Ressource non trouvée"
        assert normalize(MalformedIdentifierError()).message == "Entrez un identifiant valide"
        assert normalize(DuplicateKeyError("email")).message == "Cette valeur existe déjà"

    def test_unexpected_detail_is_logged_not_returned(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="marina.errors"):
            normalized = normalize(UnexpectedFailure("connection refused on 10.0.0.5"))
        assert normalized.messages == ["Erreur interne du serveur"]
        assert "10.0.0.5" in caplog.text

    def test_foreign_exception_is_a_generic_500(self) -> None:
        normalized = normalize(KeyError("secret_column"))
        assert normalized.status_code == 500
        assert "secret_column" not in normalized.message


class TestWantsJson:
    def test_api_paths_always_get_json(self) -> None:
        assert wants_json({}, "/api/v1/health") is True

    def test_browser_accept_gets_html(self) -> None:
        assert wants_json({"accept": "text/html,application/xhtml+xml,*/*;q=0.8"}, "/catways") is False

    def test_json_accept_gets_json(self) -> None:
        assert wants_json({"accept": "application/json"}, "/catways") is True

    def test_xhr_gets_json(self) -> None:
        assert wants_json({"x-requested-with": "XMLHttpRequest"}, "/catways") is True

    def test_dashboard_referer_only_applies_to_mutations(self) -> None:
        headers = {"referer": "http://localhost:8000/dashboard/catway/edit"}
        assert wants_json(headers, "/catways/3", "PUT") is True
        assert wants_json(headers, "/catways/3", "DELETE") is True
        assert wants_json(headers, "/catways", "GET") is False


class TestParseId:
    @pytest.mark.parametrize("raw, expected", [("1", 1), ("42", 42), (" 7 ", 7), (12, 12)])
    def test_accepts_positive_integers(self, raw, expected: int) -> None:
        assert parse_id(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["abc", "", "0", "-3", "1.5", "٣", True, None, "12abc", "99999999999999999999", 2**63]
    )
    def test_rejects_everything_else(self, raw) -> None:
        with pytest.raises(MalformedIdentifierError):
            parse_id(raw)


class TestHttpMapping:
    def test_unknown_path_is_404_envelope(self, client: TestClient) -> None:
        resp = client.get("/api/v1/nowhere")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"

    def test_unknown_page_is_404_html(self, client: TestClient) -> None:
        resp = client.get("/nowhere")
        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("text/html")

    def test_malformed_id_is_400(self, client: TestClient, json_headers: dict) -> None:
        resp = client.get("/catways/abc", headers=json_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == {
            "code": "malformed_identifier",
            "message": "Entrez un identifiant valide",
            "messages": ["Entrez un identifiant valide"],
        }

    def test_id_too_large_for_the_database_is_400(self, client: TestClient, json_headers: dict) -> None:
        resp = client.get("/catways/99999999999999999999", headers=json_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "malformed_identifier"

    def test_missing_record_is_404(self, client: TestClient, json_headers: dict) -> None:
        resp = client.get("/catways/99999", headers=json_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Catway non trouvé"

    def test_bad_api_body_is_400(self, client: TestClient) -> None:
        resp = client.post("/api/v1/auth/login", json={"email": "x@y.fr"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_failed"

    def test_unexpected_error_is_generic_500(
        self, web_client, auth_headers: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Store internals must never reach the client."""

        def explode():
            raise RuntimeError("sqlite3.OperationalError: database is locked at /var/lib/marina.db")

        monkeypatch.setattr(web_client.client.app.state.catways, "list", explode)
        # A second client without lifespan, sharing app.state, that returns the 500 instead of raising
        quiet = TestClient(web_client.client.app, raise_server_exceptions=False)
        resp = quiet.get("/catways", headers={**auth_headers, "Accept": "application/json"})
        assert resp.status_code == 500
        assert resp.json()["error"] == {
            "code": "internal_error",
            "message": "Erreur interne du serveur",
            "messages": ["Erreur interne du serveur"],
        }
        assert "marina.db" not in resp.text
