"""
tests/test_user_service.py -- UserService: validation, hashing, uniqueness, partial update.
"""

from __future__ import annotations

import pytest

from auth.services import UserService
from auth.tokens import verify_password
from core.errors import DuplicateKeyError, MalformedIdentifierError, NotFoundError, ValidationFailure

VALID = {"name": "Jeanne", "email": "jeanne@port.fr", "password": "secret1"}


class TestCreate:
    def test_password_is_stored_hashed(self, user_service: UserService) -> None:
        user = user_service.create(VALID)
        assert user.hashed_password != VALID["password"]
        assert verify_password(VALID["password"], user.hashed_password)

    def test_fields_are_trimmed(self, user_service: UserService) -> None:
        user = user_service.create({**VALID, "name": "  Jeanne ", "email": " jeanne@port.fr "})
        assert user.name == "Jeanne"
        assert user.email == "jeanne@port.fr"

    @pytest.mark.parametrize(
        "field, value, message",
        [
            ("name", "Jo", "Le nom doit comporter au moins 3 caractères"),
            ("name", "Jeanne2", "Jeanne2 n'est pas valide ! Le nom ne doit contenir que des lettres."),
            ("email", "jeanne@", "jeanne@ n'est pas une adresse email valide !"),
            ("password", "12345", "Le mot de passe doit comporter au moins 6 caractères"),
        ],
    )
    def test_field_rules(self, user_service: UserService, field: str, value: str, message: str) -> None:
        with pytest.raises(ValidationFailure) as exc_info:
            user_service.create({**VALID, field: value})
        assert exc_info.value.messages == [message]

    def test_missing_fields_use_localized_messages(self, user_service: UserService) -> None:
        with pytest.raises(ValidationFailure) as exc_info:
            user_service.create({})
        assert exc_info.value.messages == [
            "Le nom est obligatoire",
            "L'email est obligatoire",
            "Le mot de passe est requis",
        ]

    def test_duplicate_email(self, user_service: UserService) -> None:
        user_service.create(VALID)
        with pytest.raises(DuplicateKeyError) as exc_info:
            user_service.create({**VALID, "name": "Autre"})
        assert exc_info.value.field == "email"
        assert exc_info.value.messages == ["Cet email existe déjà dans notre base de données"]


class TestUpdate:
    def test_blank_password_keeps_old_hash(self, user_service: UserService) -> None:
        user = user_service.create(VALID)
        updated = user_service.update(user.id, {"name": "Jeannette", "email": "", "password": ""})
        assert updated.name == "Jeannette"
        assert updated.email == VALID["email"]
        assert updated.hashed_password == user.hashed_password
        assert updated.updated_at

    def test_new_password_is_rehashed(self, user_service: UserService) -> None:
        user = user_service.create(VALID)
        updated = user_service.update(str(user.id), {"password": "nouveau1"})
        assert verify_password("nouveau1", updated.hashed_password)
        assert not verify_password(VALID["password"], updated.hashed_password)

    def test_email_taken_by_someone_else(self, user_service: UserService) -> None:
        user_service.create(VALID)
        other = user_service.create({**VALID, "email": "louis@port.fr"})
        with pytest.raises(DuplicateKeyError):
            user_service.update(other.id, {"email": VALID["email"]})


class TestLookupAndDelete:
    def test_get_unknown_is_not_found(self, user_service: UserService) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            user_service.get(123)
        assert exc_info.value.messages == ["Utilisateur non trouvé"]

    def test_get_malformed(self, user_service: UserService) -> None:
        with pytest.raises(MalformedIdentifierError):
            user_service.get("jeanne")

    def test_delete(self, user_service: UserService) -> None:
        user = user_service.create(VALID)
        assert user_service.delete(user.id).email == VALID["email"]
        assert user_service.list() == []
