"""
auth/services.py -- User entity service.

Every operation either returns a User or raises a core.errors outcome:
  MalformedIdentifierError  identifier is not a positive integer
  NotFoundError             no user with that identifier
  ValidationFailure         field rules from auth/schemas.py
  DuplicateKeyError         email already registered

Passwords are hashed here, before the store sees them. On update the password
is re-hashed only when a new one is supplied.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.schemas import USER_FALLBACKS, UserCreate, UserUpdate
from auth.store import UserStore
from auth.tokens import hash_password
from core.errors import DuplicateKeyError, NotFoundError
from core.validation import clean, parse_id, validate

logger = logging.getLogger("marina.users")

_NOT_FOUND = "Utilisateur non trouvé"
_DUPLICATE_EMAIL = "Cet email existe déjà dans notre base de données"


class UserService:
    def __init__(self, store: UserStore) -> None:
        self.store = store

    def list(self) -> list[User]:
        return self.store.list_users()

    def get(self, raw_id: Any) -> User:
        user = self.store.get_by_id(parse_id(raw_id))
        if user is None:
            raise NotFoundError(_NOT_FOUND)
        return user

    def create(self, data: Mapping[str, Any]) -> User:
        body = validate(UserCreate, data, USER_FALLBACKS)
        user = User(name=body.name, email=body.email, hashed_password=hash_password(body.password))
        try:
            user_id = self.store.create_user(user)
        except IntegrityError as exc:
            raise DuplicateKeyError("email", _DUPLICATE_EMAIL) from exc
        logger.info("User %d created", user_id)
        return self.store.get_by_id(user_id)

    def update(self, raw_id: Any, data: Mapping[str, Any]) -> User:
        """Overwrite the supplied fields. Blank form inputs are left unchanged."""
        user = self.get(raw_id)
        body = validate(UserUpdate, clean(data), USER_FALLBACKS)
        fields: dict[str, str] = {}
        if body.name is not None:
            fields["name"] = body.name
        if body.email is not None:
            fields["email"] = body.email
        if body.password is not None:
            fields["hashed_password"] = hash_password(body.password)
        if fields:
            try:
                updated = self.store.update_user(user.id, **fields)
            except IntegrityError as exc:
                raise DuplicateKeyError("email", _DUPLICATE_EMAIL) from exc
            if not updated:
                raise NotFoundError(_NOT_FOUND)
        return self.get(user.id)

    def delete(self, raw_id: Any) -> User:
        """Delete a user and return the record as it was."""
        user = self.get(raw_id)
        if not self.store.delete_user(user.id):
            raise NotFoundError(_NOT_FOUND)
        logger.info("User %d deleted", user.id)
        return user
