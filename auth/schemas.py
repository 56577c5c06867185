"""
auth/schemas.py -- Input validation for user creation and update.

Rules and messages:
  name      letters only (A-Z, a-z), 3 to 50 characters
  email     address format, unique (uniqueness is the store's job)
  password  at least 6 characters; at most 72 bytes (bcrypt input limit)

Values arrive from HTML forms or JSON bodies. Name and email are trimmed;
the password is taken as typed.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, field_validator
from pydantic_core import PydanticCustomError

from core.validation import FIELD_INVALID

_NAME_RE = re.compile(r"^[A-Za-z]+$")
_EMAIL_RE = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$")

# Used for pydantic's own errors (missing field, wrong type).
USER_FALLBACKS: dict[str, str] = {
    "name": "Le nom est obligatoire",
    "email": "L'email est obligatoire",
    "password": "Le mot de passe est requis",
}


def _name(v: str) -> str:
    v = v.strip()
    if len(v) < 3:
        raise PydanticCustomError(FIELD_INVALID, "Le nom doit comporter au moins 3 caractères")
    if len(v) > 50:
        raise PydanticCustomError(FIELD_INVALID, "Le nom ne peut pas dépasser 50 caractères")
    if not _NAME_RE.match(v):
        raise PydanticCustomError(
            FIELD_INVALID,
            "{value} n'est pas valide ! Le nom ne doit contenir que des lettres.",
            {"value": v},
        )
    return v


def _email(v: str) -> str:
    v = v.strip()
    if not v:
        raise PydanticCustomError(FIELD_INVALID, USER_FALLBACKS["email"])
    if not _EMAIL_RE.match(v):
        raise PydanticCustomError(FIELD_INVALID, "{value} n'est pas une adresse email valide !", {"value": v})
    return v


def _password(v: str) -> str:
    if len(v) < 6:
        raise PydanticCustomError(FIELD_INVALID, "Le mot de passe doit comporter au moins 6 caractères")
    if len(v.encode("utf-8")) > 72:
        raise PydanticCustomError(FIELD_INVALID, "Le mot de passe ne peut pas dépasser 72 caractères")
    return v


class UserCreate(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _name(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return _password(v)


class UserUpdate(BaseModel):
    """Partial update: only the fields present are validated and written."""

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        return _name(v) if v is not None else v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _email(v) if v is not None else v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: Optional[str]) -> Optional[str]:
        return _password(v) if v is not None else v
