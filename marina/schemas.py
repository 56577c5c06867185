"""
marina/schemas.py -- Input validation for catways and reservations.

Wire names are camelCase (catwayNumber, catwayState, boatName, clientName,
checkIn, checkOut), as posted by the HTML forms and JSON clients; snake_case
names are accepted too. Text fields are whitespace-trimmed.

Custom rules raise PydanticCustomError(FIELD_INVALID, ...) so their localized
message reaches the user unchanged (see core/validation.py).
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from core.validation import FIELD_INVALID, MAX_ID

CATWAY_TYPES = ("long", "short")

_HAS_LETTER = re.compile(r"[a-zA-Z]")

CATWAY_FALLBACKS: dict[str, str] = {
    "catway_number": "Le numéro de catway est requis et doit être un nombre entier",
    "type": "Le type de catway est requis",
    "catway_state": "L'état du catway est requis",
    "boat_name": "Le nom du bateau est obligatoire",
}

RESERVATION_FALLBACKS: dict[str, str] = {
    "catway_number": "Le numéro de catway est requis",
    "client_name": "Le nom du client est obligatoire",
    "boat_name": "Le nom du bateau est obligatoire",
    "check_in": "Date de check-in est obligatoire",
    "check_out": "Date de check-out est obligatoire",
}


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


# ---------------------------------------------------------------------------
# Field rules
# ---------------------------------------------------------------------------


def _catway_number(v: int) -> int:
    if v < 1:
        raise PydanticCustomError(FIELD_INVALID, "Le numéro de catway doit être un entier positif")
    if v > MAX_ID:
        raise PydanticCustomError(FIELD_INVALID, "Le numéro de catway est trop grand")
    return v


def _catway_type(v: str) -> str:
    if v not in CATWAY_TYPES:
        raise PydanticCustomError(FIELD_INVALID, "Le type de catway doit être 'long' ou 'short'")
    return v


def _catway_state(v: str) -> str:
    if len(v) < 3:
        raise PydanticCustomError(FIELD_INVALID, "L'état du catway doit comporter au moins 3 caractères")
    if len(v) > 100:
        raise PydanticCustomError(FIELD_INVALID, "L'état du Catway ne peut pas dépasser 100 caractères")
    return v


def _boat_name(v: str) -> str:
    if len(v) < 2:
        raise PydanticCustomError(FIELD_INVALID, "Le nom du bateau doit comporter au moins 2 caractères")
    if len(v) > 50:
        raise PydanticCustomError(FIELD_INVALID, "Le nom du bateau ne peut pas dépasser 50 caractères")
    if not _HAS_LETTER.search(v):
        raise PydanticCustomError(
            FIELD_INVALID,
            "{value} n'est pas valide ! Le nom du bateau doit contenir au moins une lettre.",
            {"value": v},
        )
    return v


def _client_name(v: str) -> str:
    if len(v) < 3:
        raise PydanticCustomError(FIELD_INVALID, "Le nom du client doit comporter au moins 3 caractères")
    if len(v) > 100:
        raise PydanticCustomError(FIELD_INVALID, "Le nom du client ne peut pas dépasser 100 caractères")
    return v


def _parse_date(v: Any, label: str) -> Any:
    """Accept ISO dates ("2026-10-20") and datetimes ("2026-10-20T14:30"). Naive means UTC."""
    if isinstance(v, str):
        text = v.strip()
        if not text:
            raise PydanticCustomError(FIELD_INVALID, f"Date de {label} est obligatoire")
        try:
            v = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise PydanticCustomError(FIELD_INVALID, f"La date de {label} est invalide") from None
    if isinstance(v, datetime) and v.tzinfo is None:
        v = v.replace(tzinfo=timezone.utc)
    return v


# ---------------------------------------------------------------------------
# Catways
# ---------------------------------------------------------------------------


class CatwayCreate(_WireModel):
    catway_number: int
    type: str
    catway_state: str
    boat_name: str

    @field_validator("catway_number")
    @classmethod
    def check_number(cls, v: int) -> int:
        return _catway_number(v)

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        return _catway_type(v)

    @field_validator("catway_state")
    @classmethod
    def check_state(cls, v: str) -> str:
        return _catway_state(v)

    @field_validator("boat_name")
    @classmethod
    def check_boat_name(cls, v: str) -> str:
        return _boat_name(v)


class CatwayUpdate(_WireModel):
    """Partial update: absent fields keep their stored value."""

    catway_number: Optional[int] = None
    type: Optional[str] = None
    catway_state: Optional[str] = None
    boat_name: Optional[str] = None

    @field_validator("catway_number")
    @classmethod
    def check_number(cls, v: Optional[int]) -> Optional[int]:
        return _catway_number(v) if v is not None else v

    @field_validator("type")
    @classmethod
    def check_type(cls, v: Optional[str]) -> Optional[str]:
        return _catway_type(v) if v is not None else v

    @field_validator("catway_state")
    @classmethod
    def check_state(cls, v: Optional[str]) -> Optional[str]:
        return _catway_state(v) if v is not None else v

    @field_validator("boat_name")
    @classmethod
    def check_boat_name(cls, v: Optional[str]) -> Optional[str]:
        return _boat_name(v) if v is not None else v


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------


class ReservationCreate(_WireModel):
    """A new reservation.

    check_in may not be in the past when the reservation is made, and check_out
    must be strictly after check_in.
    """

    catway_number: int
    client_name: str
    boat_name: str
    check_in: datetime
    check_out: datetime

    @field_validator("client_name")
    @classmethod
    def check_client_name(cls, v: str) -> str:
        return _client_name(v)

    @field_validator("boat_name")
    @classmethod
    def check_boat_name(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError(FIELD_INVALID, RESERVATION_FALLBACKS["boat_name"])
        return v

    @field_validator("check_in", mode="before")
    @classmethod
    def parse_check_in(cls, v: Any) -> Any:
        return _parse_date(v, "check-in")

    @field_validator("check_out", mode="before")
    @classmethod
    def parse_check_out(cls, v: Any) -> Any:
        return _parse_date(v, "check-out")

    @field_validator("check_in")
    @classmethod
    def check_in_not_past(cls, v: datetime) -> datetime:
        if v < datetime.now(timezone.utc):
            raise PydanticCustomError(FIELD_INVALID, "La date de check-in ne peut pas être dans le passé.")
        return v

    @model_validator(mode="after")
    def check_out_after_check_in(self) -> "ReservationCreate":
        if self.check_out <= self.check_in:
            raise PydanticCustomError(
                FIELD_INVALID, "La date de check-out doit être postérieure à la date de check-in."
            )
        return self
