"""
API request and response models for the marina JSON endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
marina/models.py, which own the internal domain representation, and from the
input schemas, which own validation rules. Route handlers map between them.

Field names go out in camelCase, matching what the forms and clients send.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from auth.models import User
from core.normalizer import Normalized
from marina.models import Catway, Reservation


class _Out(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload. messages lists every per-field problem."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    messages: list[str] = []


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail

    @classmethod
    def from_normalized(cls, normalized: Normalized) -> "ErrorResponse":
        return cls(
            error=ErrorDetail(
                code=normalized.code,
                message=normalized.message,
                messages=normalized.messages,
            )
        )


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str
    password: str


class ClaimResponse(BaseModel):
    """The identity carried by a session token. Never includes a password."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str
    email: str


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: ClaimResponse


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class UserResponse(_Out):
    id: int
    name: str
    email: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class CatwayResponse(_Out):
    id: int
    catway_number: int
    type: str
    catway_state: str
    boat_name: str

    @classmethod
    def from_catway(cls, catway: Catway) -> "CatwayResponse":
        return cls(
            id=catway.id,
            catway_number=catway.catway_number,
            type=catway.type,
            catway_state=catway.catway_state,
            boat_name=catway.boat_name,
        )


class ReservationResponse(_Out):
    id: int
    catway_number: int
    client_name: str
    boat_name: str
    check_in: str
    check_out: str
    created_at: str = ""

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> "ReservationResponse":
        return cls(
            id=reservation.id,
            catway_number=reservation.catway_number,
            client_name=reservation.client_name,
            boat_name=reservation.boat_name,
            check_in=reservation.check_in,
            check_out=reservation.check_out,
            created_at=reservation.created_at,
        )
