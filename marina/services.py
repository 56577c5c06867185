"""
marina/services.py -- Catway and reservation entity services.

Each operation returns the entity (or a list) or raises a core.errors outcome:
  MalformedIdentifierError  identifier is not a positive integer
  NotFoundError             no record with that identifier
  ValidationFailure         field rules from marina/schemas.py
  DuplicateKeyError         catway number already in use

Store-specific exceptions (IntegrityError) never leave this module.

Reservations are created through a catway: the catway is read first and its
number and boat name are copied into the reservation. The read and the insert
are two separate statements, so a catway deleted in between still gets the
reservation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import timezone
from typing import Any

from sqlalchemy.exc import IntegrityError

from core.errors import DuplicateKeyError, NotFoundError
from core.validation import clean, parse_id, validate
from marina.models import Catway, Reservation
from marina.schemas import (
    CATWAY_FALLBACKS,
    RESERVATION_FALLBACKS,
    CatwayCreate,
    CatwayUpdate,
    ReservationCreate,
)
from marina.store import MarinaStore

logger = logging.getLogger("marina.services")

_CATWAY_NOT_FOUND = "Catway non trouvé"
_RESERVATION_NOT_FOUND = "Réservation non trouvée"
_DUPLICATE_NUMBER = "Ce numéro de catway existe déjà"

# Keys the reservation form may send that are overwritten from the catway.
_COPIED_FROM_CATWAY = ("catwayNumber", "catway_number", "boatName", "boat_name")


class CatwayService:
    def __init__(self, store: MarinaStore) -> None:
        self.store = store

    def list(self) -> list[Catway]:
        return self.store.list_catways()

    def get(self, raw_id: Any) -> Catway:
        catway = self.store.get_catway(parse_id(raw_id))
        if catway is None:
            raise NotFoundError(_CATWAY_NOT_FOUND)
        return catway

    def create(self, data: Mapping[str, Any]) -> Catway:
        body = validate(CatwayCreate, data, CATWAY_FALLBACKS)
        catway = Catway(
            catway_number=body.catway_number,
            type=body.type,
            catway_state=body.catway_state,
            boat_name=body.boat_name,
        )
        try:
            catway_id = self.store.create_catway(catway)
        except IntegrityError as exc:
            raise DuplicateKeyError("catway_number", _DUPLICATE_NUMBER) from exc
        logger.info("Catway %d created (number %d)", catway_id, catway.catway_number)
        return self.store.get_catway(catway_id)

    def update(self, raw_id: Any, data: Mapping[str, Any]) -> Catway:
        """Overwrite the supplied fields after validating them."""
        catway = self.get(raw_id)
        body = validate(CatwayUpdate, clean(data), CATWAY_FALLBACKS)
        fields = body.model_dump(exclude_none=True)
        if fields:
            try:
                updated = self.store.update_catway(catway.id, **fields)
            except IntegrityError as exc:
                raise DuplicateKeyError("catway_number", _DUPLICATE_NUMBER) from exc
            if not updated:
                raise NotFoundError(_CATWAY_NOT_FOUND)
        return self.get(catway.id)

    def delete(self, raw_id: Any) -> Catway:
        """Delete a catway and return the record as it was. Its reservations are kept."""
        catway = self.get(raw_id)
        if not self.store.delete_catway(catway.id):
            raise NotFoundError(_CATWAY_NOT_FOUND)
        logger.info("Catway %d deleted", catway.id)
        return catway


class ReservationService:
    def __init__(self, store: MarinaStore, catways: CatwayService) -> None:
        self.store = store
        self.catways = catways

    def list(self) -> list[Reservation]:
        return self.store.list_reservations()

    def list_for_catway(self, raw_catway_id: Any) -> list[Reservation]:
        catway = self.catways.get(raw_catway_id)
        return self.store.list_reservations_for(catway.catway_number)

    def get(self, raw_id: Any) -> Reservation:
        reservation = self.store.get_reservation(parse_id(raw_id))
        if reservation is None:
            raise NotFoundError(_RESERVATION_NOT_FOUND)
        return reservation

    def create(self, raw_catway_id: Any, data: Mapping[str, Any]) -> Reservation:
        """Book the catway identified by raw_catway_id for the client in data."""
        catway = self.catways.get(raw_catway_id)
        payload = {k: v for k, v in data.items() if k not in _COPIED_FROM_CATWAY}
        payload["catwayNumber"] = catway.catway_number
        payload["boatName"] = catway.boat_name
        body = validate(ReservationCreate, payload, RESERVATION_FALLBACKS)
        reservation = Reservation(
            catway_number=body.catway_number,
            client_name=body.client_name,
            boat_name=body.boat_name,
            check_in=body.check_in.astimezone(timezone.utc).isoformat(),
            check_out=body.check_out.astimezone(timezone.utc).isoformat(),
        )
        reservation_id = self.store.create_reservation(reservation)
        logger.info("Reservation %d created on catway %d", reservation_id, catway.catway_number)
        return self.store.get_reservation(reservation_id)

    def delete(self, raw_id: Any) -> Reservation:
        reservation = self.get(raw_id)
        if not self.store.delete_reservation(reservation.id):
            raise NotFoundError(_RESERVATION_NOT_FOUND)
        logger.info("Reservation %d deleted", reservation.id)
        return reservation
