"""
marina/models.py -- Domain dataclasses for catways and reservations.

These are pure data containers with zero logic. Validation lives in
marina/schemas.py, persistence in marina/store.py.

A reservation points at its catway by catway_number, not by id. Nothing stops
a catway from being deleted while reservations still name its number.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Catway:
    """A docking slot.

    catway_number is unique across the marina. id is None before the record is
    written to the database.
    """

    catway_number: int
    type: str  # "long" | "short"
    catway_state: str
    boat_name: str
    id: Optional[int] = None


@dataclass
class Reservation:
    """A booking of a catway for a boat between two dates.

    boat_name is copied from the catway when the reservation is made. Reservations
    are created and deleted, never edited.
    """

    catway_number: int
    client_name: str
    boat_name: str
    check_in: str  # ISO 8601, UTC
    check_out: str  # ISO 8601, UTC
    id: Optional[int] = None
    created_at: str = ""
