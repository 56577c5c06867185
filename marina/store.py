"""
marina/store.py -- SQLAlchemy-backed persistence for catways and reservations.

Uses SQLAlchemy Core (not ORM) so the dataclasses in marina/models.py remain the
authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change.

Pattern: Repository + Data Mapper. MarinaStore is the repository; the _row_to_*
functions are the mappers. Services never touch SQL directly.

Constraints:
  catways.catway_number is UNIQUE -- a duplicate insert/update raises
  sqlalchemy.exc.IntegrityError, which marina/services.py translates.
  reservations.catway_number is a plain column, not a foreign key.

Usage:
    store = MarinaStore("sqlite:///marina.db")
    catway_id = store.create_catway(Catway(catway_number=1, type="long", catway_state="ok", boat_name="Orion"))
    store.list_reservations_for(1)
    store.close()
"""

from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table
from sqlalchemy.engine import Engine

from core.db import open_engine, utc_now_iso
from marina.models import Catway, Reservation

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_catways = Table(
    "catways",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("catway_number", Integer, nullable=False, unique=True),
    Column("type", String(10), nullable=False),
    Column("catway_state", String(100), nullable=False),
    Column("boat_name", String(50), nullable=False),
)

_reservations = Table(
    "reservations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("catway_number", Integer, nullable=False, index=True),
    Column("client_name", String(100), nullable=False),
    Column("boat_name", String(50), nullable=False),
    Column("check_in", String(32), nullable=False),
    Column("check_out", String(32), nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarinaStore:
    def __init__(self, db_url: str) -> None:
        self.engine: Engine = open_engine(db_url, metadata)

    # ------------------------------------------------------------------
    # Catways
    # ------------------------------------------------------------------

    def create_catway(self, catway: Catway) -> int:
        """Insert a catway and return its id. Raises IntegrityError on a duplicate number."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _catways.insert().values(
                    catway_number=catway.catway_number,
                    type=catway.type,
                    catway_state=catway.catway_state,
                    boat_name=catway.boat_name,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_catway(self, catway_id: int) -> Optional[Catway]:
        with self.engine.connect() as conn:
            row = conn.execute(_catways.select().where(_catways.c.id == catway_id)).fetchone()
        return _row_to_catway(row) if row is not None else None

    def list_catways(self) -> list[Catway]:
        """Return all catways ordered by catway number."""
        with self.engine.connect() as conn:
            rows = conn.execute(_catways.select().order_by(_catways.c.catway_number)).fetchall()
        return [_row_to_catway(r) for r in rows]

    def update_catway(self, catway_id: int, **fields) -> bool:
        """Overwrite the given columns. Returns False if catway_id was not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_catways.update().where(_catways.c.id == catway_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_catway(self, catway_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_catways.delete().where(_catways.c.id == catway_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    def create_reservation(self, reservation: Reservation) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(
                _reservations.insert().values(
                    catway_number=reservation.catway_number,
                    client_name=reservation.client_name,
                    boat_name=reservation.boat_name,
                    check_in=reservation.check_in,
                    check_out=reservation.check_out,
                    created_at=utc_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_reservation(self, reservation_id: int) -> Optional[Reservation]:
        with self.engine.connect() as conn:
            row = conn.execute(_reservations.select().where(_reservations.c.id == reservation_id)).fetchone()
        return _row_to_reservation(row) if row is not None else None

    def list_reservations(self) -> list[Reservation]:
        """Return all reservations ordered by check-in date."""
        with self.engine.connect() as conn:
            rows = conn.execute(_reservations.select().order_by(_reservations.c.check_in)).fetchall()
        return [_row_to_reservation(r) for r in rows]

    def list_reservations_for(self, catway_number: int) -> list[Reservation]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                _reservations.select()
                .where(_reservations.c.catway_number == catway_number)
                .order_by(_reservations.c.check_in)
            ).fetchall()
        return [_row_to_reservation(r) for r in rows]

    def delete_reservation(self, reservation_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_reservations.delete().where(_reservations.c.id == reservation_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_catway(row) -> Catway:
    return Catway(
        id=row.id,
        catway_number=row.catway_number,
        type=row.type,
        catway_state=row.catway_state,
        boat_name=row.boat_name,
    )


def _row_to_reservation(row) -> Reservation:
    return Reservation(
        id=row.id,
        catway_number=row.catway_number,
        client_name=row.client_name,
        boat_name=row.boat_name,
        check_in=row.check_in,
        check_out=row.check_out,
        created_at=row.created_at,
    )
