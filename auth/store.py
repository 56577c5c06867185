"""
auth/store.py -- The credential store: user rows in SQLAlchemy Core.

UserStore maps between the users table and auth.models.User; nothing above it
writes SQL. Statements are built with SQLAlchemy expressions, so every value is
a bound parameter.

The email column is UNIQUE. An insert or update that collides raises
sqlalchemy.exc.IntegrityError, which auth/services.py turns into a
DuplicateKeyError.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func, select

from auth.models import User
from core.db import open_engine, utc_now_iso

metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(50), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


class UserStore:
    """Usage:

        store = UserStore("sqlite:///marina.db")
        uid = store.create_user(User(name="Alice", email="a@b.fr", hashed_password=hash_password("secret")))
        store.get_by_email("a@b.fr")
    """

    def __init__(self, db_url: str) -> None:
        self.engine = open_engine(db_url, metadata)

    def _one(self, *criteria) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(users_table.select().where(*criteria)).first()
        return None if row is None else _to_user(row)

    def _write(self, statement) -> int:
        """Run an UPDATE or DELETE and return the number of rows it touched."""
        with self.engine.begin() as conn:
            return conn.execute(statement).rowcount

    def has_users(self) -> bool:
        """True once any user exists; the first-run setup redirect keys off this."""
        with self.engine.connect() as conn:
            count = conn.execute(select(func.count()).select_from(users_table)).scalar_one()
        return count > 0

    def create_user(self, user: User) -> int:
        """Insert user and return the new id. Duplicate email -> IntegrityError."""
        stamp = utc_now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(
                users_table.insert().values(
                    name=user.name,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    created_at=stamp,
                    updated_at=stamp,
                )
            )
        return result.inserted_primary_key[0]

    def get_by_email(self, email: str) -> User | None:
        # exact match: "A@b.fr" and "a@b.fr" are different accounts
        return self._one(users_table.c.email == email)

    def get_by_id(self, user_id: int) -> User | None:
        return self._one(users_table.c.id == user_id)

    def list_users(self) -> list[User]:
        with self.engine.connect() as conn:
            rows = conn.execute(users_table.select().order_by(users_table.c.name)).all()
        return [_to_user(row) for row in rows]

    def update_user(self, user_id: int, **columns) -> bool:
        """Overwrite the given columns and bump updated_at. False if user_id is unknown."""
        statement = (
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(**columns, updated_at=utc_now_iso())
        )
        return self._write(statement) > 0

    def delete_user(self, user_id: int) -> bool:
        return self._write(users_table.delete().where(users_table.c.id == user_id)) > 0

    def close(self) -> None:
        self.engine.dispose()


def _to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
