"""
auth/models.py -- Domain dataclass for the user (credential) record.

Pattern: Data class (pure data container, zero logic). Mirrors marina/models.py --
dataclasses own domain shape; stores and services do the work.

Layer rule: no imports from api/, web/ or marina/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A person allowed to log in to the marina back office.

    hashed_password is the bcrypt hash; the plaintext is never stored. to_claim()
    is the only shape of a user that leaves the server (inside the session token
    and in JSON responses), and it has no password field at all.
    """

    name: str
    email: str
    hashed_password: str
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def to_claim(self) -> dict:
        """Return the identity embedded in a session token: the user minus the password."""
        return {"id": self.id, "name": self.name, "email": self.email}
