"""
core/db.py -- Engine construction shared by UserStore and MarinaStore.

SQLite connections are opened with check_same_thread=False (FastAPI runs sync
handlers in a thread pool) and switched to WAL journaling on connect, so reads
do not block behind the single writer. Any other URL is passed to SQLAlchemy
untouched.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine


def _enable_wal(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def open_engine(db_url: str, metadata: MetaData) -> Engine:
    """Create the engine for db_url and make sure metadata's tables exist."""
    is_sqlite = db_url.startswith("sqlite")
    engine = create_engine(db_url, connect_args={"check_same_thread": False} if is_sqlite else {})
    if is_sqlite:
        event.listen(engine, "connect", _enable_wal)
    metadata.create_all(engine)
    return engine


def utc_now_iso() -> str:
    """Timestamp format stored in every created_at / updated_at column."""
    return datetime.now(timezone.utc).isoformat()
