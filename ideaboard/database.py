"""
Idea Board – Async SQLAlchemy engine helpers and declarative base.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase


# ── Declarative base ──
class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite stores datetimes without an offset."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def sqlite_url(db_path: str) -> str:
    return f"sqlite+aiosqlite:///{db_path}"


def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
    # SQLite ships with FK enforcement off; ON DELETE CASCADE needs it.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(db_path: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for a SQLite file with FK enforcement on."""
    engine = create_async_engine(sqlite_url(db_path), echo=echo, future=True)
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    return engine
