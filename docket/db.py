"""
docket.db
=========

SQLite persistence layer for Docket.

This module exposes:

* ``engine`` – a global SQLModel engine pointing at ``settings.DB_URL``
* ``SessionLocal`` – a session factory used via ``with SessionLocal() as s:``
* ``RecordRow`` – one JSON record of one collection
* ``create_all()`` – helper to create tables at first run
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, Session, SQLModel, create_engine, select

from docket.settings import DB_ECHO, DB_URL

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
engine = create_engine(DB_URL, echo=DB_ECHO)


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal() -> Session:  # noqa: N802 (factory camel‑case for consistency with FastAPI docs)
    """Return a new Session bound to the global engine."""
    return Session(engine)


# ---------------------------------------------------------------------------
# ORM model: one row per (collection, id)
# ---------------------------------------------------------------------------
class RecordRow(SQLModel, table=True):
    """
    A single JSON record. The composite key mirrors the record-store
    contract; ``data`` holds the record exactly as the engine wrote it.
    """

    __tablename__ = "records"

    collection: str = Field(primary_key=True, index=True)
    id: str = Field(primary_key=True)
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


# ---------------------------------------------------------------------------
# Convenience CRUD helpers
# ---------------------------------------------------------------------------
def upsert_record(s: Session, collection: str, ident: str, data: Dict[str, Any]) -> None:
    """Insert or update a record row."""
    s.merge(RecordRow(collection=collection, id=ident, data=dict(data)))
    s.commit()


def get_record(s: Session, collection: str, ident: str) -> Optional[Dict[str, Any]]:
    """Return a record's data or *None* if missing."""
    row = s.get(RecordRow, (collection, ident))
    return dict(row.data) if row else None


def delete_record(s: Session, collection: str, ident: str) -> bool:
    """Delete a row; return ``False`` if it did not exist."""
    row = s.get(RecordRow, (collection, ident))
    if row is None:
        return False
    s.delete(row)
    s.commit()
    return True


def collection_rows(s: Session, collection: str) -> List[RecordRow]:
    """Return every row of a collection."""
    return list(s.exec(select(RecordRow).where(RecordRow.collection == collection)).all())


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all(bind=None) -> None:
    """Create all tables for imported SQLModel subclasses, including RecordRow."""
    SQLModel.metadata.create_all(bind or engine)
