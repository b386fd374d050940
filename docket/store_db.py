"""
docket.store_db
===============

SQLite-backed implementation of the record-store contract.

This adapter wraps the CRUD helpers in :pymod:`docket.db` so that any
code written against :class:`docket.store.MemoryRecordStore` can switch
to a persistent store without changing its calls. It offers no
conditional put, so the registry falls back to check-then-create and the
duplicate cleanup job.
"""

from __future__ import annotations

from typing import List, Optional

from sqlmodel import Session

from docket.db import (
    SessionLocal,
    collection_rows,
    delete_record,
    get_record,
    upsert_record,
)
from docket.store import Predicate, Record


class DBRecordStore:
    """
    Drop-in replacement backed by SQLite.

    Methods mirror the in-memory store:
    * put / get / delete
    * list_ids(collection)
    * scan(collection, predicate)
    """

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session = session or SessionLocal()

    # ------------------------------------------------------------------ CRUD
    def put(self, collection: str, ident: str, record: Record) -> None:
        upsert_record(self._session, collection, ident, record)

    def get(self, collection: str, ident: str) -> Optional[Record]:
        return get_record(self._session, collection, ident)

    def delete(self, collection: str, ident: str) -> None:
        if not delete_record(self._session, collection, ident):
            raise KeyError(ident)

    def list_ids(self, collection: str) -> List[str]:
        return [row.id for row in collection_rows(self._session, collection)]

    def scan(self, collection: str, predicate: Predicate) -> List[Record]:
        records = [dict(row.data) for row in collection_rows(self._session, collection)]
        return [rec for rec in records if predicate(rec)]

    # ----------------------------------------------------- context manager
    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "DBRecordStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
