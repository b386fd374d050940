"""
docket.store
============

The record-store contract the engine persists through, plus an in-memory
implementation.

Records are JSON-safe ``dict`` objects keyed by ``(collection, id)``. Each
call is atomic for one record only; there are no multi-record
transactions. The in-memory store additionally offers
:meth:`MemoryRecordStore.put_if_absent`, a conditional put the registry
uses to close the check-then-create race when it is available.

This module only needs the standard library so the engine can be
unit-tested without a database.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

Record = Dict[str, Any]
Predicate = Callable[[Record], bool]


@runtime_checkable
class RecordStore(Protocol):
    """Narrow persistence interface consumed by the engine."""

    def put(self, collection: str, ident: str, record: Record) -> None: ...

    def get(self, collection: str, ident: str) -> Optional[Record]: ...

    def delete(self, collection: str, ident: str) -> None: ...

    def list_ids(self, collection: str) -> List[str]: ...

    def scan(self, collection: str, predicate: Predicate) -> List[Record]: ...


class MemoryRecordStore:
    """
    Dictionary-backed record store.

    Example
    -------
    >>> s = MemoryRecordStore()
    >>> s.put("tasks", "t1", {"id": "t1", "title": "VAT"})
    >>> s.get("tasks", "t1")["title"]
    'VAT'
    >>> s.list_ids("tasks")
    ['t1']
    """

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Record]] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def put(self, collection: str, ident: str, record: Record) -> None:
        """Insert or overwrite a record."""
        with self._lock:
            self._data.setdefault(collection, {})[ident] = copy.deepcopy(record)

    def get(self, collection: str, ident: str) -> Optional[Record]:
        with self._lock:
            rec = self._data.get(collection, {}).get(ident)
            return copy.deepcopy(rec) if rec is not None else None

    def delete(self, collection: str, ident: str) -> None:
        """Remove a record (raise KeyError if not present)."""
        with self._lock:
            del self._data.get(collection, {})[ident]

    def list_ids(self, collection: str) -> List[str]:
        with self._lock:
            return list(self._data.get(collection, {}))

    def scan(self, collection: str, predicate: Predicate) -> List[Record]:
        with self._lock:
            return [
                copy.deepcopy(rec)
                for rec in self._data.get(collection, {}).values()
                if predicate(rec)
            ]

    def put_if_absent(
        self, collection: str, ident: str, record: Record, conflict: Predicate
    ) -> bool:
        """
        Store *record* only if no existing record in *collection* matches
        *conflict*. Returns ``True`` when written.
        """
        with self._lock:
            bucket = self._data.setdefault(collection, {})
            if any(conflict(rec) for rec in bucket.values()):
                return False
            bucket[ident] = copy.deepcopy(record)
            return True

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        with self._lock:
            return sum(len(bucket) for bucket in self._data.values())
