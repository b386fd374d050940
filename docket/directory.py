"""
docket.directory
================

Client and service directories: the engine's read-only view of records
owned by other parts of the CRM.

Both are backed by the record store (``clients`` / ``services``
collections). Client ids are sometimes rewritten during migrations while
services still carry the old value, so :meth:`ClientDirectory.resolve`
also accepts a client's ``ref``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set

from .models import Client, ClientStatus, Service
from .settings import CLIENTS_COLLECTION, SERVICES_COLLECTION
from .store import RecordStore

logger = logging.getLogger(__name__)


class ClientDirectory:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def add(self, client: Client) -> None:
        """Insert or overwrite a client (seeding and tests)."""
        self._store.put(CLIENTS_COLLECTION, client.id, client.to_record())

    def resolve(self, client_id: str) -> Optional[Client]:
        """Return the client whose id (or, failing that, ref) is *client_id*."""
        rec = self._store.get(CLIENTS_COLLECTION, client_id)
        if rec is not None:
            return Client.from_record(rec)

        matches = self._store.scan(CLIENTS_COLLECTION, lambda r: r.get("ref") == client_id)
        if matches:
            return Client.from_record(matches[0])

        logger.warning(f"Client {client_id} not found by id or ref")
        return None

    def list_active_by_portfolio(self, code: int) -> List[Client]:
        recs = self._store.scan(
            CLIENTS_COLLECTION,
            lambda r: r.get("portfolio_code") == code
            and (r.get("status") or "ACTIVE") == ClientStatus.ACTIVE.value,
        )
        return [Client.from_record(r) for r in recs]

    def known_ids(self) -> Set[str]:
        return set(self._store.list_ids(CLIENTS_COLLECTION))


class ServiceDirectory:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def add(self, service: Service) -> None:
        self._store.put(SERVICES_COLLECTION, service.id, service.to_record())

    def get(self, service_id: str) -> Optional[Service]:
        rec = self._store.get(SERVICES_COLLECTION, service_id)
        return Service.from_record(rec) if rec else None

    def list_all(self) -> List[Service]:
        return [Service.from_record(r) for r in self._store.scan(SERVICES_COLLECTION, lambda r: True)]
