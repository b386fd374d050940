"""
docket.engine
=============

Wires the store, directories and engine components together.

The HTTP layer, the Celery jobs and the CLI all work through one
:class:`ComplianceEngine`; tests build one over a
:class:`~docket.store.MemoryRecordStore`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .directory import ClientDirectory, ServiceDirectory
from .escalation import EscalationScheduler
from .reconcile import ReconciliationEngine
from .registry import ComplianceRegistry
from .settings import Settings, settings as default_settings
from .store import RecordStore
from .tasks import TaskBridge


@dataclass
class ComplianceEngine:
    store: RecordStore
    clients: ClientDirectory
    services: ServiceDirectory
    registry: ComplianceRegistry
    bridge: TaskBridge
    reconciler: ReconciliationEngine
    scheduler: EscalationScheduler


def build_engine(store: Optional[RecordStore] = None, config: Settings = default_settings) -> ComplianceEngine:
    """Build an engine over *store* (a new SQLite-backed store if omitted)."""
    if store is None:
        from .store_db import DBRecordStore
        store = DBRecordStore()

    clients = ClientDirectory(store)
    services = ServiceDirectory(store)
    registry = ComplianceRegistry(store, clients, config)
    bridge = TaskBridge(store, registry, config)
    return ComplianceEngine(
        store=store,
        clients=clients,
        services=services,
        registry=registry,
        bridge=bridge,
        reconciler=ReconciliationEngine(registry, clients, services),
        scheduler=EscalationScheduler(registry, bridge, config),
    )
