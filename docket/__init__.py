"""
Docket
======

Compliance deadline and task orchestration for an accounting practice.

Docket derives regulatory filing obligations (annual accounts,
confirmation statements, CT600, VAT, self assessment, RTI) from the
services a client has engaged, tracks each obligation through its
status life-cycle, keeps staff tasks in step with deadline urgency, and
repairs duplicate or orphaned obligations.

Import structure
----------------
`import docket` is intentionally cheap: no sub-module is imported by
default. *matplotlib* is only imported when you explicitly access
:pymod:`docket.viz`, and *celery* only through :pymod:`docket.jobs`.

Sub-modules
~~~~~~~~~~~
- :pymod:`docket.models`        – ``ComplianceItem``/``Task`` dataclasses + status enums
- :pymod:`docket.mapping`       – service kind → obligation rules
- :pymod:`docket.due_dates`     – default due-date policy
- :pymod:`docket.lifecycle`     – status state machine (`advance_status`)
- :pymod:`docket.registry`      – ``ComplianceRegistry`` CRUD + queries
- :pymod:`docket.reconcile`     – derive items from active services
- :pymod:`docket.tasks`         – ``TaskBridge`` (task creation / correlation)
- :pymod:`docket.escalation`    – time-triggered escalation runs
- :pymod:`docket.cleanup`       – invalid-client and duplicate cleanup
- :pymod:`docket.store`         – record-store contract + in-memory store
- :pymod:`docket.store_db`      – SQLite record store (SQLModel)
- :pymod:`docket.jobs`          – Celery tasks for the beat schedule

Quick start
-----------
>>> from docket.engine import build_engine
>>> from docket.store import MemoryRecordStore
>>> from docket.models import Client, Service
>>> eng = build_engine(MemoryRecordStore())
>>> eng.clients.add(Client("c1", "Acme Ltd"))
>>> eng.services.add(Service("s1", "c1", "VAT Returns"))
>>> eng.reconciler.reconcile_from_directory().generated
1

"""

__all__ = [
    "models",
    "mapping",
    "due_dates",
    "lifecycle",
    "registry",
    "reconcile",
    "tasks",
    "escalation",
    "cleanup",
    "store",
    "store_db",
    "jobs",
    "viz",
]

__version__ = "0.1.0"
