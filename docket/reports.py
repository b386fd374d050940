"""
docket.reports
==============

Counters returned by batch operations.

Every batch run reports what it attempted and what succeeded, plus an
``errors`` list with one message per failed item, so a run that changed
nothing can be told apart from one that failed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass
class _Report:
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReconcileDebug(_Report):
    total_services: int = 0
    active_services: int = 0
    clients_with_services: int = 0
    services_processed: int = 0
    clients_not_found: int = 0


@dataclass
class ReconcileReport(_Report):
    generated: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)
    debug: ReconcileDebug = field(default_factory=ReconcileDebug)


@dataclass
class BulkUpdateReport(_Report):
    requested: int = 0
    updated: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class SyncReport(_Report):
    synced: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class TaskRunReport(_Report):
    created: int = 0
    skipped: int = 0
    task_ids: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class EscalationReport(_Report):
    escalated: int = 0
    tasks_created: int = 0
    tasks_escalated: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class DailyRunReport(_Report):
    upcoming_tasks: int = 0
    overdue_tasks: int = 0
    escalation: EscalationReport = field(default_factory=EscalationReport)


@dataclass
class InvalidClientReport(_Report):
    total_items: int = 0
    invalid_items: int = 0
    removed_items: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class DuplicateReport(_Report):
    total_items: int = 0
    duplicates_found: int = 0
    duplicates_removed: int = 0
    errors: List[str] = field(default_factory=list)
