"""
docket.tasks
============

Bridge between compliance items and the staff task list.

A task belongs to a compliance item through its ``compliance_item_id``
field and a ``compliance:<id>`` tag; there is no foreign key, so lookups
are a predicate scan over the ``tasks`` collection. Tasks created before
that convention existed are still matched when they carry the
``compliance`` tag and mention the item id in their title or description.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .errors import StorageFailure
from .models import (
    ComplianceItem,
    ComplianceStatus,
    Task,
    TaskPriority,
    TaskStatus,
    utcnow,
)
from .registry import ComplianceRegistry
from .relationships import COMPLIANCE_TAG, CorrelationGraph, correlation_tag, is_correlated
from .reports import SyncReport, TaskRunReport
from .settings import TASKS_COLLECTION, Settings, settings as default_settings
from .store import RecordStore

logger = logging.getLogger(__name__)


def priority_from_status(
    status: ComplianceStatus,
    due_date: Optional[date],
    today: Optional[date] = None,
    config: Settings = default_settings,
) -> TaskPriority:
    """
    Map an obligation's urgency to a task priority.

    OVERDUE is always URGENT. Otherwise the days left until *due_date*
    decide: none left → URGENT, within a week → HIGH, within a month →
    MEDIUM, later (or no due date) → LOW.
    """
    if status == ComplianceStatus.OVERDUE:
        return TaskPriority.URGENT

    if due_date is not None:
        days_until_due = (due_date - (today or date.today())).days
        if days_until_due <= config.urgent_days:
            return TaskPriority.URGENT
        if days_until_due <= config.high_days:
            return TaskPriority.HIGH
        if days_until_due <= config.medium_days:
            return TaskPriority.MEDIUM

    return TaskPriority.LOW


class TaskBridge:
    """Creates, finds and escalates tasks correlated to compliance items."""

    def __init__(
        self,
        store: RecordStore,
        registry: ComplianceRegistry,
        config: Settings = default_settings,
    ) -> None:
        self._store = store
        self._registry = registry
        self._config = config

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    def save(self, task: Task) -> None:
        try:
            self._store.put(TASKS_COLLECTION, task.id, task.to_record())
        except Exception as exc:
            raise StorageFailure(f"failed to write task {task.id}: {exc}") from exc

    def all_tasks(self) -> List[Task]:
        try:
            recs = self._store.scan(TASKS_COLLECTION, lambda r: True)
        except Exception as exc:
            raise StorageFailure(f"failed to scan tasks: {exc}") from exc
        return [Task.from_record(r) for r in recs]

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def build_task(
        self, item: ComplianceItem, assignee: Optional[str] = None, today: Optional[date] = None
    ) -> Task:
        type_label = str(item.type).replace("_", " ")
        description = f"Compliance task for {item.description}"
        if item.period:
            description += f" (Period: {item.period})"
        return Task(
            client_id=item.client_id,
            service_id=item.service_id,
            title=f"{type_label} - {item.description}",
            description=description,
            due_date=item.due_date,
            assignee=assignee,
            priority=priority_from_status(item.status, item.due_date, today, self._config),
            tags=[
                COMPLIANCE_TAG,
                "filing",
                correlation_tag(item.id),
                str(item.type).lower(),
                item.source.value.lower(),
            ],
            compliance_item_id=item.id,
        )

    def create_task_from_item(
        self, item_id: str, assignee: Optional[str] = None, today: Optional[date] = None
    ) -> str:
        """Create a task for compliance item *item_id* and return its id."""
        item = self._registry.get(item_id)
        task = self.build_task(item, assignee, today)
        self.save(task)
        logger.info(f"Created task {task.id} from compliance item {item_id}")
        return task.id

    # ------------------------------------------------------------------
    # Correlation
    # ------------------------------------------------------------------
    def find_tasks_for_item(self, item_id: str) -> List[Task]:
        try:
            recs = self._store.scan(TASKS_COLLECTION, lambda r: is_correlated(r, item_id))
        except Exception as exc:
            raise StorageFailure(f"failed to scan tasks: {exc}") from exc
        return [Task.from_record(r) for r in recs]

    def task_relationships(self) -> List[dict]:
        """Every compliance item with a summary of its correlated tasks."""
        graph = CorrelationGraph.build(self._registry.all_items(), self.all_tasks())
        return graph.relationships()

    # ------------------------------------------------------------------
    # Batch creation
    # ------------------------------------------------------------------
    def _create_missing(
        self, items: Iterable[ComplianceItem], assignee: Optional[str], today: Optional[date]
    ) -> TaskRunReport:
        report = TaskRunReport()
        for item in items:
            try:
                if self.find_tasks_for_item(item.id):
                    report.skipped += 1
                    continue
                report.task_ids.append(self.create_task_from_item(item.id, assignee, today))
                report.created += 1
            except Exception as exc:
                msg = f"Failed to create task for compliance item {item.id}: {exc}"
                logger.error(msg)
                report.errors.append(msg)
        return report

    def create_tasks_for_overdue(
        self, assignee: Optional[str] = None, today: Optional[date] = None
    ) -> List[str]:
        report = self._create_missing(self._registry.overdue(today), assignee, today)
        logger.info(f"Created {report.created} tasks for overdue compliance items")
        return report.task_ids

    def create_tasks_for_upcoming(
        self,
        days_ahead: Optional[int] = None,
        assignee: Optional[str] = None,
        today: Optional[date] = None,
    ) -> List[str]:
        report = self._create_missing(self._registry.upcoming(days_ahead, today), assignee, today)
        logger.info(f"Created {report.created} tasks for upcoming compliance items")
        return report.task_ids

    def create_tasks_for_deadlines(
        self,
        days_ahead: Optional[int] = None,
        assignee: Optional[str] = None,
        portfolio_code: Optional[int] = None,
        today: Optional[date] = None,
    ) -> TaskRunReport:
        """Like :meth:`create_tasks_for_upcoming`, with counters and a portfolio filter."""
        items = self._registry.upcoming(days_ahead, today)
        if portfolio_code:
            allowed = self._registry.portfolio_client_ids(portfolio_code)
            items = [i for i in items if i.client_id in allowed]
        report = self._create_missing(items, assignee, today)
        logger.info(
            f"Compliance task creation summary: {report.created} created, "
            f"{report.skipped} skipped, {len(report.errors)} errors"
        )
        return report

    # ------------------------------------------------------------------
    # Escalation / sync
    # ------------------------------------------------------------------
    def escalate_task(self, task: Task, extra_tags: Sequence[str] = ()) -> bool:
        """Bump an open task below URGENT to URGENT. Returns True if changed."""
        if not task.is_open or task.priority == TaskPriority.URGENT:
            return False
        task.priority = TaskPriority.URGENT
        task.tags.extend(t for t in extra_tags if t not in task.tags)
        task.updated_at = utcnow()
        self.save(task)
        logger.info(f"Escalated task {task.id} to URGENT")
        return True

    def sync_with_tasks(self) -> SyncReport:
        """Mark PENDING items FILED once all their correlated tasks are COMPLETED."""
        report = SyncReport()
        for item in self._registry.all_items():
            try:
                if item.status != ComplianceStatus.PENDING:
                    continue
                related = self.find_tasks_for_item(item.id)
                if related and all(t.status == TaskStatus.COMPLETED for t in related):
                    self._registry.mark_filed(item.id)
                    report.synced += 1
                    logger.info(f"Marked compliance item {item.id} as filed based on completed tasks")
            except Exception as exc:
                msg = f"Failed to sync compliance item {item.id}: {exc}"
                logger.error(msg)
                report.errors.append(msg)
        logger.info(f"Compliance sync completed: {report.synced} synced, {len(report.errors)} errors")
        return report
