"""
docket.escalation
=================

Time-triggered escalation of compliance work.

* :meth:`EscalationScheduler.daily_run` – tasks for upcoming and overdue
  items, then a full escalation pass (daily beat entry).
* :meth:`EscalationScheduler.hourly_check` – bump open tasks of past-due
  items to URGENT (business-hours beat entry).
* :meth:`EscalationScheduler.escalate_overdue` – PENDING → OVERDUE for
  past-due items plus task creation/escalation.

Runs are sequential and unguarded: two overlapping runs may both create a
task for the same item, which the next run tolerates.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from .models import ComplianceStatus
from .registry import ComplianceRegistry
from .reports import DailyRunReport, EscalationReport
from .settings import Settings, settings as default_settings
from .tasks import TaskBridge

logger = logging.getLogger(__name__)

ESCALATION_TAGS = ("escalated", "overdue-compliance")


class EscalationScheduler:
    def __init__(
        self,
        registry: ComplianceRegistry,
        bridge: TaskBridge,
        config: Settings = default_settings,
    ) -> None:
        self._registry = registry
        self._bridge = bridge
        self._config = config

    def escalate_overdue(self, today: Optional[date] = None) -> EscalationReport:
        report = EscalationReport()
        for item in self._registry.past_due(today):
            try:
                if item.status != ComplianceStatus.OVERDUE:
                    self._registry.mark_overdue(item.id)
                    report.escalated += 1

                existing = self._bridge.find_tasks_for_item(item.id)
                if not existing:
                    self._bridge.create_task_from_item(item.id, today=today)
                    report.tasks_created += 1
                    continue

                for task in existing:
                    if self._bridge.escalate_task(task):
                        report.tasks_escalated += 1
            except Exception as exc:
                msg = f"Failed to escalate compliance item {item.id}: {exc}"
                logger.error(msg)
                report.errors.append(msg)

        logger.info(
            f"Escalated {report.escalated} compliance items, created {report.tasks_created} tasks, "
            f"bumped {report.tasks_escalated} tasks"
        )
        return report

    def daily_run(self, today: Optional[date] = None) -> DailyRunReport:
        logger.info("Starting automatic compliance task creation")
        report = DailyRunReport()
        report.upcoming_tasks = len(
            self._bridge.create_tasks_for_upcoming(self._config.upcoming_window_days, today=today)
        )
        report.overdue_tasks = len(self._bridge.create_tasks_for_overdue(today=today))
        report.escalation = self.escalate_overdue(today)
        logger.info(
            f"Automatic compliance task creation completed: {report.upcoming_tasks} upcoming tasks, "
            f"{report.overdue_tasks} overdue tasks, {report.escalation.escalated} items escalated"
        )
        return report

    def hourly_check(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Bump correlated open tasks of past-due items; never creates tasks."""
        past_due = self._registry.past_due(today)
        escalated = 0
        errors = []
        if past_due:
            logger.warning(f"Found {len(past_due)} overdue compliance items")

        for item in past_due:
            try:
                for task in self._bridge.find_tasks_for_item(item.id):
                    if self._bridge.escalate_task(task, extra_tags=ESCALATION_TAGS):
                        escalated += 1
            except Exception as exc:
                msg = f"Failed to check compliance item {item.id}: {exc}"
                logger.error(msg)
                errors.append(msg)

        return {"overdue_items": len(past_due), "tasks_escalated": escalated, "errors": errors}
