"""
docket.dashboard
================

Read-only views that combine obligations with their tasks.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from .models import ComplianceItem, TaskPriority
from .registry import ComplianceRegistry
from .tasks import TaskBridge

logger = logging.getLogger(__name__)


def _with_tasks(bridge: TaskBridge, item: ComplianceItem) -> Dict[str, Any]:
    related = bridge.find_tasks_for_item(item.id)
    return {**item.to_record(), "related_tasks": [t.summary() for t in related]}


def dashboard(registry: ComplianceRegistry, bridge: TaskBridge, today: Optional[date] = None) -> Dict[str, Any]:
    return {
        "summary": registry.statistics(today=today),
        "overdue_with_tasks": [_with_tasks(bridge, i) for i in registry.overdue(today)],
        "upcoming_with_tasks": [_with_tasks(bridge, i) for i in registry.upcoming(today=today)],
        "task_relationships": bridge.task_relationships(),
    }


def priority_recommendations(
    registry: ComplianceRegistry, bridge: TaskBridge, today: Optional[date] = None
) -> Dict[str, List[Any]]:
    """
    Overdue items without an active task are critical; items due within a
    week without an active task are high. Critical items sort first.
    """
    today = today or date.today()
    critical: List[Dict[str, Any]] = []
    recommendations: List[str] = []
    actions: List[Dict[str, Any]] = []

    for item in registry.overdue(today):
        related = bridge.find_tasks_for_item(item.id)
        has_active = any(t.is_open for t in related)
        critical.append({
            **item.to_record(),
            "severity": "critical",
            "has_active_tasks": has_active,
            "related_task_count": len(related),
        })
        if not has_active:
            recommendations.append(f"Create urgent task for overdue {item.type}: {item.description}")
            actions.append({
                "type": "create_task",
                "compliance_id": item.id,
                "priority": TaskPriority.URGENT.value,
                "reason": "Overdue compliance item without active tasks",
            })

    for item in registry.upcoming(7, today):
        related = bridge.find_tasks_for_item(item.id)
        if any(t.is_open for t in related):
            continue
        days = item.days_until_due(today)
        critical.append({
            **item.to_record(),
            "severity": "high",
            "has_active_tasks": False,
            "related_task_count": len(related),
            "days_until_due": days,
        })
        recommendations.append(f"Create high-priority task for {item.type} due in {days} days")
        actions.append({
            "type": "create_task",
            "compliance_id": item.id,
            "priority": TaskPriority.HIGH.value,
            "reason": f"Due in {days} days without active tasks",
        })

    critical.sort(key=lambda c: c["severity"] != "critical")
    return {"critical_items": critical, "recommendations": recommendations, "action_items": actions}
