"""
tests/test_escalation.py
========================

Time-triggered escalation runs.
"""

from datetime import timedelta

from docket.escalation import ESCALATION_TAGS
from docket.models import ComplianceStatus, TaskPriority


def _item(engine, today, days, **extra):
    data = {
        "client_id": "c1",
        "type": "CONFIRMATION_STATEMENT",
        "description": "Acme Ltd - Confirmation Statement Filing",
        "due_date": today + timedelta(days=days),
    }
    data.update(extra)
    return engine.registry.create(data)


def test_past_due_item_becomes_overdue_with_one_urgent_task(engine, today):
    item = _item(engine, today, -1)

    report = engine.scheduler.escalate_overdue(today)
    assert report.escalated == 1
    assert report.tasks_created == 1
    assert report.errors == []
    assert engine.registry.get(item.id).status is ComplianceStatus.OVERDUE

    (task,) = engine.bridge.find_tasks_for_item(item.id)
    assert task.priority is TaskPriority.URGENT

    again = engine.scheduler.escalate_overdue(today)
    assert (again.escalated, again.tasks_created, again.tasks_escalated) == (0, 0, 0)
    assert len(engine.bridge.find_tasks_for_item(item.id)) == 1


def test_existing_task_is_bumped(engine, today):
    item = _item(engine, today, 20)
    engine.bridge.create_task_from_item(item.id, today=today)
    assert engine.bridge.find_tasks_for_item(item.id)[0].priority is TaskPriority.MEDIUM

    engine.registry.update(item.id, {"due_date": today - timedelta(days=2)})
    report = engine.scheduler.escalate_overdue(today)
    assert report.tasks_created == 0
    assert report.tasks_escalated == 1
    assert engine.bridge.find_tasks_for_item(item.id)[0].priority is TaskPriority.URGENT


def test_future_and_filed_items_untouched(engine, today):
    future = _item(engine, today, 5)
    filed = _item(engine, today, -5, type="CT600", status="FILED")

    report = engine.scheduler.escalate_overdue(today)
    assert report.escalated == 0
    assert engine.registry.get(future.id).status is ComplianceStatus.PENDING
    assert engine.registry.get(filed.id).status is ComplianceStatus.FILED
    assert engine.bridge.all_tasks() == []


def test_hourly_check_tags_and_never_creates(engine, today):
    with_task = _item(engine, today, 20)
    engine.bridge.create_task_from_item(with_task.id, today=today)
    engine.registry.update(with_task.id, {"due_date": today - timedelta(days=1)})
    _item(engine, today, -1, type="CT600")

    result = engine.scheduler.hourly_check(today)
    assert result == {"overdue_items": 2, "tasks_escalated": 1, "errors": []}
    assert len(engine.bridge.all_tasks()) == 1

    (task,) = engine.bridge.find_tasks_for_item(with_task.id)
    assert task.priority is TaskPriority.URGENT
    for tag in ESCALATION_TAGS:
        assert tag in task.tags


def test_daily_run(engine, today):
    _item(engine, today, 10)
    late = _item(engine, today, -1, type="CT600")

    report = engine.scheduler.daily_run(today)
    assert report.upcoming_tasks == 1
    assert report.overdue_tasks == 1
    assert report.escalation.escalated == 1
    assert report.escalation.tasks_created == 0
    assert engine.registry.get(late.id).status is ComplianceStatus.OVERDUE
    assert len(engine.bridge.all_tasks()) == 2
