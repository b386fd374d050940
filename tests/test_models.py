"""
tests/test_models.py
====================

Unit tests for docket.models
"""

from datetime import date, datetime, timezone

from docket.models import (
    ComplianceItem,
    ComplianceSource,
    ComplianceStatus,
    Task,
    TaskPriority,
    parse_date,
    sort_by_due_date,
)


def test_record_keeps_fields():
    item = ComplianceItem(
        "c1", "CT600", "Acme Ltd - Corporation Tax Return",
        source=ComplianceSource.HMRC,
        service_id="s1",
        due_date=date(2026, 12, 31),
        period="2025",
    )
    rec = item.to_record()
    assert rec["due_date"] == "2026-12-31"
    assert rec["status"] == "PENDING"
    assert rec["source"] == "HMRC"

    back = ComplianceItem.from_record(rec)
    assert back.id == item.id
    assert back.due_date == date(2026, 12, 31)
    assert back.source is ComplianceSource.HMRC
    assert back.created_at == item.created_at


def test_id_prefixes():
    assert ComplianceItem("c1", "VAT_RETURN", "x").id.startswith("C")
    assert Task("c1", "t").id.startswith("task_")


def test_dedup_key_without_service():
    item = ComplianceItem("c1", "SA100", "Self Assessment")
    assert item.dedup_key == ("c1", "no-service", "SA100")


def test_past_due_uses_dates_only():
    today = date(2025, 6, 15)
    assert ComplianceItem("c1", "VAT_RETURN", "x", due_date=date(2025, 6, 14)).is_past_due(today)
    assert not ComplianceItem("c1", "VAT_RETURN", "x", due_date=today).is_past_due(today)
    assert not ComplianceItem("c1", "VAT_RETURN", "x").is_past_due(today)


def test_sort_puts_undated_last():
    a = ComplianceItem("c1", "A", "a", due_date=date(2025, 9, 1))
    b = ComplianceItem("c1", "B", "b")
    c = ComplianceItem("c1", "C", "c", due_date=date(2025, 7, 1))
    assert [i.type for i in sort_by_due_date([a, b, c])] == ["C", "A", "B"]


def test_parse_date_accepts_timestamps():
    assert parse_date("2025-12-31T00:00:00.000Z") == date(2025, 12, 31)
    assert parse_date(datetime(2025, 1, 2, 10, tzinfo=timezone.utc)) == date(2025, 1, 2)
    assert parse_date("") is None


def test_task_defaults():
    t = Task("c1", "VAT RETURN - Acme")
    assert t.is_open
    assert t.priority is TaskPriority.MEDIUM
    assert Task.from_record(t.to_record()).tags == []


def test_status_str_is_name():
    assert str(ComplianceStatus.OVERDUE) == "OVERDUE"
