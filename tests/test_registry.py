"""
tests/test_registry.py
======================

Unit tests for docket.registry.ComplianceRegistry over the in-memory store.
"""

import logging
from datetime import date, timedelta

import pytest

from docket.errors import IllegalTransition, NotFound, StorageFailure, ValidationError
from docket.models import Client, ComplianceItem, ComplianceSource, ComplianceStatus
from docket.registry import ComplianceRegistry
from docket.settings import Settings
from docket.store import MemoryRecordStore


def _data(**overrides):
    data = {"client_id": "c1", "type": "VAT_RETURN", "description": "Acme Ltd - VAT Return"}
    data.update(overrides)
    return data


def test_create_and_get(engine):
    reg = engine.registry
    item = reg.create(_data(due_date="2025-07-07", source="HMRC"))
    got = reg.get(item.id)
    assert got.due_date == date(2025, 7, 7)
    assert got.source is ComplianceSource.HMRC
    assert got.status is ComplianceStatus.PENDING


def test_create_manual_forces_source(engine):
    item = engine.registry.create_manual(_data(source="HMRC"))
    assert item.source is ComplianceSource.MANUAL


def test_create_rejects_bad_payload(engine):
    with pytest.raises(ValidationError):
        engine.registry.create(_data(description=""))
    with pytest.raises(ValidationError):
        engine.registry.create(_data(status="LOST"))
    with pytest.raises(ValidationError):
        engine.registry.create(_data(colour="red"))


def test_get_unknown_raises_not_found(engine):
    with pytest.raises(NotFound) as err:
        engine.registry.get("missing")
    assert str(err.value) == "Compliance item missing not found"
    # still a KeyError for dict-style callers
    assert isinstance(err.value, KeyError)


def test_update_keeps_identity(engine):
    reg = engine.registry
    item = reg.create(_data())
    updated = reg.update(item.id, {"description": "Acme Ltd - VAT Q2", "period": "Q2"})
    assert updated.id == item.id
    assert updated.created_at == item.created_at
    assert updated.updated_at >= item.updated_at
    assert reg.get(item.id).period == "Q2"

    with pytest.raises(ValidationError):
        reg.update(item.id, {"id": "other"})


def test_delete(engine):
    reg = engine.registry
    item = reg.create(_data())
    reg.delete(item.id)
    with pytest.raises(NotFound):
        reg.delete(item.id)


def test_transitions(engine):
    reg = engine.registry
    item = reg.create(_data())
    reg.mark_overdue(item.id)
    filed = reg.mark_filed(item.id)
    assert filed.status is ComplianceStatus.FILED
    with pytest.raises(IllegalTransition):
        reg.mark_exempt(item.id)


def test_bulk_update_reports_failures(engine):
    reg = engine.registry
    a = reg.create(_data())
    report = reg.bulk_update_status([a.id, "missing"], ComplianceStatus.FILED)
    assert report.requested == 2
    assert report.updated == [a.id]
    assert len(report.errors) == 1
    assert reg.get(a.id).status is ComplianceStatus.FILED


def test_listing_is_sorted_undated_last(engine):
    reg = engine.registry
    reg.create(_data(type="SA100"))
    reg.create(_data(type="CT600", due_date=date(2025, 12, 1)))
    reg.create(_data(due_date=date(2025, 7, 1)))
    assert [i.type for i in reg.all_items()] == ["VAT_RETURN", "CT600", "SA100"]


def test_overdue_and_upcoming(engine, today):
    reg = engine.registry
    late = reg.create(_data(due_date=today - timedelta(days=1)))
    filed_late = reg.create(_data(type="CT600", due_date=today - timedelta(days=1), status="FILED"))
    marked = reg.create(_data(type="SA100", due_date=today - timedelta(days=3), status="OVERDUE"))
    soon = reg.create(_data(type="ANNUAL_ACCOUNTS", due_date=today + timedelta(days=10)))
    due_today = reg.create(_data(type="RTI_SUBMISSION", due_date=today))
    reg.create(_data(type="CONFIRMATION_STATEMENT", due_date=today + timedelta(days=40)))
    reg.create(_data(type="OTHER"))

    assert [i.id for i in reg.overdue(today)] == [late.id]
    assert {i.id for i in reg.past_due(today)} == {late.id, marked.id}
    assert filed_late.id not in {i.id for i in reg.past_due(today)}
    assert [i.id for i in reg.upcoming(30, today)] == [due_today.id, soon.id]


def test_find_all_filters(engine):
    engine.clients.add(Client("c1", "Acme Ltd", portfolio_code=7))
    engine.clients.add(Client("c2", "Beta Ltd", portfolio_code=9))
    reg = engine.registry
    a = reg.create(_data(service_id="s1", due_date=date(2025, 7, 1)))
    reg.create(_data(client_id="c2", due_date=date(2025, 8, 1), status="FILED"))

    assert [i.id for i in reg.find_all(portfolio_code=7)] == [a.id]
    assert [i.id for i in reg.find_all(status=["PENDING"])] == [a.id]
    assert [i.id for i in reg.find_all(service_id="s1")] == [a.id]
    assert len(reg.find_all(due_from=date(2025, 6, 1), due_to=date(2025, 8, 31))) == 2
    assert reg.find_all(source="HMRC") == []


def test_statistics(engine, today):
    reg = engine.registry
    reg.create(_data(due_date=today + timedelta(days=5)))
    reg.create(_data(type="CT600", due_date=today - timedelta(days=1)))
    reg.create(_data(type="SA100", status="FILED"))

    stats = reg.statistics(today=today)
    assert stats["total"] == 3
    assert stats["pending"] == 2
    assert stats["filed"] == 1
    assert stats["overdue"] == stats["overdue_count"] == 1
    assert stats["due_this_month"] == 1
    assert stats["by_type"]["CT600"] == 1
    assert stats["by_source"] == {"MANUAL": 3}


def test_create_unless_live(engine):
    reg = engine.registry
    first = ComplianceItem("c1", "VAT_RETURN", "Acme Ltd - VAT Return", service_id="s2")
    assert reg.create_unless_live(first) is first
    dup = ComplianceItem("c1", "VAT_RETURN", "Acme Ltd - VAT Return", service_id="s2")
    assert reg.create_unless_live(dup) is None

    reg.mark_filed(first.id)
    again = ComplianceItem("c1", "VAT_RETURN", "Acme Ltd - VAT Return", service_id="s2")
    assert reg.create_unless_live(again) is again
    assert len(reg.all_items()) == 2


def test_full_scan_is_capped(caplog):
    reg = ComplianceRegistry(MemoryRecordStore(), config=Settings(max_scan_records=2))
    for n in range(3):
        reg.create(_data(type=f"T{n}"))

    with caplog.at_level(logging.WARNING, logger="docket.registry"):
        items = reg.all_items()
    assert len(items) == 2
    assert "Too many compliance records" in caplog.text


def test_unreadable_record_is_skipped(engine):
    reg = engine.registry
    good = reg.create(_data())
    engine.store.put("compliance", "broken", {"id": "broken", "status": "PENDING"})
    assert [i.id for i in reg.all_items()] == [good.id]


def test_update_cannot_blank_required_fields(engine):
    reg = engine.registry
    item = reg.create(_data())
    for name in ("client_id", "type", "description"):
        with pytest.raises(ValidationError):
            reg.update(item.id, {name: None})
    with pytest.raises(ValidationError):
        reg.update(item.id, {"description": ""})

    stored = reg.get(item.id)
    assert (stored.client_id, stored.type, stored.description) == ("c1", "VAT_RETURN", "Acme Ltd - VAT Return")
    assert reg.statistics()["by_type"] == {"VAT_RETURN": 1}


def test_corrupt_record_is_a_storage_failure(engine):
    engine.store.put("compliance", "Cbad", {"id": "Cbad", "client_id": "c1", "type": "X", "status": "WEIRD"})
    with pytest.raises(StorageFailure):
        engine.registry.get("Cbad")
    with pytest.raises(StorageFailure):
        engine.registry.mark_filed("Cbad")
    with pytest.raises(StorageFailure):
        engine.bridge.create_task_from_item("Cbad")


def test_filed_and_exempt_items_leave_overdue(engine, today):
    reg = engine.registry
    yesterday = today - timedelta(days=1)
    exempt = reg.create(_data(due_date=yesterday))
    filed = reg.create(_data(type="CT600", due_date=yesterday))
    assert {i.id for i in reg.overdue(today)} == {exempt.id, filed.id}

    reg.mark_exempt(exempt.id)
    reg.mark_filed(filed.id)
    assert reg.overdue(today) == []
    assert reg.past_due(today) == []
