"""
tests/test_cleanup.py
=====================

Invalid-client and duplicate cleanup jobs.
"""

from datetime import datetime, timedelta, timezone

from docket.cleanup import cleanup_duplicates, cleanup_invalid_clients
from docket.models import Client, ComplianceItem, ComplianceStatus

NOW = datetime(2025, 6, 15, 9, tzinfo=timezone.utc)


def _add(engine, client_id="C1", service_id="S1", ctype="ANNUAL_ACCOUNTS", age_days=0, **extra):
    item = ComplianceItem(
        client_id, ctype, f"{client_id} - {ctype}",
        service_id=service_id,
        created_at=NOW - timedelta(days=age_days),
        **extra,
    )
    return engine.registry.add(item)


def test_duplicates_keep_newest(engine):
    old = _add(engine, age_days=30)
    new = _add(engine, age_days=1)
    other = _add(engine, ctype="CT600")

    report = cleanup_duplicates(engine.registry)
    assert report.total_items == 3
    assert report.duplicates_found == 1
    assert report.duplicates_removed == 1
    assert report.errors == []
    assert {i.id for i in engine.registry.all_items()} == {new.id, other.id}
    assert old.id not in {i.id for i in engine.registry.all_items()}


def test_duplicates_group_filed_and_unserviced_items(engine):
    _add(engine, service_id=None, ctype="SA100", age_days=10, status=ComplianceStatus.FILED)
    newest = _add(engine, service_id=None, ctype="SA100", age_days=2)

    report = cleanup_duplicates(engine.registry)
    assert report.duplicates_removed == 1
    assert [i.id for i in engine.registry.all_items()] == [newest.id]


def test_duplicate_delete_failures_are_reported(engine, monkeypatch):
    _add(engine, age_days=5)
    _add(engine, age_days=1)

    def boom(ident):
        raise RuntimeError("locked")

    monkeypatch.setattr(engine.registry, "delete", boom)
    report = cleanup_duplicates(engine.registry)
    assert report.duplicates_found == 1
    assert report.duplicates_removed == 0
    assert len(report.errors) == 1


def test_invalid_clients_removed(engine):
    engine.clients.add(Client("C1", "Acme Ltd"))
    keep = _add(engine)
    _add(engine, client_id="ghost")

    report = cleanup_invalid_clients(engine.registry, engine.clients)
    assert report.total_items == 2
    assert report.invalid_items == 1
    assert report.removed_items == 1
    assert [i.id for i in engine.registry.all_items()] == [keep.id]

    again = cleanup_invalid_clients(engine.registry, engine.clients)
    assert again.invalid_items == 0
