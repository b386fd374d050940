"""
Tests for the /compliance API endpoints.

These use FastAPI TestClient against an engine over the in-memory store,
swapped in through ``app.dependency_overrides``.
"""

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from api.deps import get_engine
from api.main import app
from docket.engine import build_engine
from docket.models import Client, Service
from docket.store import MemoryRecordStore


@pytest.fixture
def eng():
    engine = build_engine(MemoryRecordStore())
    app.dependency_overrides[get_engine] = lambda: engine
    yield engine
    app.dependency_overrides.clear()


@pytest.fixture
def client(eng):
    return TestClient(app)


def _create(client, **extra):
    body = {"client_id": "c1", "type": "CT600", "description": "Acme Ltd - Corporation Tax Return"}
    body.update(extra)
    resp = client.post("/compliance", json=body)
    assert resp.status_code == 201
    return resp.json()


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_create_get_update_delete(client):
    item = _create(client, due_date="2030-01-31", source="HMRC")
    assert item["status"] == "PENDING"
    assert item["id"].startswith("C")

    got = client.get(f"/compliance/{item['id']}")
    assert got.status_code == 200
    assert got.json()["due_date"] == "2030-01-31"

    upd = client.put(f"/compliance/{item['id']}", json={"period": "2029"})
    assert upd.json()["period"] == "2029"
    assert upd.json()["due_date"] == "2030-01-31"

    assert client.delete(f"/compliance/{item['id']}").status_code == 204
    assert client.get(f"/compliance/{item['id']}").status_code == 404


def test_manual_create_and_validation(client):
    item = client.post("/compliance/manual", json={
        "client_id": "c1", "type": "MTD_ITSA", "description": "Quarterly update", "source": "HMRC",
    }).json()
    assert item["source"] == "MANUAL"

    resp = client.post("/compliance", json={"client_id": "c1", "type": "CT600"})
    assert resp.status_code == 422


def test_transitions_map_to_http_codes(client):
    item = _create(client)
    assert client.put(f"/compliance/{item['id']}/filed", json={}).json()["status"] == "FILED"
    assert client.put(f"/compliance/{item['id']}/exempt").status_code == 409
    assert client.put("/compliance/missing/overdue").status_code == 404


def test_listing_filters(client):
    a = _create(client)
    b = _create(client, type="VAT_RETURN", due_date=str(date.today() - timedelta(days=1)))
    client.put(f"/compliance/{a['id']}/filed", json={})

    assert [i["id"] for i in client.get("/compliance", params={"status": "FILED"}).json()] == [a["id"]]
    assert [i["id"] for i in client.get("/compliance", params={"overdue": True}).json()] == [b["id"]]
    assert [i["id"] for i in client.get("/compliance/by-type/VAT_RETURN").json()] == [b["id"]]
    assert len(client.get("/compliance/by-source/MANUAL").json()) == 2
    assert client.get("/compliance/statistics").json()["total"] == 2


def test_bulk_update(client):
    a = _create(client)
    resp = client.put("/compliance/bulk-update", json={"ids": [a["id"], "missing"], "status": "EXEMPT"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["updated"] == [a["id"]]
    assert len(body["errors"]) == 1


def test_tasks_and_escalation(client):
    item = _create(client, due_date=str(date.today() - timedelta(days=3)))

    resp = client.post(f"/compliance/{item['id']}/create-task", json={"assignee": "jo"})
    assert resp.status_code == 201
    tasks = client.get(f"/compliance/{item['id']}/tasks").json()
    assert [t["id"] for t in tasks] == [resp.json()["task_id"]]

    report = client.post("/compliance/escalate-overdue").json()
    assert report["escalated"] == 1
    assert report["tasks_created"] == 0

    rels = client.get("/compliance/task-relationships").json()
    assert rels[0]["related_tasks"][0]["assignee"] == "jo"
    assert client.get("/compliance/priority-recommendations").status_code == 200
    assert client.get("/compliance/dashboard").json()["summary"]["total"] == 1


def test_reconcile_and_service_endpoints(client, eng):
    eng.clients.add(Client("c1", "Acme Ltd"))
    eng.services.add(Service("s1", "c1", "Annual Accounts"))

    assert client.post("/compliance/reconcile").json()["generated"] == 1
    assert client.post("/compliance/services/s1/ensure").json() == {"created": 0}
    assert client.post("/compliance/services/nope/ensure").status_code == 404

    eng.services.add(Service("s1", "c1", "Annual Accounts", next_due=date(2031, 3, 31)))
    assert client.post("/compliance/services/s1/sync-dates").json()["synced"] == 1


def test_cleanup_endpoints(client, eng):
    eng.clients.add(Client("c1", "Acme Ltd"))
    _create(client)
    _create(client, client_id="ghost")

    assert client.post("/compliance/cleanup/invalid-clients").json()["removed_items"] == 1
    assert client.post("/compliance/cleanup/duplicates").json()["duplicates_found"] == 0


class _BrokenStore(MemoryRecordStore):
    def list_ids(self, collection):
        raise OSError("database is locked")


def test_storage_failure_is_503():
    engine = build_engine(_BrokenStore())
    app.dependency_overrides[get_engine] = lambda: engine
    try:
        resp = TestClient(app).get("/compliance")
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 503


def test_update_rejects_null_required_fields(client):
    item = _create(client)
    resp = client.put(f"/compliance/{item['id']}", json={"client_id": None, "type": None, "description": None})
    assert resp.status_code == 422
    assert client.get(f"/compliance/{item['id']}").json()["type"] == "CT600"
    assert client.get("/compliance/statistics").json()["by_type"] == {"CT600": 1}


def test_corrupt_record_is_503(client, eng):
    eng.store.put("compliance", "Cbad", {"id": "Cbad", "client_id": "c1", "type": "X", "status": "WEIRD"})
    assert client.get("/compliance/Cbad").status_code == 503
    assert client.post("/compliance/Cbad/create-task", json={}).status_code == 503
