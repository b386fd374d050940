"""
api.compliance
==============

FastAPI router exposing the compliance engine.

Single-item endpoints surface engine errors as HTTP errors (mapped in
:pymod:`api.main`). Batch endpoints (reconcile, cleanup, bulk update, task
runs, escalation) always answer 200 with their counters and ``errors``
list, even when some items failed.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from docket.cleanup import cleanup_duplicates, cleanup_invalid_clients
from docket.dashboard import dashboard, priority_recommendations
from docket.engine import ComplianceEngine
from docket.models import ComplianceSource, ComplianceStatus
from .deps import get_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/compliance", tags=["compliance"])


# ---------- request bodies ----------
class ComplianceItemCreate(BaseModel):
    client_id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    service_id: Optional[str] = None
    due_date: Optional[date] = None
    status: Optional[ComplianceStatus] = None
    source: Optional[ComplianceSource] = None
    reference: Optional[str] = None
    period: Optional[str] = None


class ComplianceItemUpdate(BaseModel):
    client_id: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    service_id: Optional[str] = None
    due_date: Optional[date] = None
    status: Optional[ComplianceStatus] = None
    source: Optional[ComplianceSource] = None
    reference: Optional[str] = None
    period: Optional[str] = None


class FiledBody(BaseModel):
    filed_at: Optional[datetime] = None


class BulkStatusBody(BaseModel):
    ids: List[str]
    status: ComplianceStatus


class AssigneeBody(BaseModel):
    assignee: Optional[str] = None


class UpcomingTasksBody(BaseModel):
    days_ahead: Optional[int] = Field(None, ge=0)
    assignee: Optional[str] = None


class DeadlineTasksBody(UpcomingTasksBody):
    portfolio_code: Optional[int] = None


def _records(items) -> List[Dict[str, Any]]:
    return [i.to_record() for i in items]


# ---------- listing & statistics ----------
@router.get("")
def list_items(
    client_id: Optional[str] = None,
    service_id: Optional[str] = None,
    status: Optional[List[ComplianceStatus]] = Query(None),
    source: Optional[ComplianceSource] = None,
    type: Optional[str] = None,
    due_from: Optional[date] = None,
    due_to: Optional[date] = None,
    portfolio_code: Optional[int] = None,
    overdue: bool = False,
    upcoming: bool = False,
    days_ahead: Optional[int] = Query(None, ge=0),
    engine: ComplianceEngine = Depends(get_engine),
):
    """
    List compliance items.

    ``overdue=true`` and ``upcoming=true`` short-circuit to the time-based
    queries; otherwise every given filter must match.
    """
    if overdue:
        return _records(engine.registry.overdue())
    if upcoming:
        return _records(engine.registry.upcoming(days_ahead))
    return _records(engine.registry.find_all(
        client_id=client_id,
        service_id=service_id,
        status=status,
        source=source,
        compliance_type=type,
        due_from=due_from,
        due_to=due_to,
        portfolio_code=portfolio_code,
    ))


@router.get("/statistics")
def statistics(portfolio_code: Optional[int] = None, engine: ComplianceEngine = Depends(get_engine)):
    return engine.registry.statistics(portfolio_code=portfolio_code)


@router.get("/by-type/{compliance_type}")
def by_type(compliance_type: str, engine: ComplianceEngine = Depends(get_engine)):
    return _records(engine.registry.by_type(compliance_type))


@router.get("/by-source/{source}")
def by_source(source: ComplianceSource, engine: ComplianceEngine = Depends(get_engine)):
    return _records(engine.registry.by_source(source))


@router.get("/date-range")
def by_date_range(start: date, end: date, engine: ComplianceEngine = Depends(get_engine)):
    return _records(engine.registry.by_date_range(start, end))


# ---------- tasks & escalation ----------
@router.post("/create-overdue-tasks")
def create_overdue_tasks(body: AssigneeBody, engine: ComplianceEngine = Depends(get_engine)):
    return {"task_ids": engine.bridge.create_tasks_for_overdue(body.assignee)}


@router.post("/create-upcoming-tasks")
def create_upcoming_tasks(body: UpcomingTasksBody, engine: ComplianceEngine = Depends(get_engine)):
    return {"task_ids": engine.bridge.create_tasks_for_upcoming(body.days_ahead, body.assignee)}


@router.post("/create-deadline-tasks")
def create_deadline_tasks(body: DeadlineTasksBody, engine: ComplianceEngine = Depends(get_engine)):
    return engine.bridge.create_tasks_for_deadlines(
        body.days_ahead, body.assignee, body.portfolio_code
    ).to_dict()


@router.post("/escalate-overdue")
def escalate_overdue(engine: ComplianceEngine = Depends(get_engine)):
    logger.info("Escalating overdue compliance items")
    return engine.scheduler.escalate_overdue().to_dict()


@router.post("/sync-with-tasks")
def sync_with_tasks(engine: ComplianceEngine = Depends(get_engine)):
    return engine.bridge.sync_with_tasks().to_dict()


@router.get("/task-relationships")
def task_relationships(engine: ComplianceEngine = Depends(get_engine)):
    return engine.bridge.task_relationships()


@router.get("/dashboard")
def integrated_dashboard(engine: ComplianceEngine = Depends(get_engine)):
    return dashboard(engine.registry, engine.bridge)


@router.get("/priority-recommendations")
def recommendations(engine: ComplianceEngine = Depends(get_engine)):
    return priority_recommendations(engine.registry, engine.bridge)


# ---------- reconciliation & cleanup ----------
@router.post("/reconcile")
def reconcile(engine: ComplianceEngine = Depends(get_engine)):
    """Derive compliance items from every active service."""
    return engine.reconciler.reconcile_from_directory().to_dict()


@router.post("/services/{service_id}/ensure")
def ensure_for_service(service_id: str, engine: ComplianceEngine = Depends(get_engine)):
    service = engine.services.get(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Service {service_id} not found")
    client = engine.clients.resolve(service.client_id)
    if client is None:
        raise HTTPException(status_code=404, detail=f"Client {service.client_id} not found")
    return {"created": engine.reconciler.ensure_compliance_for_service(client, service)}


@router.post("/services/{service_id}/sync-dates")
def sync_service_dates(service_id: str, engine: ComplianceEngine = Depends(get_engine)):
    service = engine.services.get(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Service {service_id} not found")
    return engine.reconciler.sync_service_due_dates(service).to_dict()


@router.post("/cleanup/invalid-clients")
def cleanup_clients(engine: ComplianceEngine = Depends(get_engine)):
    return cleanup_invalid_clients(engine.registry, engine.clients).to_dict()


@router.post("/cleanup/duplicates")
def cleanup_dupes(engine: ComplianceEngine = Depends(get_engine)):
    logger.info("Starting compliance duplicates cleanup")
    return cleanup_duplicates(engine.registry).to_dict()


@router.put("/bulk-update")
def bulk_update(body: BulkStatusBody, engine: ComplianceEngine = Depends(get_engine)):
    logger.info(f"Bulk updating {len(body.ids)} compliance items to status {body.status.name}")
    return engine.registry.bulk_update_status(body.ids, body.status).to_dict()


# ---------- single item ----------
@router.post("", status_code=201)
def create_item(body: ComplianceItemCreate, engine: ComplianceEngine = Depends(get_engine)):
    return engine.registry.create(body.model_dump(exclude_none=True)).to_record()


@router.post("/manual", status_code=201)
def create_manual_item(body: ComplianceItemCreate, engine: ComplianceEngine = Depends(get_engine)):
    return engine.registry.create_manual(body.model_dump(exclude_none=True)).to_record()


@router.get("/{item_id}")
def get_item(item_id: str, engine: ComplianceEngine = Depends(get_engine)):
    return engine.registry.get(item_id).to_record()


@router.put("/{item_id}")
def update_item(item_id: str, body: ComplianceItemUpdate, engine: ComplianceEngine = Depends(get_engine)):
    return engine.registry.update(item_id, body.model_dump(exclude_unset=True)).to_record()


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: str, engine: ComplianceEngine = Depends(get_engine)):
    engine.registry.delete(item_id)


@router.put("/{item_id}/filed")
def mark_filed(item_id: str, body: FiledBody, engine: ComplianceEngine = Depends(get_engine)):
    return engine.registry.mark_filed(item_id, body.filed_at).to_record()


@router.put("/{item_id}/overdue")
def mark_overdue(item_id: str, engine: ComplianceEngine = Depends(get_engine)):
    return engine.registry.mark_overdue(item_id).to_record()


@router.put("/{item_id}/exempt")
def mark_exempt(item_id: str, engine: ComplianceEngine = Depends(get_engine)):
    return engine.registry.mark_exempt(item_id).to_record()


@router.post("/{item_id}/create-task", status_code=201)
def create_task(item_id: str, body: AssigneeBody, engine: ComplianceEngine = Depends(get_engine)):
    return {"task_id": engine.bridge.create_task_from_item(item_id, body.assignee)}


@router.get("/{item_id}/tasks")
def tasks_for_item(item_id: str, engine: ComplianceEngine = Depends(get_engine)):
    return [t.to_record() for t in engine.bridge.find_tasks_for_item(item_id)]
