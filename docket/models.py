"""
docket.models
=============

Dataclasses and enums for compliance items, tasks, clients and services.

These objects carry **no** external-library dependencies. Each converts to
and from a JSON-safe record (``to_record`` / ``from_record``) which is what
the record store persists: dates as ISO strings, enums by value.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class _NamedEnum(str, Enum):
    def __str__(self) -> str:        # nicer REPL display
        return self.name


class ComplianceStatus(_NamedEnum):
    """Life-cycle states of a filing obligation."""
    PENDING = "PENDING"
    FILED = "FILED"
    OVERDUE = "OVERDUE"
    EXEMPT = "EXEMPT"


class ComplianceSource(_NamedEnum):
    """Where an obligation comes from (provenance only)."""
    COMPANIES_HOUSE = "COMPANIES_HOUSE"
    HMRC = "HMRC"
    MANUAL = "MANUAL"


class ComplianceType(_NamedEnum):
    """Known obligation types. Manual items may use any other string."""
    ANNUAL_ACCOUNTS = "ANNUAL_ACCOUNTS"
    CONFIRMATION_STATEMENT = "CONFIRMATION_STATEMENT"
    CT600 = "CT600"
    VAT_RETURN = "VAT_RETURN"
    SA100 = "SA100"
    RTI_SUBMISSION = "RTI_SUBMISSION"


class TaskStatus(_NamedEnum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskPriority(_NamedEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ClientStatus(_NamedEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"


class ServiceStatus(_NamedEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_compliance_id() -> str:
    return f"C{uuid.uuid4().hex}"


def new_task_id() -> str:
    return f"task_{uuid.uuid4().hex}"


def parse_date(value: Any) -> Optional[date]:
    """Accept a ``date``, ``datetime`` or ISO string; ``None``/"" stay ``None``."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    # "2025-12-31T00:00:00.000Z" style values from older JSON records
    return date.fromisoformat(text[:10])


def parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif value in (None, ""):
        return utcnow()
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _text(value: Any) -> Optional[str]:
    # enums serialise by value, free-form types pass through
    if value is None:
        return None
    return value.value if isinstance(value, Enum) else str(value)


# ---------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------
@dataclass
class ComplianceItem:
    """
    A tracked regulatory filing obligation for a client.

    Parameters
    ----------
    client_id : str
        Owning client.
    type : str
        A :class:`ComplianceType` value or a free-form type for manual items.
    description : str
        Usually ``"{client name} - {obligation description}"``.
    source : ComplianceSource
        Provenance of the obligation.
    status : ComplianceStatus, default=PENDING
    service_id : str | None
        Service the item was derived from; ``None`` for manual items.
    due_date : datetime.date | None
        Target date. Undated items never count as overdue or upcoming.
    reference, period : str | None
        Free-text correlation fields (registration number, accounting period).
    """
    client_id: str
    type: str
    description: str
    source: ComplianceSource = ComplianceSource.MANUAL
    status: ComplianceStatus = ComplianceStatus.PENDING
    service_id: Optional[str] = None
    due_date: Optional[date] = None
    reference: Optional[str] = None
    period: Optional[str] = None
    id: str = field(default_factory=new_compliance_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def dedup_key(self) -> tuple:
        """(client, service, type) triple the uniqueness rule is keyed on."""
        return (self.client_id, self.service_id or "no-service", self.type)

    def is_past_due(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return self.due_date is not None and self.due_date < today

    def days_until_due(self, today: Optional[date] = None) -> Optional[int]:
        if self.due_date is None:
            return None
        return (self.due_date - (today or date.today())).days

    # Converters ---------------------------------------------------------
    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "service_id": self.service_id,
            "type": _text(self.type),
            "description": self.description,
            "due_date": _iso(self.due_date),
            "status": _text(self.status),
            "source": _text(self.source),
            "reference": self.reference,
            "period": self.period,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "ComplianceItem":
        return cls(
            id=rec["id"],
            client_id=rec["client_id"],
            service_id=rec.get("service_id"),
            type=rec["type"],
            description=rec.get("description") or "",
            due_date=parse_date(rec.get("due_date")),
            status=ComplianceStatus(rec.get("status") or "PENDING"),
            source=ComplianceSource(rec.get("source") or "MANUAL"),
            reference=rec.get("reference"),
            period=rec.get("period"),
            created_at=parse_datetime(rec.get("created_at")),
            updated_at=parse_datetime(rec.get("updated_at")),
        )


@dataclass
class Task:
    """Operational work item assigned to staff."""
    client_id: str
    title: str
    description: Optional[str] = None
    service_id: Optional[str] = None
    due_date: Optional[date] = None
    assignee: Optional[str] = None
    status: TaskStatus = TaskStatus.OPEN
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: List[str] = field(default_factory=list)
    compliance_item_id: Optional[str] = None
    id: str = field(default_factory=new_task_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_open(self) -> bool:
        return self.status in (TaskStatus.OPEN, TaskStatus.IN_PROGRESS)

    def summary(self) -> Dict[str, Any]:
        """Short projection used by relationship and dashboard views."""
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "priority": self.priority.value,
            "assignee": self.assignee,
            "due_date": _iso(self.due_date),
        }

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "service_id": self.service_id,
            "title": self.title,
            "description": self.description,
            "due_date": _iso(self.due_date),
            "assignee": self.assignee,
            "status": _text(self.status),
            "priority": _text(self.priority),
            "tags": list(self.tags),
            "compliance_item_id": self.compliance_item_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "Task":
        return cls(
            id=rec["id"],
            client_id=rec.get("client_id") or "",
            service_id=rec.get("service_id"),
            title=rec.get("title") or "",
            description=rec.get("description"),
            due_date=parse_date(rec.get("due_date")),
            assignee=rec.get("assignee"),
            status=TaskStatus(rec.get("status") or "OPEN"),
            priority=TaskPriority(rec.get("priority") or "MEDIUM"),
            tags=list(rec.get("tags") or []),
            compliance_item_id=rec.get("compliance_item_id"),
            created_at=parse_datetime(rec.get("created_at")),
            updated_at=parse_datetime(rec.get("updated_at")),
        )


@dataclass
class Client:
    """Client record as exposed by the client directory."""
    id: str
    name: str
    ref: Optional[str] = None
    status: ClientStatus = ClientStatus.ACTIVE
    portfolio_code: Optional[int] = None
    registered_number: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "ref": self.ref,
            "status": _text(self.status),
            "portfolio_code": self.portfolio_code,
            "registered_number": self.registered_number,
        }

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "Client":
        return cls(
            id=rec["id"],
            name=rec.get("name") or rec["id"],
            ref=rec.get("ref"),
            status=ClientStatus(rec.get("status") or "ACTIVE"),
            portfolio_code=rec.get("portfolio_code"),
            registered_number=rec.get("registered_number"),
        )


@dataclass
class Service:
    """A service a client has engaged the practice for."""
    id: str
    client_id: str
    kind: str
    status: ServiceStatus = ServiceStatus.ACTIVE
    next_due: Optional[date] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "kind": self.kind,
            "status": _text(self.status),
            "next_due": _iso(self.next_due),
        }

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "Service":
        return cls(
            id=rec["id"],
            client_id=rec["client_id"],
            kind=rec.get("kind") or "",
            status=ServiceStatus(rec.get("status") or "ACTIVE"),
            next_due=parse_date(rec.get("next_due")),
        )


def sort_by_due_date(items: Iterable[ComplianceItem]) -> List[ComplianceItem]:
    """Due date ascending; undated items always last (stable otherwise)."""
    return sorted(items, key=lambda i: (i.due_date is None, i.due_date or date.min))
