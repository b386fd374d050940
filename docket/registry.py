"""
docket.registry
===============

CRUD and query surface over :class:`~docket.models.ComplianceItem`
records in the ``compliance`` collection.

Single-item calls raise :class:`~docket.errors.NotFound` or
:class:`~docket.errors.StorageFailure`. Full scans are capped at
``settings.max_scan_records`` and skip records that cannot be read, so
one corrupt record never hides the rest. Every listing is sorted by due
date with undated items last.
"""

from __future__ import annotations

import calendar
import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .directory import ClientDirectory
from .errors import NotFound, StorageFailure, ValidationError
from .lifecycle import advance_status
from .models import (
    ComplianceItem,
    ComplianceSource,
    ComplianceStatus,
    parse_date,
    parse_datetime,
    sort_by_due_date,
    utcnow,
)
from .reports import BulkUpdateReport
from .settings import COMPLIANCE_COLLECTION, Settings, settings as default_settings
from .store import RecordStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "client_id", "service_id", "type", "description", "due_date",
    "status", "source", "reference", "period",
}
REQUIRED_FIELDS = ("client_id", "type", "description")

StatusFilter = Union[ComplianceStatus, str, Sequence[Union[ComplianceStatus, str]], None]


def _coerce(name: str, value: Any) -> Any:
    """Convert one incoming field value to its model type."""
    try:
        if name == "due_date":
            return parse_date(value)
        if name == "status":
            return ComplianceStatus(value)
        if name == "source":
            return ComplianceSource(value)
    except ValueError as exc:
        raise ValidationError(f"invalid {name}: {value!r}") from exc
    return value


class ComplianceRegistry:
    """
    Store-backed registry of compliance items.

    Parameters
    ----------
    store : RecordStore
        Where items are persisted.
    clients : ClientDirectory | None
        Needed only for portfolio-scoped queries.
    config : Settings
        Scan caps (``max_scan_records``, ``duplicate_check_limit``).
    """

    def __init__(
        self,
        store: RecordStore,
        clients: Optional[ClientDirectory] = None,
        config: Settings = default_settings,
    ) -> None:
        self._store = store
        self._clients = clients
        self._config = config

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _read(self, ident: str) -> Optional[ComplianceItem]:
        try:
            rec = self._store.get(COMPLIANCE_COLLECTION, ident)
        except Exception as exc:
            raise StorageFailure(f"failed to read compliance item {ident}: {exc}") from exc
        if rec is None:
            return None
        try:
            return ComplianceItem.from_record(rec)
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageFailure(f"unreadable compliance item {ident}: {exc}") from exc

    def _write(self, item: ComplianceItem) -> None:
        try:
            self._store.put(COMPLIANCE_COLLECTION, item.id, item.to_record())
        except Exception as exc:
            raise StorageFailure(f"failed to write compliance item {item.id}: {exc}") from exc

    def _ids(self, limit: int, purpose: str) -> List[str]:
        try:
            ids = self._store.list_ids(COMPLIANCE_COLLECTION)
        except Exception as exc:
            raise StorageFailure(f"failed to list compliance items: {exc}") from exc
        if len(ids) > limit:
            logger.warning(
                f"Too many compliance records ({len(ids)}) for {purpose}; "
                f"processing only the first {limit}. Consider running cleanup."
            )
            return ids[:limit]
        return ids

    def _load(self, ids: Iterable[str], predicate: Optional[Callable[[ComplianceItem], bool]] = None) -> List[ComplianceItem]:
        items: List[ComplianceItem] = []
        errors = 0
        for ident in ids:
            try:
                item = self._read(ident)
            except Exception as exc:
                logger.warning(f"Failed to read compliance item {ident}: {exc}")
                errors += 1
                continue
            if item is None:
                continue
            if predicate is None or predicate(item):
                items.append(item)
        if errors:
            logger.warning(f"Skipped {errors} unreadable compliance records")
        return items

    @staticmethod
    def _build(data: Mapping[str, Any]) -> ComplianceItem:
        missing = [k for k in REQUIRED_FIELDS if not data.get(k)]
        if missing:
            raise ValidationError(f"missing required field(s): {', '.join(missing)}")
        unknown = set(data) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"unknown field(s): {', '.join(sorted(unknown))}")

        fields = {k: _coerce(k, v) for k, v in data.items() if v is not None}
        fields.setdefault("status", ComplianceStatus.PENDING)
        fields.setdefault("source", ComplianceSource.MANUAL)
        return ComplianceItem(**fields)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    def add(self, item: ComplianceItem) -> ComplianceItem:
        """Persist an already-built item."""
        self._write(item)
        logger.info(f"Created compliance item {item.id} for client {item.client_id}")
        return item

    def create(self, data: Mapping[str, Any]) -> ComplianceItem:
        return self.add(self._build(data))

    def create_manual(self, data: Mapping[str, Any]) -> ComplianceItem:
        """Operator-created item; source is always MANUAL."""
        return self.create({**data, "source": ComplianceSource.MANUAL})

    def create_unless_live(self, item: ComplianceItem) -> Optional[ComplianceItem]:
        """
        Persist *item* unless a non-FILED item with the same
        (client, service, type) exists. Returns ``None`` when skipped.

        Uses the store's ``put_if_absent`` when it has one, which makes the
        check and the write a single step.
        """
        key = (item.client_id, item.service_id, str(item.type))

        def conflicts(rec: Mapping[str, Any]) -> bool:
            return (
                (rec.get("client_id"), rec.get("service_id"), rec.get("type")) == key
                and rec.get("status") != ComplianceStatus.FILED.value
            )

        put_if_absent = getattr(self._store, "put_if_absent", None)
        if callable(put_if_absent):
            try:
                written = put_if_absent(COMPLIANCE_COLLECTION, item.id, item.to_record(), conflicts)
            except Exception as exc:
                raise StorageFailure(f"failed to write compliance item {item.id}: {exc}") from exc
            if not written:
                return None
            logger.info(f"Created compliance item {item.id} for client {item.client_id}")
            return item

        if self.find_live(item.client_id, item.service_id, str(item.type)):
            return None
        return self.add(item)

    def get(self, ident: str) -> ComplianceItem:
        item = self._read(ident)
        if item is None:
            raise NotFound("Compliance item", ident)
        return item

    def update(
        self,
        ident: str,
        changes: Mapping[str, Any],
        updated_at: Optional[datetime] = None,
    ) -> ComplianceItem:
        """
        Apply *changes* and persist. ``id`` and ``created_at`` never change;
        ``updated_at`` is set to *updated_at* or now.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"cannot update field(s): {', '.join(sorted(unknown))}")
        cleared = [k for k in REQUIRED_FIELDS if k in changes and not changes[k]]
        if cleared:
            raise ValidationError(f"required field(s) cannot be empty: {', '.join(cleared)}")

        item = self.get(ident)
        for name, value in changes.items():
            setattr(item, name, _coerce(name, value))
        item.updated_at = parse_datetime(updated_at) if updated_at else utcnow()
        self._write(item)
        logger.info(f"Updated compliance item {ident}")
        return item

    def delete(self, ident: str) -> None:
        try:
            self._store.delete(COMPLIANCE_COLLECTION, ident)
        except KeyError:
            raise NotFound("Compliance item", ident) from None
        except Exception as exc:
            raise StorageFailure(f"failed to delete compliance item {ident}: {exc}") from exc
        logger.info(f"Deleted compliance item {ident}")

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------
    def transition(
        self, ident: str, new_status: ComplianceStatus, at: Optional[datetime] = None
    ) -> ComplianceItem:
        item = self.get(ident)
        advance_status(item, new_status)
        item.updated_at = parse_datetime(at) if at else utcnow()
        self._write(item)
        logger.info(f"Compliance item {ident} is now {new_status.name}")
        return item

    def mark_filed(self, ident: str, filed_at: Optional[datetime] = None) -> ComplianceItem:
        return self.transition(ident, ComplianceStatus.FILED, at=filed_at)

    def mark_overdue(self, ident: str) -> ComplianceItem:
        return self.transition(ident, ComplianceStatus.OVERDUE)

    def mark_exempt(self, ident: str) -> ComplianceItem:
        return self.transition(ident, ComplianceStatus.EXEMPT)

    def bulk_update_status(self, ids: Sequence[str], status: ComplianceStatus) -> BulkUpdateReport:
        """Operator override of many items; failures are reported, not raised."""
        status = ComplianceStatus(status)
        report = BulkUpdateReport(requested=len(ids))
        for ident in ids:
            try:
                self.update(ident, {"status": status})
                report.updated.append(ident)
            except Exception as exc:
                msg = f"Failed to update {ident}: {exc}"
                logger.error(msg)
                report.errors.append(msg)
        logger.info(f"Bulk status update to {status.name}: {len(report.updated)} of {len(ids)} updated")
        return report

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def all_items(self) -> List[ComplianceItem]:
        ids = self._ids(self._config.max_scan_records, "full scan")
        items = self._load(ids)
        logger.debug(f"Loaded {len(items)} compliance items from {len(ids)} records")
        return sort_by_due_date(items)

    def _where(self, predicate: Callable[[ComplianceItem], bool]) -> List[ComplianceItem]:
        return [i for i in self.all_items() if predicate(i)]

    def by_client(self, client_id: str) -> List[ComplianceItem]:
        return self._where(lambda i: i.client_id == client_id)

    def by_service(self, service_id: str) -> List[ComplianceItem]:
        return self._where(lambda i: i.service_id == service_id)

    def by_type(self, compliance_type: str) -> List[ComplianceItem]:
        return self._where(lambda i: i.type == compliance_type)

    def by_source(self, source: Union[ComplianceSource, str]) -> List[ComplianceItem]:
        source = ComplianceSource(source)
        return self._where(lambda i: i.source == source)

    def by_date_range(self, start: date, end: date) -> List[ComplianceItem]:
        return self._where(lambda i: i.due_date is not None and start <= i.due_date <= end)

    def overdue(self, today: Optional[date] = None) -> List[ComplianceItem]:
        """PENDING items whose due date has passed."""
        today = today or date.today()
        return self._where(lambda i: i.status == ComplianceStatus.PENDING and i.is_past_due(today))

    def past_due(self, today: Optional[date] = None) -> List[ComplianceItem]:
        """PENDING or OVERDUE items whose due date has passed."""
        today = today or date.today()
        live = (ComplianceStatus.PENDING, ComplianceStatus.OVERDUE)
        return self._where(lambda i: i.status in live and i.is_past_due(today))

    def upcoming(self, days_ahead: Optional[int] = None, today: Optional[date] = None) -> List[ComplianceItem]:
        """PENDING items due between today and *days_ahead* days from now."""
        today = today or date.today()
        if days_ahead is None:
            days_ahead = self._config.upcoming_window_days
        horizon = today + timedelta(days=days_ahead)
        return self._where(
            lambda i: i.status == ComplianceStatus.PENDING
            and i.due_date is not None
            and today <= i.due_date <= horizon
        )

    def portfolio_client_ids(self, portfolio_code: int) -> set:
        if self._clients is None:
            raise RuntimeError("portfolio queries need a ClientDirectory")
        return {c.id for c in self._clients.list_active_by_portfolio(portfolio_code)}

    def find_all(
        self,
        client_id: Optional[str] = None,
        service_id: Optional[str] = None,
        status: StatusFilter = None,
        source: Optional[str] = None,
        compliance_type: Optional[str] = None,
        due_from: Optional[date] = None,
        due_to: Optional[date] = None,
        portfolio_code: Optional[int] = None,
    ) -> List[ComplianceItem]:
        """Filtered listing; every given filter must match."""
        items = self.all_items()

        if portfolio_code:
            allowed = self.portfolio_client_ids(portfolio_code)
            items = [i for i in items if i.client_id in allowed]
        if client_id:
            items = [i for i in items if i.client_id == client_id]
        if service_id:
            items = [i for i in items if i.service_id == service_id]
        if status:
            wanted = [status] if isinstance(status, str) else list(status)
            statuses = {ComplianceStatus(s) for s in wanted}
            items = [i for i in items if i.status in statuses]
        if source:
            items = [i for i in items if i.source == ComplianceSource(source)]
        if compliance_type:
            items = [i for i in items if i.type == compliance_type]
        if due_from:
            items = [i for i in items if i.due_date is not None and i.due_date >= due_from]
        if due_to:
            items = [i for i in items if i.due_date is not None and i.due_date <= due_to]
        return items

    def find_live(self, client_id: str, service_id: Optional[str], compliance_type: str) -> List[ComplianceItem]:
        """Non-FILED items for one (client, service, type) triple."""
        ids = self._ids(self._config.duplicate_check_limit, "duplicate check")
        return self._load(
            ids,
            lambda i: i.client_id == client_id
            and i.service_id == service_id
            and i.type == compliance_type
            and i.status != ComplianceStatus.FILED,
        )

    def statistics(self, portfolio_code: Optional[int] = None, today: Optional[date] = None) -> Dict[str, Any]:
        today = today or date.today()
        items = self.find_all(portfolio_code=portfolio_code)

        month_end = date(today.year, today.month, calendar.monthrange(today.year, today.month)[1])
        overdue = [i for i in items if i.status == ComplianceStatus.PENDING and i.is_past_due(today)]
        due_this_month = [
            i for i in items
            if i.status == ComplianceStatus.PENDING
            and i.due_date is not None
            and today <= i.due_date <= month_end
        ]

        by_status = Counter(i.status.value for i in items)
        by_type = Counter(str(i.type) for i in items)
        by_source = Counter(i.source.value for i in items)

        return {
            "total": len(items),
            "pending": by_status.get("PENDING", 0),
            "filed": by_status.get("FILED", 0),
            "overdue": len(overdue),
            "due_this_month": len(due_this_month),
            "by_status": dict(by_status),
            "by_type": dict(by_type),
            "by_source": dict(by_source),
            "overdue_count": len(overdue),
            "upcoming_count": len(due_this_month),
        }
