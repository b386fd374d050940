"""
docket.due_dates
================

Default due dates for newly derived obligations.

A service's own ``next_due`` always wins. The fallbacks below are coarse
placeholders meant to be overwritten once the real filing schedule is
known; they are not statutory deadlines.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Optional

from .models import ComplianceType, Service


def quarter_end(today: date) -> date:
    """Last day of the calendar quarter containing *today*."""
    month = ((today.month - 1) // 3 + 1) * 3
    return date(today.year, month, calendar.monthrange(today.year, month)[1])


def default_due_date(compliance_type: str, today: Optional[date] = None) -> date:
    today = today or date.today()
    year = today.year

    if compliance_type in (ComplianceType.ANNUAL_ACCOUNTS, ComplianceType.CT600):
        return date(year + 1, 12, 31)
    if compliance_type == ComplianceType.CONFIRMATION_STATEMENT:
        return date(year, 12, 31)
    if compliance_type == ComplianceType.VAT_RETURN:
        return quarter_end(today)
    return date(year, 12, 31)


def due_date_for_service(
    service: Service, compliance_type: str, today: Optional[date] = None
) -> date:
    """Return ``service.next_due`` if set, else the type's default."""
    if service.next_due:
        return service.next_due
    return default_due_date(compliance_type, today)
