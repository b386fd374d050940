"""
tests/test_due_dates.py
=======================

Default due-date policy.
"""

from datetime import date

import pytest

from docket.due_dates import default_due_date, due_date_for_service, quarter_end
from docket.models import ComplianceType, Service


@pytest.mark.parametrize(
    "ctype, expected",
    [
        (ComplianceType.ANNUAL_ACCOUNTS, date(2026, 12, 31)),
        (ComplianceType.CT600, date(2026, 12, 31)),
        (ComplianceType.CONFIRMATION_STATEMENT, date(2025, 12, 31)),
        (ComplianceType.VAT_RETURN, date(2025, 6, 30)),
        ("SA100", date(2025, 12, 31)),
    ],
)
def test_defaults(ctype, expected, today):
    assert default_due_date(ctype, today) == expected


def test_quarter_end():
    assert quarter_end(date(2025, 2, 10)) == date(2025, 3, 31)
    assert quarter_end(date(2025, 11, 2)) == date(2025, 12, 31)
    assert quarter_end(date(2025, 9, 30)) == date(2025, 9, 30)


def test_service_next_due_wins(today):
    svc = Service("s1", "c1", "Annual Accounts", next_due=date(2025, 9, 30))
    assert due_date_for_service(svc, "ANNUAL_ACCOUNTS", today) == date(2025, 9, 30)
    svc.next_due = None
    assert due_date_for_service(svc, "ANNUAL_ACCOUNTS", today) == date(2026, 12, 31)
