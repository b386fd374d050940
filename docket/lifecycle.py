"""
docket.lifecycle
================

State-transition guard for a :class:`docket.models.ComplianceItem`.

A tiny finite-state-machine describes which statuses are legal successors
of each status. FILED and EXEMPT have no successors: changing them is an
operator override that goes through a plain update, not through
:pyfunc:`advance_status`.
"""

from __future__ import annotations

from .errors import IllegalTransition
from .models import ComplianceItem, ComplianceStatus

# ---------------------------------------------------------------------
# Allowed transitions: source status → set[valid target statuses]
# ---------------------------------------------------------------------
RULES = {
    ComplianceStatus.PENDING: {
        ComplianceStatus.OVERDUE,
        ComplianceStatus.FILED,
        ComplianceStatus.EXEMPT,
    },
    ComplianceStatus.OVERDUE: {ComplianceStatus.FILED},
}


def can_transition(current: ComplianceStatus, new_status: ComplianceStatus) -> bool:
    return new_status in RULES.get(current, set())


def advance_status(item: ComplianceItem, new_status: ComplianceStatus) -> None:
    """
    Change :pyattr:`item.status` if the transition is legal, otherwise raise
    :class:`~docket.errors.IllegalTransition`.

    Examples
    --------
    >>> i = ComplianceItem("C1", "CT600", "Acme - Corporation Tax Return")
    >>> advance_status(i, ComplianceStatus.OVERDUE)
    >>> advance_status(i, ComplianceStatus.EXEMPT)
    Traceback (most recent call last):
        ...
    docket.errors.IllegalTransition: illegal transition OVERDUE → EXEMPT
    """
    current = item.status
    if not can_transition(current, new_status):
        raise IllegalTransition(f"illegal transition {current.name} → {new_status.name}")
    item.status = new_status
