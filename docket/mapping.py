"""
docket.mapping
==============

Service kind → compliance obligation rules.

Services are named informally by staff, so classification is two-tier:

1. an exact lookup in :data:`KIND_TABLE`, a versioned table of known
   catalogue names → obligation categories;
2. a keyword fallback over the lower-cased kind, where every matching
   keyword group contributes its category.

A kind that matches neither tier produces no obligation. Adding a service
name is an edit to :data:`KIND_TABLE` (bump :data:`KIND_TABLE_VERSION`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from .models import ComplianceSource, ComplianceType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComplianceRule:
    """One obligation a service gives rise to."""
    type: ComplianceType
    description: str
    source: ComplianceSource


class ObligationCategory(Enum):
    """Closed set of obligation families a service can belong to."""
    ACCOUNTS = "accounts"
    SECRETARIAL = "secretarial"
    CORPORATION_TAX = "corporation_tax"
    VAT = "vat"
    SELF_ASSESSMENT = "self_assessment"
    PAYROLL = "payroll"


RULES_BY_CATEGORY: Dict[ObligationCategory, Tuple[ComplianceRule, ...]] = {
    ObligationCategory.ACCOUNTS: (
        ComplianceRule(ComplianceType.ANNUAL_ACCOUNTS, "Annual Accounts Filing", ComplianceSource.COMPANIES_HOUSE),
    ),
    ObligationCategory.SECRETARIAL: (
        ComplianceRule(ComplianceType.CONFIRMATION_STATEMENT, "Confirmation Statement Filing", ComplianceSource.COMPANIES_HOUSE),
    ),
    ObligationCategory.CORPORATION_TAX: (
        ComplianceRule(ComplianceType.CT600, "Corporation Tax Return", ComplianceSource.HMRC),
    ),
    ObligationCategory.VAT: (
        ComplianceRule(ComplianceType.VAT_RETURN, "VAT Return", ComplianceSource.HMRC),
    ),
    ObligationCategory.SELF_ASSESSMENT: (
        ComplianceRule(ComplianceType.SA100, "Self Assessment Tax Return", ComplianceSource.HMRC),
    ),
    ObligationCategory.PAYROLL: (
        ComplianceRule(ComplianceType.RTI_SUBMISSION, "Real Time Information Submission", ComplianceSource.HMRC),
    ),
}

# ---------------------------------------------------------------------
# Exact names from the service catalogue
# ---------------------------------------------------------------------
KIND_TABLE_VERSION = "2024.1"

KIND_TABLE: Dict[str, Tuple[ObligationCategory, ...]] = {
    "Annual Accounts": (ObligationCategory.ACCOUNTS,),
    "Accounts Preparation": (ObligationCategory.ACCOUNTS,),
    "Statutory Accounts": (ObligationCategory.ACCOUNTS,),
    "Company Secretarial": (ObligationCategory.SECRETARIAL,),
    "Confirmation Statement": (ObligationCategory.SECRETARIAL,),
    "Corporation Tax": (ObligationCategory.CORPORATION_TAX,),
    "VAT Returns": (ObligationCategory.VAT,),
    "Self Assessment": (ObligationCategory.SELF_ASSESSMENT,),
    "Payroll": (ObligationCategory.PAYROLL,),
}

# Ordered: a kind like "Accounts & VAT" yields accounts first, then VAT.
KEYWORD_RULES: Tuple[Tuple[Tuple[str, ...], ObligationCategory], ...] = (
    (("account",), ObligationCategory.ACCOUNTS),
    (("confirmation", "secretarial"), ObligationCategory.SECRETARIAL),
    (("corporation", "ct600"), ObligationCategory.CORPORATION_TAX),
    (("vat",), ObligationCategory.VAT),
)


def classify(kind: str) -> List[ObligationCategory]:
    """Return the obligation categories for a service *kind* (maybe empty)."""
    if not kind:
        return []

    exact = KIND_TABLE.get(kind)
    if exact is not None:
        return list(exact)

    lowered = kind.lower()
    matches = [
        category
        for keywords, category in KEYWORD_RULES
        if any(word in lowered for word in keywords)
    ]
    if matches:
        logger.debug(f"Service kind '{kind}' matched by keyword: {[c.value for c in matches]}")
    return matches


def compliance_types_for_service(kind: str) -> List[ComplianceRule]:
    """Expand :func:`classify` into the concrete rules to track."""
    rules: List[ComplianceRule] = []
    for category in classify(kind):
        rules.extend(RULES_BY_CATEGORY[category])
    return rules
