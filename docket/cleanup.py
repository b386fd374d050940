"""
docket.cleanup
==============

Batch jobs that restore the referential and uniqueness rules after the
fact. Both are safe to re-run and never stop on a single failed delete.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Tuple

from .directory import ClientDirectory
from .models import ComplianceItem
from .registry import ComplianceRegistry
from .reports import DuplicateReport, InvalidClientReport

logger = logging.getLogger(__name__)


def cleanup_invalid_clients(registry: ComplianceRegistry, clients: ClientDirectory) -> InvalidClientReport:
    """Delete items whose client id names no known client."""
    report = InvalidClientReport()
    try:
        items = registry.all_items()
        valid_ids = clients.known_ids()
    except Exception as exc:
        logger.error(f"Error during cleanup: {exc}")
        report.errors.append(f"Cleanup failed: {exc}")
        return report

    report.total_items = len(items)
    logger.info(f"Checking {len(items)} compliance items against {len(valid_ids)} known clients")

    for item in items:
        if item.client_id in valid_ids:
            continue
        report.invalid_items += 1
        logger.info(f"Removing compliance item {item.id} with invalid client ID: {item.client_id}")
        try:
            registry.delete(item.id)
            report.removed_items += 1
        except Exception as exc:
            report.errors.append(f"Failed to delete {item.id}: {exc}")

    logger.info(f"Cleanup complete: {report.removed_items} items removed, {len(report.errors)} errors")
    return report


def cleanup_duplicates(registry: ComplianceRegistry) -> DuplicateReport:
    """Keep only the newest item of every (client, service, type) group."""
    report = DuplicateReport()
    try:
        items = registry.all_items()
    except Exception as exc:
        logger.error(f"Cleanup duplicates error: {exc}")
        report.errors.append(f"Overall cleanup error: {exc}")
        return report

    report.total_items = len(items)
    groups: Dict[Tuple, List[ComplianceItem]] = defaultdict(list)
    for item in items:
        groups[item.dedup_key].append(item)

    for key, members in groups.items():
        if len(members) < 2:
            continue
        report.duplicates_found += len(members) - 1
        members.sort(key=lambda i: i.created_at, reverse=True)
        for stale in members[1:]:
            try:
                registry.delete(stale.id)
                report.duplicates_removed += 1
                logger.info(f"Removed duplicate compliance item: {stale.id}")
            except Exception as exc:
                report.errors.append(f"Failed to remove duplicate {stale.id}: {exc}")

    logger.info(
        f"Cleanup complete: {report.duplicates_removed} duplicates removed, {len(report.errors)} errors"
    )
    return report
