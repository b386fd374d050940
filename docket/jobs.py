"""
docket.jobs
===========

Celery task definitions for the scheduled and on-demand compliance runs.

Each task builds an engine over a fresh store session, runs one engine
operation, and returns its report as a plain dict (JSON result backend).
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from celery import shared_task

from docket.cleanup import cleanup_duplicates, cleanup_invalid_clients
from docket.db import create_all
from docket.engine import ComplianceEngine, build_engine

logger = logging.getLogger(__name__)


def get_engine() -> ComplianceEngine:
    create_all()
    return build_engine()


@contextmanager
def engine_session() -> Iterator[ComplianceEngine]:
    engine = get_engine()
    try:
        yield engine
    finally:
        close = getattr(engine.store, "close", None)
        if callable(close):
            close()


# ===========================================
# SCHEDULED
# ===========================================

@shared_task(name="docket.jobs.daily_compliance_run_task")
def daily_compliance_run_task() -> Dict[str, Any]:
    """Tasks for upcoming and overdue items, then escalation."""
    with engine_session() as engine:
        return engine.scheduler.daily_run().to_dict()


@shared_task(name="docket.jobs.hourly_overdue_check_task")
def hourly_overdue_check_task() -> Dict[str, Any]:
    """Bump open tasks of overdue items to URGENT."""
    logger.info("Checking for overdue compliance items")
    with engine_session() as engine:
        return engine.scheduler.hourly_check()


# ===========================================
# ON DEMAND
# ===========================================

@shared_task(name="docket.jobs.reconcile_task")
def reconcile_task() -> Dict[str, Any]:
    with engine_session() as engine:
        return engine.reconciler.reconcile_from_directory().to_dict()


@shared_task(name="docket.jobs.cleanup_task")
def cleanup_task() -> Dict[str, Any]:
    """Invalid-client cleanup followed by duplicate cleanup."""
    with engine_session() as engine:
        return {
            "invalid_clients": cleanup_invalid_clients(engine.registry, engine.clients).to_dict(),
            "duplicates": cleanup_duplicates(engine.registry).to_dict(),
        }
