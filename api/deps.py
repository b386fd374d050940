"""
api.deps
========

FastAPI dependency providers.

`get_engine` returns one process-wide :class:`~docket.engine.ComplianceEngine`
over the persistent SQLite store. Tests swap it through
``app.dependency_overrides``.
"""

from functools import lru_cache

from docket.db import create_all
from docket.engine import ComplianceEngine, build_engine


@lru_cache
def get_engine() -> ComplianceEngine:
    """Singleton DB-backed engine (persists across requests)."""
    create_all()
    return build_engine()
