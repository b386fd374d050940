"""
Pytest configuration: make sure `import docket` and `import api` work
regardless of where pytest is invoked.

It prepends the project root (one directory above *tests/*) to
``sys.path`` **before** any tests are collected, and provides a fresh
in-memory engine plus a fixed "today" for date-sensitive tests.
"""

import os
import sys
from datetime import date
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# headless chart rendering
os.environ.setdefault("MPLBACKEND", "Agg")

from docket.engine import build_engine  # noqa: E402
from docket.models import Client, Service  # noqa: E402
from docket.store import MemoryRecordStore  # noqa: E402

TODAY = date(2025, 6, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def engine():
    """Engine over an empty in-memory store."""
    return build_engine(MemoryRecordStore())


@pytest.fixture
def acme(engine):
    """One active client with accounts and VAT services."""
    engine.clients.add(Client("c1", "Acme Ltd", ref="ACME", portfolio_code=7, registered_number="01234567"))
    engine.services.add(Service("s1", "c1", "Annual Accounts"))
    engine.services.add(Service("s2", "c1", "VAT Returns", next_due=date(2025, 7, 7)))
    return engine
