"""
docket.settings
===============

Configuration settings for the Docket compliance engine.

This module provides centralized configuration options used across the
engine, the HTTP layer and the scheduled jobs. Defaults can be overridden
via environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("DOCKET_DB_FILE", BASE_DIR / "docket.db")
DB_URL = os.environ.get("DOCKET_DB_URL", f"sqlite:///{DB_FILE}")
DB_ECHO = os.environ.get("DOCKET_DB_ECHO", "False").lower() == "true"

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("DOCKET_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("DOCKET_API_PORT", "8000"))
API_DEBUG = os.environ.get("DOCKET_API_DEBUG", "False").lower() == "true"

# Record store collections
# ---------------------------------------------------------------------------
COMPLIANCE_COLLECTION = "compliance"
TASKS_COLLECTION = "tasks"
CLIENTS_COLLECTION = "clients"
SERVICES_COLLECTION = "services"


# ---------------------------------------------------------------------------
# Pydantic settings model for engine tuning and scheduling
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Pydantic model for engine settings, loaded from environment variables."""

    # Scan caps
    max_scan_records: int = Field(2000, description="Max compliance records read per full scan")
    duplicate_check_limit: int = Field(1000, description="Max records checked when looking for a live duplicate")

    # Task generation / priority thresholds (days until due)
    upcoming_window_days: int = Field(30, description="Default look-ahead window for upcoming items")
    urgent_days: int = Field(0, description="Due within this many days (or past) -> URGENT")
    high_days: int = Field(7, description="Due within this many days -> HIGH")
    medium_days: int = Field(30, description="Due within this many days -> MEDIUM")

    # Scheduler
    broker_url: str = Field("redis://localhost:6379/0", description="Celery broker / result backend URL")
    timezone: str = Field("Europe/London", description="Timezone the beat schedule runs in")
    daily_run_hour: int = Field(9, description="Hour of the daily task-generation run")
    business_hours: str = Field("9-18", description="Crontab hour range for the hourly overdue check")
    business_days: str = Field("mon-fri", description="Crontab day-of-week range for the hourly overdue check")
    celery_always_eager: bool = Field(False, description="Run Celery tasks in-process (development)")

    log_level: str = Field("INFO", description="Root log level for the CLI and worker")

    class Config:
        """Configuration for the settings model."""
        env_prefix = "DOCKET_"
        env_file = ".env"  # load from .env file if present
        case_sensitive = False
        extra = "ignore"


# Initialize settings
settings = Settings()
