"""
docket.celery_app
=================

Celery configuration for the recurring compliance triggers.

Beat fires two entries:

* ``daily-compliance-run`` – every day at ``settings.daily_run_hour``;
* ``hourly-overdue-check`` – on the hour during business hours,
  Monday to Friday.

Run a single process with ``celery -A docket.celery_app worker -B``.
"""

from celery import Celery
from celery.schedules import crontab

from docket.settings import settings

celery_app = Celery(
    "docket",
    broker=settings.broker_url,
    backend=settings.broker_url,
    include=["docket.jobs"],
)

celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone=settings.timezone,
    enable_utc=True,

    # One scheduler, one worker process
    worker_concurrency=1,
    worker_prefetch_multiplier=1,
    task_time_limit=600,
    task_soft_time_limit=540,
    task_always_eager=settings.celery_always_eager,

    result_expires=86400,  # 24 hours

    beat_schedule={
        "daily-compliance-run": {
            "task": "docket.jobs.daily_compliance_run_task",
            "schedule": crontab(hour=settings.daily_run_hour, minute=0),
        },
        "hourly-overdue-check": {
            "task": "docket.jobs.hourly_overdue_check_task",
            "schedule": crontab(
                minute=0,
                hour=settings.business_hours,
                day_of_week=settings.business_days,
            ),
        },
    },
)
