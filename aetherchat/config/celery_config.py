# aetherchat/config/celery_config.py
"""Celery application and periodic job schedule"""
from celery import Celery
from celery.schedules import crontab

from aetherchat.config.settings import get_settings

TASK_MODULES = [
    "aetherchat.tasks.reminder_tasks",
    "aetherchat.tasks.session_tasks",
]


def create_celery_app() -> Celery:
    """Build the Celery app with Redis broker and the beat schedule"""
    settings = get_settings()

    app = Celery(
        "aetherchat",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=TASK_MODULES,
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone=settings.DEFAULT_TIMEZONE,
        enable_utc=True,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        beat_schedule={
            "dispatch-due-reminders": {
                "task": "tasks.dispatch_due_reminders",
                "schedule": float(settings.REMINDER_DISPATCH_INTERVAL_SECONDS),
            },
            "end-of-day-session-sweep": {
                "task": "tasks.process_end_of_day_sessions",
                "schedule": crontab(
                    hour=settings.END_OF_DAY_HOUR,
                    minute=settings.END_OF_DAY_MINUTE,
                ),
            },
        },
    )
    return app


celery_app = create_celery_app()
