# ===== aetherchat/tasks/reminder_tasks.py =====
import logging

from aetherchat.config.celery_config import celery_app
from aetherchat.config.database import task_session
from aetherchat.services.registry import build_registry
from aetherchat.services.reminder.reminder_service import ReminderService

logger = logging.getLogger(__name__)


def get_task_registry():
    """Registry built by the worker at process start, or a fresh one"""
    registry = getattr(celery_app, "registry", None)
    if registry is None:
        registry = build_registry()
        celery_app.registry = registry
    return registry


@celery_app.task(name="tasks.dispatch_due_reminders", bind=True, max_retries=3)
def dispatch_due_reminders(self):
    """Send every due pending reminder (appointments and package expiry)"""
    try:
        with task_session() as db:
            stats = ReminderService.process_due_reminders(db, get_task_registry().notifier)
    except Exception as exc:
        logger.error(f"Reminder dispatch failed: {exc}")
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    if stats["sent"] or stats["failed"]:
        logger.info(f"Reminder dispatch: {stats}")
    return {"status": "success", **stats}
