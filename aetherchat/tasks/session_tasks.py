# ===== aetherchat/tasks/session_tasks.py =====
import logging
from typing import Optional

from aetherchat.config.celery_config import celery_app
from aetherchat.config.database import task_session
from aetherchat.services.scheduling.time_slots import parse_date
from aetherchat.services.session.session_usage_service import SessionUsageService

logger = logging.getLogger(__name__)


@celery_app.task(name="tasks.process_end_of_day_sessions", bind=True, max_retries=3)
def process_end_of_day_sessions(self, day: Optional[str] = None):
    """Mark the day's attended appointments as used; `day` defaults to today (venue time)"""
    target = parse_date(day) if day else None
    try:
        with task_session() as db:
            stats = SessionUsageService.process_end_of_day(db, target)
    except Exception as exc:
        logger.error(f"End of day session processing failed: {exc}")
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    return {"status": "success", **stats}
