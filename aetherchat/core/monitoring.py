# aetherchat/core/monitoring.py
"""Health endpoints: process liveness, database, Redis and the reminder backlog"""
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from aetherchat.config.database import get_db
from aetherchat.config.redis import get_redis
from aetherchat.models.appointment_reminder import AppointmentReminder
from aetherchat.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

health_router = APIRouter()

# Pending reminders older than this mean the dispatch job is not running
REMINDER_BACKLOG_GRACE = timedelta(minutes=15)


def _check_database(db: Session) -> str:
    db.execute(text("SELECT 1"))
    return "healthy"


async def _check_redis() -> str:
    client = await get_redis()
    try:
        await client.ping()
    finally:
        await client.aclose()
    return "healthy"


def _check_reminder_backlog(db: Session) -> str:
    overdue = db.query(AppointmentReminder).filter(
        AppointmentReminder.status == "pending",
        AppointmentReminder.scheduled_for < utcnow() - REMINDER_BACKLOG_GRACE,
    ).count()
    return "healthy" if overdue == 0 else f"degraded: {overdue} overdue reminders"


@health_router.get("")
async def health_check():
    return {"status": "healthy", "service": "aetherchat-api"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Check each dependency; overall is degraded when any check is not healthy"""
    checks = {"api": "healthy"}

    for name, check in (("database", _check_database), ("reminders", _check_reminder_backlog)):
        try:
            checks[name] = check(db)
        except Exception as e:
            logger.warning(f"{name} health check failed: {e}")
            checks[name] = f"unhealthy: {e}"

    try:
        checks["redis"] = await _check_redis()
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        checks["redis"] = f"unhealthy: {e}"

    checks["overall"] = "healthy" if all(v == "healthy" for v in checks.values()) else "degraded"
    return checks
