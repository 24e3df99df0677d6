# aetherchat/utils/datetime_utils.py
"""Datetime helpers shared by services"""
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from aetherchat.config.settings import get_settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC datetime; naive values are taken to already be UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@lru_cache()
def venue_timezone() -> ZoneInfo:
    """Timezone the venue's dates and HH:MM slots are expressed in"""
    return ZoneInfo(get_settings().DEFAULT_TIMEZONE)


def venue_now() -> datetime:
    return datetime.now(venue_timezone())
