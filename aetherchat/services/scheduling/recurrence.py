# aetherchat/services/scheduling/recurrence.py
"""Occurrence dates for recurring appointments"""
import calendar
from datetime import date, timedelta
from typing import List

RECURRENCE_TYPES = ("none", "daily", "weekly", "monthly")


def add_months(start: date, months: int) -> date:
    """Same day of month, clamped to the target month's last day"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def expand_recurrence(start: date, recurrence_type: str = "none", count: int = 1) -> List[date]:
    if recurrence_type not in RECURRENCE_TYPES:
        raise ValueError(f"Unknown recurrence type: {recurrence_type}")
    if count < 1:
        raise ValueError("Recurrence count must be at least 1")

    if recurrence_type == "none":
        return [start]
    if recurrence_type == "daily":
        return [start + timedelta(days=i) for i in range(count)]
    if recurrence_type == "weekly":
        return [start + timedelta(weeks=i) for i in range(count)]
    return [add_months(start, i) for i in range(count)]
