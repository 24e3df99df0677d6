# aetherchat/services/reminder/reminder_scheduler.py
"""
Pure computation of reminder times.

Nothing here touches the database or sends anything; the results are candidate
ReminderRecord objects that the reminder service persists and later dispatches.
"""
import logging
import re
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Union

from aetherchat.schemas.scheduling import AppointmentReminderSettings, ReminderRecord
from aetherchat.services.scheduling.time_slots import parse_date, time_of_day
from aetherchat.utils.datetime_utils import venue_timezone

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_REMINDER_DAYS_BEFORE = 3

_IF_BLOCK_RE = re.compile(r"\{\{#if (\w+)\}\}(.*?)\{\{/if\}\}", re.DOTALL)
_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def reminder_settings_from_app_settings(settings) -> AppointmentReminderSettings:
    """Build reminder settings from the AppSettings row, defaults for missing values"""
    if settings is None:
        return AppointmentReminderSettings()

    values = {
        "enabled": settings.appointment_reminder_enabled,
        "reminder_time": settings.appointment_reminder_time,
        "days_before": settings.appointment_reminder_days_before,
        "message_template": settings.appointment_reminder_message_template,
    }
    return AppointmentReminderSettings(**{k: v for k, v in values.items() if v is not None})


def _appointment_date(appointment) -> date:
    value = appointment.date
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)


def compute_appointment_reminder(
        appointment,
        settings: AppointmentReminderSettings,
        tz: Optional[tzinfo] = None
) -> Optional[ReminderRecord]:
    """
    Reminder fires days_before days ahead of the appointment date, at
    reminder_time on that day (venue local time). None when reminders are off.
    """
    if not settings.enabled:
        return None

    tz = tz or venue_timezone()
    reminder_day = _appointment_date(appointment) - timedelta(days=settings.days_before)
    scheduled_for = datetime.combine(reminder_day, time_of_day(settings.reminder_time), tzinfo=tz)

    return ReminderRecord(
        reminder_type="appointment",
        customer_id=appointment.customer_id,
        appointment_id=appointment.id,
        scheduled_for=scheduled_for,
    )


def compute_expiry_reminder(customer_product, days_before: Optional[int] = None) -> Optional[ReminderRecord]:
    """Reminder fires days_before days ahead of the package expiry; None without expiry"""
    if customer_product.expiry_date is None:
        return None

    if days_before is None:
        product = getattr(customer_product, "product", None)
        days_before = getattr(product, "expiry_reminder_days_before", None) or DEFAULT_EXPIRY_REMINDER_DAYS_BEFORE

    return ReminderRecord(
        reminder_type="product_expiry",
        customer_id=customer_product.customer_id,
        customer_product_id=customer_product.id,
        scheduled_for=customer_product.expiry_date - timedelta(days=days_before),
    )


def compute_reminder(
        target,
        settings: Union[AppointmentReminderSettings, int, None] = None,
        tz: Optional[tzinfo] = None
) -> Optional[ReminderRecord]:
    """
    Dispatch on the target: a customer product (anything carrying session
    counters) gets an expiry reminder, an appointment gets an appointment
    reminder. For customer products settings may be the days-before count.
    """
    if hasattr(target, "total_sessions"):
        days_before = settings if isinstance(settings, int) else None
        return compute_expiry_reminder(target, days_before)

    if not isinstance(settings, AppointmentReminderSettings):
        settings = AppointmentReminderSettings()
    return compute_appointment_reminder(target, settings, tz)


def render_template(template: str, values: dict) -> str:
    """
    Render {{name}} placeholders and {{#if name}}...{{/if}} blocks.
    Unknown placeholders render empty.
    """
    def _if_block(match):
        return match.group(2) if values.get(match.group(1)) else ""

    rendered = _IF_BLOCK_RE.sub(_if_block, template)
    return _PLACEHOLDER_RE.sub(lambda m: str(values.get(m.group(1)) or ""), rendered)


def render_appointment_message(template: str, appointment) -> str:
    return render_template(template, {
        "service": appointment.service,
        "time": appointment.time,
        "date": _appointment_date(appointment).strftime("%d/%m/%Y"),
        "branch": appointment.branch.name if getattr(appointment, "branch", None) else "",
    })
