# aetherchat/services/settings/settings_service.py
"""Global venue settings (the single AppSettings row)"""
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from aetherchat.core.exceptions import SchedulingError
from aetherchat.models.app_settings import AppSettings
from aetherchat.schemas.scheduling import AppointmentReminderSettings, BreakTime
from aetherchat.services.scheduling.rule_resolution import validate_scope
from aetherchat.services.scheduling.time_slots import parse_time

logger = logging.getLogger(__name__)

SCHEDULING_FIELDS = (
    "working_hours",
    "weekly_off_days",
    "one_time_off_dates",
    "specific_day_rules",
    "number_of_staff",
    "default_service_duration_minutes",
)


class SettingsService:
    """Settings provider for the scheduling core"""

    @staticmethod
    def get_settings(db: Session) -> AppSettings:
        """Return the settings row, creating it with defaults on first access"""
        settings = db.query(AppSettings).first()
        if settings:
            return settings

        defaults = AppointmentReminderSettings()
        settings = AppSettings(
            appointment_reminder_enabled=defaults.enabled,
            appointment_reminder_time=defaults.reminder_time,
            appointment_reminder_days_before=defaults.days_before,
            appointment_reminder_message_template=defaults.message_template,
            one_time_off_dates=[],
            specific_day_rules=[],
            break_times=[],
        )
        db.add(settings)
        db.commit()
        db.refresh(settings)
        logger.info("Created default app settings")
        return settings

    @staticmethod
    def get_break_times(db: Session) -> List[BreakTime]:
        settings = SettingsService.get_settings(db)
        return [BreakTime.model_validate(b) for b in (settings.break_times or [])]

    @staticmethod
    def update_settings(db: Session, updates: Dict[str, Any]) -> AppSettings:
        """
        Apply a partial update. Scheduling fields are validated as a
        SchedulingScope and stored in their plain JSON form.
        """
        settings = SettingsService.get_settings(db)

        scheduling = {k: updates[k] for k in SCHEDULING_FIELDS if k in updates}
        if scheduling:
            scope_input = dict(scheduling)
            if "default_service_duration_minutes" in scope_input:
                scope_input["service_duration_minutes"] = scope_input.pop("default_service_duration_minutes")
            scope = validate_scope(scope_input)
            if "specific_day_rules" in scheduling:
                updates["specific_day_rules"] = [
                    rule.model_dump(exclude_none=True) for rule in scope.specific_day_rules
                ]

        if updates.get("break_times") is not None:
            for window in updates["break_times"]:
                parse_time(window["start_time"])
                parse_time(window["end_time"])
            updates["break_times"] = [
                BreakTime.model_validate(b).model_dump() for b in updates["break_times"]
            ]

        if updates.get("appointment_reminder_time") is not None:
            parse_time(updates["appointment_reminder_time"])
        days_before = updates.get("appointment_reminder_days_before")
        if days_before is not None and days_before < 1:
            raise SchedulingError("Reminder must be sent at least one day before")

        for key, value in updates.items():
            if hasattr(settings, key) and key not in ("id", "created_at", "updated_at"):
                setattr(settings, key, value)

        db.commit()
        db.refresh(settings)
        logger.info(f"Updated app settings: {sorted(updates.keys())}")
        return settings
