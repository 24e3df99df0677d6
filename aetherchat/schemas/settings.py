"""
Request schema for the global settings
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from aetherchat.schemas.scheduling import BreakTime, SpecificDayRule


class UpdateSettingsRequest(BaseModel):
    """Partial update; only the fields sent are changed"""
    model_config = ConfigDict(extra="forbid")

    brand_name: Optional[str] = None
    greeting_message: Optional[str] = None
    suggested_questions: Optional[List[str]] = None

    number_of_staff: Optional[int] = Field(None, ge=0)
    default_service_duration_minutes: Optional[int] = Field(None, ge=5)
    working_hours: Optional[List[str]] = None
    weekly_off_days: Optional[List[int]] = None
    one_time_off_dates: Optional[List[str]] = None
    specific_day_rules: Optional[List[SpecificDayRule]] = None
    break_times: Optional[List[BreakTime]] = None

    out_of_office_enabled: Optional[bool] = None
    out_of_office_message: Optional[str] = None

    appointment_reminder_enabled: Optional[bool] = None
    appointment_reminder_time: Optional[str] = None
    appointment_reminder_days_before: Optional[int] = Field(None, ge=1)
    appointment_reminder_message_template: Optional[str] = None
    successful_booking_message_template: Optional[str] = None
