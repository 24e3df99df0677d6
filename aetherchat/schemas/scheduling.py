"""
Pydantic schemas for the scheduling core
"""
from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aetherchat.services.scheduling.time_slots import parse_date, parse_time


# ============================================================================
# Rule inputs
# ============================================================================

class SpecificDayRule(BaseModel):
    """Override for one exact calendar date"""
    model_config = ConfigDict(extra="ignore")

    date: str = Field(..., description="YYYY-MM-DD")
    is_off: Optional[bool] = None
    working_hours: Optional[List[str]] = None
    number_of_staff: Optional[int] = Field(None, ge=0)
    service_duration_minutes: Optional[int] = Field(None, ge=5)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        parse_date(v)
        return v


class SchedulingScope(BaseModel):
    """
    Rules contributed by one scope (global settings, a branch or a product).
    None means the scope does not define the field; an empty list is an
    explicit value.
    """
    model_config = ConfigDict(extra="ignore")

    working_hours: Optional[List[str]] = None
    weekly_off_days: Optional[List[int]] = None
    one_time_off_dates: Optional[List[str]] = None
    specific_day_rules: List[SpecificDayRule] = Field(default_factory=list)
    number_of_staff: Optional[int] = Field(None, ge=0)
    service_duration_minutes: Optional[int] = Field(None, ge=5)

    @field_validator("weekly_off_days")
    @classmethod
    def validate_weekdays(cls, v):
        if v is None:
            return v
        for day in v:
            if day < 0 or day > 6:
                raise ValueError("Weekly off days must be between 0 (Sunday) and 6 (Saturday)")
        return v

    @field_validator("specific_day_rules", mode="before")
    @classmethod
    def none_means_no_rules(cls, v):
        return v or []


class SchedulingContext(BaseModel):
    """Fully resolved rules for one date"""
    date: str
    is_off: bool
    working_hours: List[str]
    number_of_staff: int
    service_duration_minutes: int
    weekly_off_days: List[int]
    one_time_off_dates: List[str]
    specific_day_rules: List[SpecificDayRule] = Field(default_factory=list)


# ============================================================================
# Slot generator inputs
# ============================================================================

class BreakTime(BaseModel):
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        parse_time(v)
        return v


class BookedSlot(BaseModel):
    """An existing appointment as seen by the slot generator"""
    time: str
    status: str = "booked"
    duration_minutes: Optional[int] = Field(None, ge=1)


# ============================================================================
# Availability output
# ============================================================================

class SuggestedSlot(BaseModel):
    date: str
    time: str
    branch: Optional[str] = None


class AvailabilityResult(BaseModel):
    is_available: bool
    reason: Optional[str] = None
    suggested_slots: List[SuggestedSlot] = Field(default_factory=list)


# ============================================================================
# Reminders
# ============================================================================

class AppointmentReminderSettings(BaseModel):
    enabled: bool = True
    reminder_time: str = "09:00"
    days_before: int = Field(1, ge=1)
    message_template: str = (
        "Nhắc nhở: Bạn có lịch hẹn {{service}} vào lúc {{time}} ngày {{date}}"
        "{{#if branch}} tại {{branch}}{{/if}}. Vui lòng đến đúng giờ!"
    )

    @field_validator("reminder_time")
    @classmethod
    def validate_reminder_time(cls, v):
        parse_time(v)
        return v


class ReminderRecord(BaseModel):
    """Candidate reminder computed by the scheduler, ready to persist"""
    reminder_type: Literal["appointment", "product_expiry"]
    customer_id: Optional[UUID] = None
    appointment_id: Optional[UUID] = None
    customer_product_id: Optional[UUID] = None
    scheduled_for: datetime
    status: Literal["pending", "sent", "failed"] = "pending"
