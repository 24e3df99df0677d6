# aetherchat/models/app_settings.py
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, JSON, Uuid
from sqlalchemy.sql import func
import uuid

from .base import Base


class AppSettings(Base):
    """Venue-wide settings, a single row. Global scope of the scheduling rules."""
    __tablename__ = "app_settings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Branding / chat texts
    brand_name = Column(String(100), default="AetherChat")
    greeting_message = Column(Text, nullable=True)
    greeting_message_new_customer = Column(Text, nullable=True)
    greeting_message_returning_customer = Column(Text, nullable=True)
    suggested_questions = Column(JSON, default=list)

    # Scheduling defaults (None = fall back to system defaults)
    number_of_staff = Column(Integer, nullable=True)
    default_service_duration_minutes = Column(Integer, nullable=True)
    working_hours = Column(JSON, nullable=True)  # ["09:00", "10:00", ...]
    weekly_off_days = Column(JSON, nullable=True)  # 0=Sunday..6=Saturday
    one_time_off_dates = Column(JSON, default=list)  # ["YYYY-MM-DD", ...]
    specific_day_rules = Column(JSON, default=list)
    break_times = Column(JSON, default=list)  # [{"start_time": "12:00", "end_time": "13:00"}]

    # Out of office
    out_of_office_enabled = Column(Boolean, default=False)
    out_of_office_message = Column(Text, nullable=True)
    office_hours_start = Column(String(5), nullable=True)
    office_hours_end = Column(String(5), nullable=True)

    # Appointment reminders
    appointment_reminder_enabled = Column(Boolean, default=True)
    appointment_reminder_time = Column(String(5), default="09:00")
    appointment_reminder_days_before = Column(Integer, default=1)
    appointment_reminder_message_template = Column(Text, nullable=True)

    successful_booking_message_template = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "id": str(self.id),
            "brand_name": self.brand_name,
            "greeting_message": self.greeting_message,
            "suggested_questions": self.suggested_questions or [],
            "number_of_staff": self.number_of_staff,
            "default_service_duration_minutes": self.default_service_duration_minutes,
            "working_hours": self.working_hours,
            "weekly_off_days": self.weekly_off_days,
            "one_time_off_dates": self.one_time_off_dates or [],
            "specific_day_rules": self.specific_day_rules or [],
            "break_times": self.break_times or [],
            "out_of_office_enabled": self.out_of_office_enabled,
            "out_of_office_message": self.out_of_office_message,
            "appointment_reminder_enabled": self.appointment_reminder_enabled,
            "appointment_reminder_time": self.appointment_reminder_time,
            "appointment_reminder_days_before": self.appointment_reminder_days_before,
            "appointment_reminder_message_template": self.appointment_reminder_message_template,
            "successful_booking_message_template": self.successful_booking_message_template,
        }
