# aetherchat/models/appointment_reminder.py
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.sql import func
import uuid

from .base import Base

REMINDER_STATUSES = ("pending", "sent", "failed")


class AppointmentReminder(Base):
    """Persisted reminder for an appointment or an expiring package"""
    __tablename__ = "appointment_reminders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    reminder_type = Column(String(20), nullable=False, default="appointment")  # appointment, product_expiry
    appointment_id = Column(Uuid, ForeignKey("appointments.id"), nullable=True, index=True)
    customer_product_id = Column(Uuid, ForeignKey("customer_products.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False, index=True)

    scheduled_for = Column(DateTime(timezone=True), nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(10), nullable=False, default="pending")  # pending, sent, failed
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('ix_appointment_reminders_status_scheduled', 'status', 'scheduled_for'),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "reminder_type": self.reminder_type,
            "appointment_id": str(self.appointment_id) if self.appointment_id else None,
            "customer_product_id": str(self.customer_product_id) if self.customer_product_id else None,
            "customer_id": str(self.customer_id),
            "scheduled_for": self.scheduled_for.isoformat() if self.scheduled_for else None,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "status": self.status,
            "error_message": self.error_message,
        }
