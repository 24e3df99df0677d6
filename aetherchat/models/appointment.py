# aetherchat/models/appointment.py
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from .base import Base

APPOINTMENT_STATUSES = ("booked", "cancelled", "completed", "pending_confirmation", "rescheduled")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # References
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("products.id"), nullable=False)
    branch_id = Column(Uuid, ForeignKey("branches.id"), nullable=True)
    staff_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    customer_product_id = Column(Uuid, ForeignKey("customer_products.id", ondelete="SET NULL"), nullable=True)

    # Appointment details (venue-local date and slot start)
    service = Column(String(255), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time = Column(String(5), nullable=False)  # HH:MM
    duration_minutes = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    # Status tracking
    status = Column(String(30), default="booked")  # booked, cancelled, completed, pending_confirmation, rescheduled
    recurrence_type = Column(String(10), default="none")  # none, daily, weekly, monthly
    recurrence_count = Column(Integer, default=1)

    # Session consumption
    is_standalone_session = Column(Boolean, default=False)
    is_session_used = Column(Boolean, default=False, nullable=False)
    session_used_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    customer = relationship("Customer")
    product = relationship("Product")
    branch = relationship("Branch")
    customer_product = relationship("CustomerProduct", back_populates="appointments")

    __table_args__ = (
        Index('ix_appointments_date_product', 'date', 'product_id'),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "customer_id": str(self.customer_id),
            "product_id": str(self.product_id),
            "branch_id": str(self.branch_id) if self.branch_id else None,
            "branch": self.branch.name if self.branch else None,
            "staff_id": str(self.staff_id) if self.staff_id else None,
            "customer_product_id": str(self.customer_product_id) if self.customer_product_id else None,
            "service": self.service,
            "date": self.date,
            "time": self.time,
            "duration_minutes": self.duration_minutes,
            "notes": self.notes,
            "status": self.status,
            "recurrence_type": self.recurrence_type,
            "recurrence_count": self.recurrence_count,
            "is_standalone_session": self.is_standalone_session,
            "is_session_used": self.is_session_used,
            "session_used_at": self.session_used_at.isoformat() if self.session_used_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "cancellation_reason": self.cancellation_reason,
        }

    def __repr__(self):
        return f"<Appointment(id={self.id}, date={self.date}, time={self.time}, status={self.status})>"
