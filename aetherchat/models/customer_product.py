# aetherchat/models/customer_product.py
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from .base import Base


class CustomerProduct(Base):
    """
    Prepaid session package owned by a customer.

    remaining_sessions is kept equal to max(0, total_sessions - used_sessions)
    by the session ledger functions, which every write path calls.
    """
    __tablename__ = "customer_products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("products.id"), nullable=False, index=True)
    staff_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    product_name = Column(String(255), nullable=False)

    total_sessions = Column(Integer, nullable=False, default=0)
    used_sessions = Column(Integer, nullable=False, default=0)
    remaining_sessions = Column(Integer, nullable=False, default=0)

    assigned_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    expiry_days = Column(Integer, nullable=True)
    expiry_date = Column(DateTime(timezone=True), nullable=True, index=True)
    is_active = Column(Boolean, default=True)
    last_used_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer")
    product = relationship("Product")
    appointments = relationship("Appointment", back_populates="customer_product")

    __table_args__ = (
        Index('ix_customer_products_customer_active', 'customer_id', 'is_active'),
        Index('ix_customer_products_expiry_active', 'expiry_date', 'is_active'),
        CheckConstraint(
            "used_sessions >= 0 AND total_sessions >= 0 AND remaining_sessions >= 0",
            name="ck_customer_products_non_negative",
        ),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "customer_id": str(self.customer_id),
            "product_id": str(self.product_id),
            "staff_id": str(self.staff_id) if self.staff_id else None,
            "product_name": self.product_name,
            "total_sessions": self.total_sessions,
            "used_sessions": self.used_sessions,
            "remaining_sessions": self.remaining_sessions,
            "assigned_date": self.assigned_date.isoformat() if self.assigned_date else None,
            "expiry_days": self.expiry_days,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "is_active": self.is_active,
            "last_used_date": self.last_used_date.isoformat() if self.last_used_date else None,
            "notes": self.notes,
        }
