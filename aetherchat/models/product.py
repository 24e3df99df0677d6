# aetherchat/models/product.py
from sqlalchemy import Column, String, Integer, Numeric, Boolean, Text, DateTime, JSON, Uuid
from sqlalchemy.sql import func
import uuid

from .base import Base

DEFAULT_EXPIRY_REMINDER_TEMPLATE = (
    "Xin chào {customerName}, gói dịch vụ {productName} của bạn sẽ hết hạn vào ngày "
    "{expiryDate}. Vui lòng liên hệ để gia hạn hoặc sử dụng hết số buổi còn lại."
)


class Product(Base):
    """Product or bookable service; services may carry their own scheduling rules"""
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), default=0)
    category = Column(String(100), nullable=True)
    type = Column(String(20), default="service")  # product, service
    is_active = Column(Boolean, default=True)

    # Scheduling
    is_schedulable = Column(Boolean, default=True)
    scheduling_rules = Column(JSON, nullable=True)  # SchedulingScope shape

    # Session packages
    default_sessions = Column(Integer, nullable=True)
    expiry_days = Column(Integer, nullable=True)
    expiry_reminder_template = Column(Text, default=DEFAULT_EXPIRY_REMINDER_TEMPLATE)
    expiry_reminder_days_before = Column(Integer, default=3)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "price": float(self.price) if self.price is not None else 0.0,
            "category": self.category,
            "type": self.type,
            "is_active": self.is_active,
            "is_schedulable": self.is_schedulable,
            "scheduling_rules": self.scheduling_rules,
            "default_sessions": self.default_sessions,
            "expiry_days": self.expiry_days,
        }

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}')>"
