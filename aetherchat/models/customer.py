# aetherchat/models/customer.py
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from .base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    phone_number = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    internal_name = Column(String(255), nullable=True)
    tags = Column(JSON, default=list)
    assigned_staff_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    last_interaction_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    conversations = relationship("Conversation", back_populates="customer")

    def __repr__(self):
        return f"<Customer(id={self.id}, phone='{self.phone_number}')>"
