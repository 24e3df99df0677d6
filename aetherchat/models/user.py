# aetherchat/models/user.py
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.sql import func
import uuid

from .base import Base


class User(Base):
    """Staff or admin account"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    name = Column(String(255), nullable=False)
    phone_number = Column(String(20), nullable=False, unique=True)
    role = Column(String(20), default="staff")  # admin, staff
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}', role='{self.role}')>"
