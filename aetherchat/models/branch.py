# aetherchat/models/branch.py
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, Uuid
from sqlalchemy.sql import func
import uuid

from .base import Base


class Branch(Base):
    __tablename__ = "branches"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    name = Column(String(255), nullable=False, unique=True)
    address = Column(String(500), nullable=True)
    contact_info = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)

    # Branch scope of the scheduling rules (None = inherit)
    working_hours = Column(JSON, nullable=True)
    off_days = Column(JSON, nullable=True)  # weekly, 0=Sunday..6=Saturday
    number_of_staff = Column(Integer, nullable=True)
    specific_day_overrides = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Branch(id={self.id}, name='{self.name}')>"
