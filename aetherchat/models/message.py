# aetherchat/models/message.py
from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from .base import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id = Column(Uuid, ForeignKey("conversations.id"), nullable=False, index=True)
    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=True)

    sender = Column(String(20), nullable=False)  # user, ai, staff, system
    type = Column(String(20), default="text")  # text, system
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False)

    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    conversation = relationship("Conversation", back_populates="messages")
