# aetherchat/models/conversation.py
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from .base import Base


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False)
    status = Column(String(20), default="open")  # open, closed
    title = Column(String(255), nullable=True)

    last_message_at = Column(DateTime(timezone=True), nullable=True)
    last_message_preview = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="conversations")
    messages = relationship("Message", back_populates="conversation", order_by="Message.timestamp")

    __table_args__ = (
        Index('ix_conversations_customer_updated', 'customer_id', 'updated_at'),
    )
