"""
Request schemas for customer products (session packages)
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AssignProductRequest(BaseModel):
    """Invoice: sell a package to a customer"""
    customer_id: UUID
    product_id: UUID
    staff_id: Optional[UUID] = None
    total_sessions: Optional[int] = Field(None, ge=1)
    expiry_days: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None


class UpdateCustomerProductRequest(BaseModel):
    total_sessions: Optional[int] = Field(None, ge=0)
    used_sessions: Optional[int] = Field(None, ge=0)
    expiry_days: Optional[int] = Field(None, ge=1)
    expiry_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None
