"""
Request/response schemas for appointments and availability
"""
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from aetherchat.schemas.scheduling import SuggestedSlot


class AvailableSlotsResponse(BaseModel):
    date: str
    is_off: bool
    service_duration_minutes: int
    slots: List[str]


class AvailabilityCheckResponse(BaseModel):
    date: str
    time: str
    is_available: bool
    reason: Optional[str] = None
    suggested_slots: List[SuggestedSlot] = Field(default_factory=list)


class BookAppointmentRequest(BaseModel):
    customer_id: UUID
    product_id: UUID
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM")
    branch_id: Optional[UUID] = None
    staff_id: Optional[UUID] = None
    customer_product_id: Optional[UUID] = None
    notes: Optional[str] = None
    recurrence_type: Literal["none", "daily", "weekly", "monthly"] = "none"
    recurrence_count: int = Field(1, ge=1, le=52)
    is_standalone_session: bool = False


class CancelAppointmentRequest(BaseModel):
    reason: Optional[str] = None


class RescheduleAppointmentRequest(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM")
