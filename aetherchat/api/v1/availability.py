# ============================================================================
# aetherchat/api/v1/availability.py
# Thin HTTP layer over the availability service
# ============================================================================
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from aetherchat.api.dependencies import http_error
from aetherchat.config.database import get_db
from aetherchat.core.exceptions import AetherChatError
from aetherchat.schemas.appointment import AvailabilityCheckResponse, AvailableSlotsResponse
from aetherchat.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
        date: str = Query(..., description="YYYY-MM-DD"),
        product_id: Optional[UUID] = Query(None),
        branch_id: Optional[UUID] = Query(None),
        db: Session = Depends(get_db)
):
    """Bookable slot starts for a date, with the resolved rules"""
    try:
        context = AvailabilityService.resolve_context(db, date, product_id, branch_id)
        slots = AvailabilityService.get_available_slots(db, date, product_id, branch_id)
    except AetherChatError as e:
        raise http_error(e)

    return AvailableSlotsResponse(
        date=context.date,
        is_off=context.is_off,
        service_duration_minutes=context.service_duration_minutes,
        slots=slots,
    )


@router.get("/check", response_model=AvailabilityCheckResponse)
async def check_availability(
        date: str = Query(..., description="YYYY-MM-DD"),
        time: str = Query(..., description="HH:MM"),
        product_id: Optional[UUID] = Query(None),
        branch_id: Optional[UUID] = Query(None),
        db: Session = Depends(get_db)
):
    """Whether one slot is free, with alternatives when it is not"""
    try:
        result = AvailabilityService.check_availability(db, date, time, product_id, branch_id)
    except AetherChatError as e:
        raise http_error(e)

    return AvailabilityCheckResponse(
        date=date,
        time=time,
        is_available=result.is_available,
        reason=result.reason,
        suggested_slots=result.suggested_slots,
    )
