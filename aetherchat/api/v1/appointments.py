# ============================================================================
# aetherchat/api/v1/appointments.py
# Thin HTTP layer - booking rules live in AppointmentService
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from aetherchat.api.dependencies import get_notifier, http_error
from aetherchat.config.database import get_db
from aetherchat.core.exceptions import AetherChatError
from aetherchat.schemas.appointment import (
    BookAppointmentRequest,
    CancelAppointmentRequest,
    RescheduleAppointmentRequest,
)
from aetherchat.services.appointment.appointment_service import AppointmentService
from aetherchat.services.notification.notifier import Notifier

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("")
async def list_appointments(
        date: Optional[str] = Query(None, description="YYYY-MM-DD"),
        customer_id: Optional[UUID] = Query(None),
        product_id: Optional[UUID] = Query(None),
        branch_id: Optional[UUID] = Query(None),
        status_filter: Optional[str] = Query(None, alias="status"),
        db: Session = Depends(get_db)
):
    try:
        appointments = AppointmentService.list_appointments(
            db=db,
            date_str=date,
            customer_id=customer_id,
            product_id=product_id,
            branch_id=branch_id,
            status=status_filter,
        )
    except AetherChatError as e:
        raise http_error(e)
    return [a.to_dict() for a in appointments]


@router.post("", status_code=status.HTTP_201_CREATED)
async def book_appointment(
        request: BookAppointmentRequest,
        db: Session = Depends(get_db),
        notifier: Notifier = Depends(get_notifier)
):
    """Book a slot; 409 with suggested slots when it is taken"""
    try:
        appointments = AppointmentService.book_appointment(
            db=db,
            customer_id=request.customer_id,
            product_id=request.product_id,
            date_str=request.date,
            time_str=request.time,
            branch_id=request.branch_id,
            staff_id=request.staff_id,
            customer_product_id=request.customer_product_id,
            notes=request.notes,
            recurrence_type=request.recurrence_type,
            recurrence_count=request.recurrence_count,
            is_standalone_session=request.is_standalone_session,
            notifier=notifier,
        )
    except AetherChatError as e:
        raise http_error(e)
    return [a.to_dict() for a in appointments]


@router.get("/{appointment_id}")
async def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    try:
        return AppointmentService.get_appointment(db, appointment_id).to_dict()
    except AetherChatError as e:
        raise http_error(e)


@router.post("/{appointment_id}/cancel")
async def cancel_appointment(
        request: CancelAppointmentRequest,
        appointment_id: UUID = Path(...),
        db: Session = Depends(get_db),
        notifier: Notifier = Depends(get_notifier)
):
    try:
        appointment = AppointmentService.cancel_appointment(db, appointment_id, request.reason, notifier)
    except AetherChatError as e:
        raise http_error(e)
    return appointment.to_dict()


@router.post("/{appointment_id}/reschedule")
async def reschedule_appointment(
        request: RescheduleAppointmentRequest,
        appointment_id: UUID = Path(...),
        db: Session = Depends(get_db),
        notifier: Notifier = Depends(get_notifier)
):
    try:
        appointment = AppointmentService.reschedule_appointment(
            db, appointment_id, request.date, request.time, notifier=notifier
        )
    except AetherChatError as e:
        raise http_error(e)
    return appointment.to_dict()


@router.post("/{appointment_id}/complete")
async def complete_appointment(
        appointment_id: UUID = Path(...),
        db: Session = Depends(get_db),
        notifier: Notifier = Depends(get_notifier)
):
    try:
        appointment = AppointmentService.complete_appointment(db, appointment_id, notifier)
    except AetherChatError as e:
        raise http_error(e)
    return appointment.to_dict()


@router.post("/{appointment_id}/use-session")
async def mark_session_used(
        appointment_id: UUID = Path(...),
        db: Session = Depends(get_db),
        notifier: Notifier = Depends(get_notifier)
):
    """Consume the session of the appointment; repeating the call is harmless"""
    try:
        appointment = AppointmentService.mark_session_used(db, appointment_id, notifier=notifier)
    except AetherChatError as e:
        raise http_error(e)
    return appointment.to_dict()
