# ============================================================================
# aetherchat/services/appointment/appointment_service.py
# ============================================================================
"""Service for managing appointments"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from aetherchat.core.exceptions import (
    AppointmentNotFound,
    BookingError,
    CustomerNotFound,
    CustomerProductNotFound,
    ProductNotFound,
    SlotUnavailable,
)
from aetherchat.models.appointment import Appointment
from aetherchat.models.customer import Customer
from aetherchat.models.customer_product import CustomerProduct
from aetherchat.models.product import Product
from aetherchat.services.availability.availability_service import AvailabilityService
from aetherchat.services.notification.notifier import NullNotifier, Notifier
from aetherchat.services.reminder.reminder_service import ReminderService
from aetherchat.services.scheduling.recurrence import expand_recurrence
from aetherchat.services.scheduling.slot_generator import CANCELLED_STATUS
from aetherchat.services.scheduling.time_slots import format_date, parse_date, parse_time
from aetherchat.services.session.session_ledger import is_expired
from aetherchat.services.session.session_usage_service import SessionUsageService
from aetherchat.utils.datetime_utils import utcnow, venue_now

logger = logging.getLogger(__name__)


class AppointmentService:
    """Handles appointment operations"""

    @staticmethod
    def get_appointment(db: Session, appointment_id) -> Appointment:
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")
        return appointment

    @staticmethod
    def _check_package(db: Session, customer_product_id, customer_id, product_id, now: datetime) -> CustomerProduct:
        customer_product = db.query(CustomerProduct).filter(CustomerProduct.id == customer_product_id).first()
        if not customer_product:
            raise CustomerProductNotFound(f"Customer product {customer_product_id} not found")
        if customer_product.customer_id != customer_id:
            raise BookingError(f"Customer product {customer_product_id} belongs to another customer")
        if customer_product.product_id != product_id:
            raise BookingError(f"Customer product {customer_product_id} is a package of another product")
        if not customer_product.is_active or is_expired(customer_product, now):
            raise BookingError(f"Customer product {customer_product_id} is inactive or expired")
        return customer_product

    @staticmethod
    def book_appointment(
            db: Session,
            customer_id,
            product_id,
            date_str: str,
            time_str: str,
            branch_id=None,
            staff_id=None,
            customer_product_id=None,
            notes: Optional[str] = None,
            recurrence_type: str = "none",
            recurrence_count: int = 1,
            is_standalone_session: bool = False,
            now: Optional[datetime] = None,
            notifier: Optional[Notifier] = None
    ) -> List[Appointment]:
        """
        Book one appointment, or every occurrence of a recurring one. Every
        occurrence must be free; otherwise SlotUnavailable is raised and
        nothing is booked.
        """
        notifier = notifier or NullNotifier()
        start = parse_date(date_str)
        parse_time(time_str)
        now = now or venue_now()

        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise CustomerNotFound(f"Customer {customer_id} not found")

        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise ProductNotFound(f"Product {product_id} not found")
        if not product.is_active or not product.is_schedulable:
            raise BookingError(f"Product {product.name} cannot be booked")

        if customer_product_id:
            AppointmentService._check_package(db, customer_product_id, customer.id, product.id, now)

        dates = expand_recurrence(start, recurrence_type, recurrence_count)

        durations = []
        for day in dates:
            result = AvailabilityService.check_availability(
                db, day, time_str, product.id, branch_id, now=now
            )
            if not result.is_available:
                raise SlotUnavailable(format_date(day), time_str, result.reason or "", result.suggested_slots)
            context = AvailabilityService.resolve_context(db, day, product.id, branch_id)
            durations.append(context.service_duration_minutes)

        appointments = []
        for day, duration in zip(dates, durations):
            appointment = Appointment(
                customer_id=customer.id,
                product_id=product.id,
                branch_id=branch_id,
                staff_id=staff_id,
                customer_product_id=customer_product_id,
                service=product.name,
                date=format_date(day),
                time=time_str,
                duration_minutes=duration,
                notes=notes,
                status="booked",
                recurrence_type=recurrence_type,
                recurrence_count=recurrence_count,
                is_standalone_session=is_standalone_session,
                is_session_used=False,
            )
            db.add(appointment)
            appointments.append(appointment)

        db.flush()
        for appointment in appointments:
            ReminderService.schedule_appointment_reminder(db, appointment)

        customer.last_interaction_at = utcnow()
        db.commit()

        for appointment in appointments:
            db.refresh(appointment)
            notifier.notify("appointment:created", appointment.to_dict())

        logger.info(
            f"Booked {len(appointments)} appointment(s) of {product.name} for customer {customer.id} "
            f"starting {date_str} {time_str}"
        )
        return appointments

    @staticmethod
    def cancel_appointment(
            db: Session,
            appointment_id,
            reason: Optional[str] = None,
            notifier: Optional[Notifier] = None
    ) -> Appointment:
        """Cancel and fail its pending reminders; cancelling twice is a no-op"""
        notifier = notifier or NullNotifier()
        appointment = AppointmentService.get_appointment(db, appointment_id)
        if appointment.status == CANCELLED_STATUS:
            return appointment

        appointment.status = CANCELLED_STATUS
        appointment.cancelled_at = utcnow()
        appointment.cancellation_reason = reason
        ReminderService.cancel_appointment_reminders(db, appointment.id)
        db.commit()
        db.refresh(appointment)

        logger.info(f"Cancelled appointment {appointment.id}")
        notifier.notify("appointment:cancelled", appointment.to_dict())
        return appointment

    @staticmethod
    def reschedule_appointment(
            db: Session,
            appointment_id,
            new_date: str,
            new_time: str,
            now: Optional[datetime] = None,
            notifier: Optional[Notifier] = None
    ) -> Appointment:
        notifier = notifier or NullNotifier()
        target = parse_date(new_date)
        parse_time(new_time)

        appointment = AppointmentService.get_appointment(db, appointment_id)
        if appointment.status in (CANCELLED_STATUS, "completed"):
            raise BookingError(f"Appointment {appointment_id} is {appointment.status}")
        if appointment.is_session_used:
            raise BookingError(f"Session of appointment {appointment_id} already used")

        result = AvailabilityService.check_availability(
            db, target, new_time, appointment.product_id, appointment.branch_id,
            now=now, exclude_appointment_id=appointment.id
        )
        if not result.is_available:
            raise SlotUnavailable(new_date, new_time, result.reason or "", result.suggested_slots)

        context = AvailabilityService.resolve_context(db, target, appointment.product_id, appointment.branch_id)

        previous = f"{appointment.date} {appointment.time}"
        appointment.date = format_date(target)
        appointment.time = new_time
        appointment.duration_minutes = context.service_duration_minutes
        appointment.status = "rescheduled"

        ReminderService.cancel_appointment_reminders(db, appointment.id, "Appointment rescheduled")
        db.flush()
        ReminderService.schedule_appointment_reminder(db, appointment)
        db.commit()
        db.refresh(appointment)

        logger.info(f"Rescheduled appointment {appointment.id} from {previous} to {new_date} {new_time}")
        notifier.notify("appointment:rescheduled", appointment.to_dict())
        return appointment

    @staticmethod
    def mark_session_used(
            db: Session,
            appointment_id,
            used_at: Optional[datetime] = None,
            notifier: Optional[Notifier] = None
    ) -> Appointment:
        """Consume the appointment's session at most once"""
        notifier = notifier or NullNotifier()
        appointment, consumed = SessionUsageService.consume_for_appointment(db, appointment_id, used_at)
        if consumed:
            notifier.notify("appointment:session_used", appointment.to_dict())
        return appointment

    @staticmethod
    def complete_appointment(
            db: Session,
            appointment_id,
            notifier: Optional[Notifier] = None
    ) -> Appointment:
        """Mark completed, consuming the session first if still unused"""
        notifier = notifier or NullNotifier()
        appointment = AppointmentService.get_appointment(db, appointment_id)
        if appointment.status == CANCELLED_STATUS:
            raise BookingError(f"Appointment {appointment_id} is cancelled")

        AppointmentService.mark_session_used(db, appointment.id, notifier=notifier)

        appointment = AppointmentService.get_appointment(db, appointment_id)
        appointment.status = "completed"
        db.commit()
        db.refresh(appointment)

        logger.info(f"Completed appointment {appointment.id}")
        notifier.notify("appointment:completed", appointment.to_dict())
        return appointment

    @staticmethod
    def list_appointments(
            db: Session,
            date_str: Optional[str] = None,
            customer_id=None,
            product_id=None,
            branch_id=None,
            status: Optional[str] = None
    ) -> List[Appointment]:
        query = db.query(Appointment)
        if date_str:
            query = query.filter(Appointment.date == format_date(parse_date(date_str)))
        if customer_id:
            query = query.filter(Appointment.customer_id == customer_id)
        if product_id:
            query = query.filter(Appointment.product_id == product_id)
        if branch_id:
            query = query.filter(Appointment.branch_id == branch_id)
        if status:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.date, Appointment.time).all()
