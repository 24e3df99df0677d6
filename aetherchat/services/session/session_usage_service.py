# aetherchat/services/session/session_usage_service.py
"""
Marking appointment sessions as used and reporting package usage.

The is_session_used flag is flipped with a single conditional UPDATE, so only
one caller ever wins for a given appointment. The winner then decrements the
linked package under a row lock.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from aetherchat.core.exceptions import AetherChatError, AppointmentNotFound, BookingError, CustomerNotFound
from aetherchat.models.appointment import Appointment
from aetherchat.models.customer import Customer
from aetherchat.models.customer_product import CustomerProduct
from aetherchat.services.scheduling.slot_generator import CANCELLED_STATUS
from aetherchat.services.scheduling.time_slots import format_date
from aetherchat.services.session.session_ledger import consume_session, is_expired
from aetherchat.utils.datetime_utils import as_utc, utcnow, venue_now, venue_timezone

logger = logging.getLogger(__name__)


class SessionUsageService:

    @staticmethod
    def consume_for_appointment(
            db: Session,
            appointment_id,
            used_at: Optional[datetime] = None
    ) -> Tuple[Appointment, bool]:
        """
        Mark the appointment's session used and consume one session of its
        package. Returns (appointment, consumed); consumed is False when the
        session was already marked used. Raises NoSessionsRemaining after
        rolling the flag back when the package is exhausted.
        """
        used_at = used_at or utcnow()

        flipped = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.is_session_used == False,
            Appointment.status != CANCELLED_STATUS,
        ).update(
            {"is_session_used": True, "session_used_at": used_at},
            synchronize_session=False,
        )

        appointment = db.query(Appointment).populate_existing().filter(
            Appointment.id == appointment_id
        ).first()
        if not appointment:
            db.rollback()
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")

        if not flipped:
            db.rollback()
            if appointment.status == CANCELLED_STATUS:
                raise BookingError(f"Appointment {appointment_id} is cancelled")
            logger.info(f"Session for appointment {appointment_id} already used")
            return appointment, False

        if appointment.customer_product_id and not appointment.is_standalone_session:
            customer_product = db.query(CustomerProduct).populate_existing().filter(
                CustomerProduct.id == appointment.customer_product_id
            ).with_for_update().first()

            if customer_product:
                try:
                    consume_session(customer_product, used_at)
                except AetherChatError:
                    db.rollback()
                    raise
                logger.info(
                    f"Consumed session of customer product {customer_product.id}: "
                    f"{customer_product.remaining_sessions} remaining"
                )
            else:
                logger.warning(
                    f"Appointment {appointment_id} links missing customer product {appointment.customer_product_id}"
                )

        db.commit()
        db.refresh(appointment)
        return appointment, True

    @staticmethod
    def process_end_of_day(db: Session, day: Optional[date] = None) -> Dict[str, int]:
        """
        Mark every non-cancelled, unused appointment of the day as used.
        Failures are logged per appointment and do not stop the sweep.
        """
        day = day or venue_now().date()
        date_str = format_date(day)

        appointment_ids = [
            row.id for row in db.query(Appointment.id).filter(
                Appointment.date == date_str,
                Appointment.status != CANCELLED_STATUS,
                Appointment.is_session_used == False,
            ).all()
        ]
        logger.info(f"Processing {len(appointment_ids)} appointments for session usage on {date_str}")

        stats = {"processed": 0, "consumed": 0, "failed": 0}
        for appointment_id in appointment_ids:
            stats["processed"] += 1
            try:
                _, consumed = SessionUsageService.consume_for_appointment(db, appointment_id)
                if consumed:
                    stats["consumed"] += 1
            except AetherChatError as e:
                logger.error(f"Error processing appointment {appointment_id}: {e}")
                stats["failed"] += 1

        logger.info(f"End of day session usage for {date_str} completed: {stats}")
        return stats

    @staticmethod
    def get_customer_service_usage(db: Session, customer_id, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Per-package usage of a customer with expiry flags and recency"""
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise CustomerNotFound(f"Customer {customer_id} not found")

        now = as_utc(now or utcnow())

        customer_products = db.query(CustomerProduct).filter(
            CustomerProduct.customer_id == customer_id,
            CustomerProduct.is_active == True,
        ).all()

        products = []
        for cp in customer_products:
            last_used = as_utc(cp.last_used_date)
            products.append({
                "customer_product_id": str(cp.id),
                "product_name": cp.product_name,
                "total_sessions": cp.total_sessions,
                "used_sessions": cp.used_sessions,
                "remaining_sessions": cp.remaining_sessions,
                "expiry_date": cp.expiry_date.isoformat() if cp.expiry_date else None,
                "days_since_last_use": (now - last_used).days if last_used else None,
                "is_expired": is_expired(cp, now),
            })

        last_appointment = db.query(Appointment).filter(
            Appointment.customer_id == customer_id,
            Appointment.status.in_(["completed", "booked"]),
        ).order_by(Appointment.date.desc(), Appointment.time.desc()).first()

        last_appointment_date = None
        days_since_last_appointment = None
        if last_appointment:
            last_appointment_date = datetime.strptime(
                f"{last_appointment.date} {last_appointment.time}", "%Y-%m-%d %H:%M"
            ).replace(tzinfo=venue_timezone())
            days_since_last_appointment = (now - as_utc(last_appointment_date)).days

        standalone_sessions_used = db.query(Appointment).filter(
            Appointment.customer_id == customer_id,
            Appointment.is_standalone_session == True,
            Appointment.is_session_used == True,
        ).count()

        return {
            "customer_id": str(customer.id),
            "customer_name": customer.name,
            "products": products,
            "last_appointment_date": last_appointment_date.isoformat() if last_appointment_date else None,
            "days_since_last_appointment": days_since_last_appointment,
            "standalone_sessions_used": standalone_sessions_used,
        }
