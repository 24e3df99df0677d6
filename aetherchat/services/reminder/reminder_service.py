# aetherchat/services/reminder/reminder_service.py
"""Persisting reminders and dispatching the due ones"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from aetherchat.core.exceptions import ReminderStateError
from aetherchat.models.appointment import Appointment
from aetherchat.models.appointment_reminder import AppointmentReminder
from aetherchat.models.conversation import Conversation
from aetherchat.models.customer import Customer
from aetherchat.models.customer_product import CustomerProduct
from aetherchat.models.message import Message
from aetherchat.models.product import DEFAULT_EXPIRY_REMINDER_TEMPLATE
from aetherchat.schemas.scheduling import ReminderRecord
from aetherchat.services.notification.notifier import Notifier
from aetherchat.services.reminder.reminder_scheduler import (
    compute_appointment_reminder,
    compute_expiry_reminder,
    reminder_settings_from_app_settings,
    render_appointment_message,
)
from aetherchat.services.settings.settings_service import SettingsService
from aetherchat.utils.datetime_utils import as_utc, utcnow, venue_timezone

logger = logging.getLogger(__name__)

PENDING = "pending"
SENT = "sent"
FAILED = "failed"


class ReminderService:
    """Creates reminder rows and moves them from pending to sent or failed"""

    @staticmethod
    def _persist(db: Session, record: ReminderRecord) -> AppointmentReminder:
        reminder = AppointmentReminder(
            reminder_type=record.reminder_type,
            appointment_id=record.appointment_id,
            customer_product_id=record.customer_product_id,
            customer_id=record.customer_id,
            scheduled_for=as_utc(record.scheduled_for),
            status=PENDING,
        )
        db.add(reminder)
        return reminder

    @staticmethod
    def schedule_appointment_reminder(db: Session, appointment: Appointment) -> Optional[AppointmentReminder]:
        """Queue the reminder for an appointment; None when reminders are disabled"""
        settings = reminder_settings_from_app_settings(SettingsService.get_settings(db))
        record = compute_appointment_reminder(appointment, settings, venue_timezone())
        if record is None:
            logger.debug(f"Appointment reminders disabled, none scheduled for {appointment.id}")
            return None

        reminder = ReminderService._persist(db, record)
        logger.info(f"Scheduled reminder for appointment {appointment.id} at {record.scheduled_for}")
        return reminder

    @staticmethod
    def schedule_expiry_reminders(db: Session, customer_product: CustomerProduct) -> List[AppointmentReminder]:
        """
        Queue the expiry reminders of a package: one days_before the expiry
        and one on the expiry day itself. Empty when it never expires.
        """
        records = [
            compute_expiry_reminder(customer_product),
            compute_expiry_reminder(customer_product, days_before=0),
        ]
        if records[0] is None:
            return []
        if records[0].scheduled_for == records[1].scheduled_for:
            records = records[:1]

        reminders = [ReminderService._persist(db, record) for record in records]
        logger.info(
            f"Scheduled {len(reminders)} expiry reminder(s) for customer product {customer_product.id}, "
            f"expiring {customer_product.expiry_date}"
        )
        return reminders

    @staticmethod
    def cancel_appointment_reminders(db: Session, appointment_id, reason: str = "Appointment cancelled") -> int:
        """Fail every pending reminder of the appointment"""
        count = db.query(AppointmentReminder).filter(
            AppointmentReminder.appointment_id == appointment_id,
            AppointmentReminder.status == PENDING,
        ).update(
            {"status": FAILED, "error_message": reason},
            synchronize_session="fetch",
        )
        logger.info(f"Cancelled {count} pending reminders for appointment {appointment_id}")
        return count

    @staticmethod
    def cancel_expiry_reminders(db: Session, customer_product_id, reason: str = "Customer product removed") -> int:
        return db.query(AppointmentReminder).filter(
            AppointmentReminder.customer_product_id == customer_product_id,
            AppointmentReminder.status == PENDING,
        ).update(
            {"status": FAILED, "error_message": reason},
            synchronize_session="fetch",
        )

    @staticmethod
    def mark_sent(reminder: AppointmentReminder, sent_at: Optional[datetime] = None) -> AppointmentReminder:
        if reminder.status != PENDING:
            raise ReminderStateError(f"Reminder {reminder.id} is {reminder.status}, cannot mark sent")
        reminder.status = SENT
        reminder.sent_at = sent_at or utcnow()
        return reminder

    @staticmethod
    def mark_failed(reminder: AppointmentReminder, error_message: str) -> AppointmentReminder:
        if reminder.status != PENDING:
            raise ReminderStateError(f"Reminder {reminder.id} is {reminder.status}, cannot mark failed")
        reminder.status = FAILED
        reminder.error_message = error_message
        return reminder

    @staticmethod
    def get_due_reminders(db: Session, now: Optional[datetime] = None) -> List[AppointmentReminder]:
        now = as_utc(now or utcnow())
        return db.query(AppointmentReminder).filter(
            AppointmentReminder.status == PENDING,
            AppointmentReminder.scheduled_for <= now,
        ).order_by(AppointmentReminder.scheduled_for).all()

    @staticmethod
    def _render_message(db: Session, reminder: AppointmentReminder, app_settings) -> str:
        if reminder.reminder_type == "product_expiry":
            customer_product = db.query(CustomerProduct).filter(
                CustomerProduct.id == reminder.customer_product_id
            ).first()
            if not customer_product:
                raise ValueError("Customer product not found")
            customer = db.query(Customer).filter(Customer.id == reminder.customer_id).first()
            template = (customer_product.product.expiry_reminder_template
                        if customer_product.product else None) or DEFAULT_EXPIRY_REMINDER_TEMPLATE
            expiry = customer_product.expiry_date
            return (
                template
                .replace("{customerName}", (customer.name if customer else None) or "Quý khách")
                .replace("{productName}", customer_product.product_name)
                .replace("{expiryDate}", expiry.strftime("%d/%m/%Y") if expiry else "")
                .replace("{remainingSessions}", str(customer_product.remaining_sessions))
            )

        appointment = db.query(Appointment).filter(Appointment.id == reminder.appointment_id).first()
        if not appointment:
            raise ValueError("Appointment not found")
        template = reminder_settings_from_app_settings(app_settings).message_template
        return render_appointment_message(template, appointment)

    @staticmethod
    def post_system_message(db: Session, customer_id, content: str, open_conversation: bool = False) -> Message:
        """
        Append a system message to the customer's most recent conversation.
        With open_conversation a customer without one gets a new conversation.
        """
        conversation = db.query(Conversation).filter(
            Conversation.customer_id == customer_id
        ).order_by(Conversation.updated_at.desc()).first()
        if not conversation:
            if not open_conversation:
                raise ValueError("No conversation found for customer")
            conversation = Conversation(customer_id=customer_id, status="open")
            db.add(conversation)
            db.flush()
            logger.info(f"Opened conversation {conversation.id} for customer {customer_id}")

        message = Message(
            conversation_id=conversation.id,
            customer_id=customer_id,
            sender="system",
            type="system",
            content=content,
            is_read=False,
            timestamp=utcnow(),
        )
        db.add(message)
        conversation.last_message_at = message.timestamp
        conversation.last_message_preview = content[:100]
        db.flush()
        return message

    @staticmethod
    def process_due_reminders(db: Session, notifier: Notifier, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Dispatch every pending reminder that is due. Each reminder ends up
        sent or failed; one failure never stops the batch.
        """
        app_settings = SettingsService.get_settings(db)
        appointment_reminders_enabled = app_settings.appointment_reminder_enabled is not False

        stats = {"sent": 0, "failed": 0, "skipped": 0}
        for reminder in ReminderService.get_due_reminders(db, now):
            if reminder.reminder_type == "appointment" and not appointment_reminders_enabled:
                stats["skipped"] += 1
                continue

            try:
                content = ReminderService._render_message(db, reminder, app_settings)
                message = ReminderService.post_system_message(
                    db, reminder.customer_id, content,
                    open_conversation=reminder.reminder_type == "product_expiry",
                )
                ReminderService.mark_sent(reminder)
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error(f"Reminder {reminder.id} failed: {e}")
                ReminderService.mark_failed(reminder, str(e))
                db.commit()
                stats["failed"] += 1
                continue

            notifier.notify("reminder:sent", {
                "reminder_id": str(reminder.id),
                "reminder_type": reminder.reminder_type,
                "customer_id": str(reminder.customer_id),
                "conversation_id": str(message.conversation_id),
                "content": message.content,
            })
            stats["sent"] += 1

        logger.info(f"Reminder dispatch finished: {stats}")
        return stats
