"""Tests for reminder persistence and dispatch"""
from datetime import datetime, timedelta, timezone

import pytest

from aetherchat.core.exceptions import ReminderStateError
from aetherchat.models import AppointmentReminder, Conversation, Message
from aetherchat.services.appointment.appointment_service import AppointmentService
from aetherchat.services.reminder.reminder_service import ReminderService
from aetherchat.services.session.customer_product_service import CustomerProductService
from tests.conftest import NOW, TUESDAY

# Reminder for the Tuesday booking fires Monday 09:00 venue time (02:00 UTC)
DUE = datetime(2030, 6, 3, 3, 0, tzinfo=timezone.utc)


def book_tuesday(db, customer, product):
    return AppointmentService.book_appointment(db, customer.id, product.id, TUESDAY, "10:00", now=NOW)[0]


@pytest.mark.integration
class TestProcessDueReminders:

    def test_sends_to_latest_conversation(self, db, app_settings, customer, conversation, product, notifier):
        book_tuesday(db, customer, product)

        stats = ReminderService.process_due_reminders(db, notifier, now=DUE)

        assert stats == {"sent": 1, "failed": 0, "skipped": 0}
        reminder = db.query(AppointmentReminder).one()
        assert reminder.status == "sent"
        assert reminder.sent_at is not None

        message = db.query(Message).one()
        assert message.conversation_id == conversation.id
        assert message.sender == "system"
        assert product.name in message.content
        assert "04/06/2030" in message.content
        assert notifier.kinds() == ["reminder:sent"]

    def test_not_yet_due(self, db, app_settings, customer, conversation, product, notifier):
        book_tuesday(db, customer, product)

        stats = ReminderService.process_due_reminders(db, notifier, now=DUE - timedelta(hours=2))

        assert stats == {"sent": 0, "failed": 0, "skipped": 0}
        assert db.query(AppointmentReminder).one().status == "pending"

    def test_fails_without_conversation(self, db, app_settings, customer, product, notifier):
        book_tuesday(db, customer, product)

        stats = ReminderService.process_due_reminders(db, notifier, now=DUE)

        assert stats["failed"] == 1
        reminder = db.query(AppointmentReminder).one()
        assert reminder.status == "failed"
        assert reminder.error_message == "No conversation found for customer"
        assert notifier.events == []

    def test_disabled_reminders_skipped(self, db, app_settings, customer, conversation, product, notifier):
        book_tuesday(db, customer, product)
        app_settings.appointment_reminder_enabled = False
        db.commit()

        stats = ReminderService.process_due_reminders(db, notifier, now=DUE)

        assert stats == {"sent": 0, "failed": 0, "skipped": 1}
        assert db.query(AppointmentReminder).one().status == "pending"

    def test_disabled_reminders_not_scheduled(self, db, app_settings, customer, product):
        app_settings.appointment_reminder_enabled = False
        db.commit()

        book_tuesday(db, customer, product)

        assert db.query(AppointmentReminder).count() == 0

    def test_expiry_reminder_message(self, db, customer, conversation, make_product, notifier):
        product = make_product(name="Liệu trình da", default_sessions=6, expiry_days=30)
        CustomerProductService.assign_product(
            db, customer.id, product.id, assigned_date=datetime(2030, 6, 1, tzinfo=timezone.utc)
        )

        stats = ReminderService.process_due_reminders(db, notifier, now=datetime(2030, 6, 28, tzinfo=timezone.utc))

        assert stats["sent"] == 1
        message = db.query(Message).one()
        assert customer.name in message.content
        assert "Liệu trình da" in message.content
        assert "01/07/2030" in message.content

    def test_expiry_reminder_opens_conversation(self, db, customer, make_product, notifier):
        product = make_product(name="Gội đầu", default_sessions=3, expiry_days=2)
        CustomerProductService.assign_product(
            db, customer.id, product.id, assigned_date=datetime(2030, 6, 1, tzinfo=timezone.utc)
        )

        stats = ReminderService.process_due_reminders(db, notifier, now=datetime(2030, 6, 3, tzinfo=timezone.utc))

        assert stats == {"sent": 2, "failed": 0, "skipped": 0}
        conversation = db.query(Conversation).filter(Conversation.customer_id == customer.id).one()
        messages = db.query(Message).filter(Message.conversation_id == conversation.id).all()
        assert len(messages) == 2
        assert conversation.last_message_preview is not None

    def test_expiry_day_reminder(self, db, customer, conversation, make_product, notifier):
        product = make_product(name="Liệu trình da", default_sessions=6, expiry_days=30)
        CustomerProductService.assign_product(
            db, customer.id, product.id, assigned_date=datetime(2030, 6, 1, tzinfo=timezone.utc)
        )
        ReminderService.process_due_reminders(db, notifier, now=datetime(2030, 6, 28, tzinfo=timezone.utc))

        stats = ReminderService.process_due_reminders(db, notifier, now=datetime(2030, 7, 1, tzinfo=timezone.utc))

        assert stats == {"sent": 1, "failed": 0, "skipped": 0}
        assert db.query(Message).count() == 2
        assert [r.status for r in db.query(AppointmentReminder).all()] == ["sent", "sent"]


@pytest.mark.integration
class TestReminderStatus:

    def _reminder(self, db, customer, status):
        reminder = AppointmentReminder(
            reminder_type="appointment", customer_id=customer.id, scheduled_for=DUE, status=status
        )
        db.add(reminder)
        db.commit()
        return reminder

    def test_pending_to_sent(self, db, customer):
        reminder = ReminderService.mark_sent(self._reminder(db, customer, "pending"))
        assert reminder.status == "sent"

    def test_pending_to_failed(self, db, customer):
        reminder = ReminderService.mark_failed(self._reminder(db, customer, "pending"), "boom")
        assert reminder.status == "failed"
        assert reminder.error_message == "boom"

    def test_sent_cannot_fail(self, db, customer):
        with pytest.raises(ReminderStateError):
            ReminderService.mark_failed(self._reminder(db, customer, "sent"), "late")

    def test_failed_cannot_be_sent(self, db, customer):
        with pytest.raises(ReminderStateError):
            ReminderService.mark_sent(self._reminder(db, customer, "failed"))
