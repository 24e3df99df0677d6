"""Tests for booking, cancelling, rescheduling and completing appointments"""
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from aetherchat.core.exceptions import (
    AppointmentNotFound,
    BookingError,
    BranchNotFound,
    CustomerNotFound,
    NoSessionsRemaining,
    SlotUnavailable,
)
from aetherchat.models import Appointment, AppointmentReminder
from aetherchat.services.appointment.appointment_service import AppointmentService
from aetherchat.services.availability.availability_service import AvailabilityService
from aetherchat.utils.datetime_utils import as_utc
from tests.conftest import NOW, SATURDAY, TUESDAY, VENUE_TZ, WEDNESDAY


def book(db, customer, product, date_str=TUESDAY, time_str="10:00", **kwargs):
    kwargs.setdefault("now", NOW)
    return AppointmentService.book_appointment(db, customer.id, product.id, date_str, time_str, **kwargs)


@pytest.mark.integration
class TestBookAppointment:

    def test_book_single(self, db, app_settings, customer, product, notifier):
        appointments = book(db, customer, product, notifier=notifier)

        assert len(appointments) == 1
        appointment = appointments[0]
        assert appointment.status == "booked"
        assert appointment.date == TUESDAY
        assert appointment.time == "10:00"
        assert appointment.service == product.name
        assert appointment.duration_minutes == 60
        assert appointment.is_session_used is False
        assert notifier.kinds() == ["appointment:created"]

    def test_reminder_scheduled_day_before(self, db, app_settings, customer, product):
        appointment = book(db, customer, product)[0]

        reminders = db.query(AppointmentReminder).filter(
            AppointmentReminder.appointment_id == appointment.id
        ).all()
        assert len(reminders) == 1
        assert reminders[0].status == "pending"
        assert reminders[0].reminder_type == "appointment"
        expected = datetime(2030, 6, 3, 9, 0, tzinfo=VENUE_TZ).astimezone(timezone.utc)
        assert as_utc(reminders[0].scheduled_for) == expected

    def test_full_slot_suggests_alternatives(self, db, app_settings, customer, other_customer, product):
        book(db, customer, product)

        with pytest.raises(SlotUnavailable) as exc_info:
            book(db, other_customer, product)

        suggestions = [(s.date, s.time) for s in exc_info.value.suggested_slots]
        assert suggestions == [(TUESDAY, "11:00"), (WEDNESDAY, "09:00"), (WEDNESDAY, "10:00")]
        assert db.query(Appointment).count() == 1

    def test_weekly_off_day_rejected(self, db, app_settings, customer, product):
        with pytest.raises(SlotUnavailable) as exc_info:
            book(db, customer, product, date_str=SATURDAY)

        assert "ngày nghỉ" in exc_info.value.reason
        # Sunday is off as well, suggestions start on Monday
        assert exc_info.value.suggested_slots[0].date == "2030-06-10"
        assert exc_info.value.suggested_slots[0].time == "09:00"

    def test_time_outside_working_hours(self, db, app_settings, customer, product):
        with pytest.raises(SlotUnavailable) as exc_info:
            book(db, customer, product, time_str="12:00")
        assert "12:00" in exc_info.value.reason

    def test_past_slot_rejected(self, db, app_settings, customer, product):
        now = datetime(2030, 6, 4, 10, 30, tzinfo=VENUE_TZ)
        with pytest.raises(SlotUnavailable):
            book(db, customer, product, time_str="10:00", now=now)
        assert book(db, customer, product, time_str="11:00", now=now)

    def test_weekly_recurrence(self, db, app_settings, customer, product):
        appointments = book(db, customer, product, recurrence_type="weekly", recurrence_count=3)

        assert [a.date for a in appointments] == ["2030-06-04", "2030-06-11", "2030-06-18"]
        assert db.query(AppointmentReminder).count() == 3

    def test_recurrence_all_or_nothing(self, db, app_settings, customer, product):
        app_settings.one_time_off_dates = ["2030-06-11"]
        db.commit()

        with pytest.raises(SlotUnavailable) as exc_info:
            book(db, customer, product, recurrence_type="weekly", recurrence_count=3)
        assert exc_info.value.date == "2030-06-11"
        assert db.query(Appointment).count() == 0

    def test_unknown_customer(self, db, app_settings, product):
        with pytest.raises(CustomerNotFound):
            AppointmentService.book_appointment(db, uuid4(), product.id, TUESDAY, "10:00", now=NOW)

    def test_inactive_product(self, db, app_settings, customer, make_product):
        product = make_product(name="Ngừng bán", is_active=False)
        with pytest.raises(BookingError):
            book(db, customer, product)

    def test_package_of_other_customer(self, db, app_settings, customer, other_customer, product,
                                       make_customer_product):
        package = make_customer_product(other_customer, product)
        with pytest.raises(BookingError):
            book(db, customer, product, customer_product_id=package.id)

    def test_package_of_other_product(self, db, app_settings, customer, make_product, make_customer_product):
        massage = make_product(name="Massage")
        facial = make_product(name="Facial")
        package = make_customer_product(customer, massage, total=2)

        with pytest.raises(BookingError):
            book(db, customer, facial, customer_product_id=package.id)

        db.refresh(package)
        assert package.used_sessions == 0
        assert db.query(Appointment).count() == 0

    def test_unknown_branch(self, db, app_settings, customer, product):
        with pytest.raises(BranchNotFound):
            book(db, customer, product, branch_id=uuid4())
        assert db.query(Appointment).count() == 0

    def test_inactive_branch(self, db, app_settings, customer, product, branch):
        branch.is_active = False
        db.commit()
        with pytest.raises(BranchNotFound):
            book(db, customer, product, branch_id=branch.id)

    def test_active_branch_recorded(self, db, app_settings, customer, product, branch):
        appointment = book(db, customer, product, branch_id=branch.id)[0]
        assert appointment.branch_id == branch.id

    def test_expired_package(self, db, app_settings, customer, product, make_customer_product):
        package = make_customer_product(customer, product, expiry_date=datetime(2030, 5, 1, tzinfo=timezone.utc))
        with pytest.raises(BookingError):
            book(db, customer, product, customer_product_id=package.id)

    def test_product_working_hours(self, db, app_settings, customer, make_product):
        product = make_product(name="Nail", scheduling_rules={"working_hours": ["14:00"], "service_duration_minutes": 90})
        appointment = book(db, customer, product, time_str="14:00")[0]
        assert appointment.duration_minutes == 90


@pytest.mark.integration
class TestCancelAppointment:

    def test_cancel_frees_slot_and_fails_reminders(self, db, app_settings, customer, product, notifier):
        appointment = book(db, customer, product)[0]

        cancelled = AppointmentService.cancel_appointment(db, appointment.id, "Khách bận", notifier=notifier)

        assert cancelled.status == "cancelled"
        assert cancelled.cancellation_reason == "Khách bận"
        reminder = db.query(AppointmentReminder).one()
        assert reminder.status == "failed"
        assert reminder.error_message == "Appointment cancelled"
        assert AvailabilityService.check_availability(db, TUESDAY, "10:00", product.id, now=NOW).is_available
        assert notifier.kinds() == ["appointment:cancelled"]

    def test_cancel_twice_is_noop(self, db, app_settings, customer, product, notifier):
        appointment = book(db, customer, product)[0]
        AppointmentService.cancel_appointment(db, appointment.id, notifier=notifier)
        AppointmentService.cancel_appointment(db, appointment.id, notifier=notifier)
        assert notifier.kinds() == ["appointment:cancelled"]

    def test_cancel_missing(self, db, app_settings):
        with pytest.raises(AppointmentNotFound):
            AppointmentService.cancel_appointment(db, uuid4())


@pytest.mark.integration
class TestRescheduleAppointment:

    def test_reschedule(self, db, app_settings, customer, product, notifier):
        appointment = book(db, customer, product)[0]

        moved = AppointmentService.reschedule_appointment(
            db, appointment.id, WEDNESDAY, "11:00", now=NOW, notifier=notifier
        )

        assert moved.date == WEDNESDAY
        assert moved.time == "11:00"
        assert moved.status == "rescheduled"
        statuses = sorted(r.status for r in db.query(AppointmentReminder).all())
        assert statuses == ["failed", "pending"]
        assert notifier.kinds() == ["appointment:rescheduled"]

    def test_reschedule_to_own_slot_allowed(self, db, app_settings, customer, product):
        appointment = book(db, customer, product)[0]
        moved = AppointmentService.reschedule_appointment(db, appointment.id, TUESDAY, "10:00", now=NOW)
        assert moved.time == "10:00"

    def test_reschedule_into_full_slot(self, db, app_settings, customer, other_customer, product):
        first = book(db, customer, product)[0]
        book(db, other_customer, product, time_str="11:00")

        with pytest.raises(SlotUnavailable):
            AppointmentService.reschedule_appointment(db, first.id, TUESDAY, "11:00", now=NOW)

    def test_reschedule_cancelled(self, db, app_settings, customer, product):
        appointment = book(db, customer, product)[0]
        AppointmentService.cancel_appointment(db, appointment.id)
        with pytest.raises(BookingError):
            AppointmentService.reschedule_appointment(db, appointment.id, WEDNESDAY, "10:00", now=NOW)


@pytest.mark.integration
class TestSessionUsage:

    def test_mark_used_twice_decrements_once(self, db, app_settings, customer, product,
                                             make_customer_product, notifier):
        package = make_customer_product(customer, product, total=5)
        appointment = book(db, customer, product, customer_product_id=package.id)[0]

        AppointmentService.mark_session_used(db, appointment.id, notifier=notifier)
        AppointmentService.mark_session_used(db, appointment.id, notifier=notifier)

        db.refresh(package)
        assert package.used_sessions == 1
        assert package.remaining_sessions == 4
        assert package.last_used_date is not None
        assert notifier.kinds() == ["appointment:session_used"]

    def test_exhausted_package_rolls_back_flag(self, db, app_settings, customer, product, make_customer_product):
        package = make_customer_product(customer, product, total=1, used=1)
        appointment = book(db, customer, product, customer_product_id=package.id)[0]

        with pytest.raises(NoSessionsRemaining):
            AppointmentService.mark_session_used(db, appointment.id)

        appointment = AppointmentService.get_appointment(db, appointment.id)
        db.refresh(package)
        assert appointment.is_session_used is False
        assert package.used_sessions == 1

    def test_standalone_session_does_not_decrement(self, db, app_settings, customer, product,
                                                   make_customer_product):
        package = make_customer_product(customer, product, total=5)
        appointment = book(db, customer, product, customer_product_id=package.id, is_standalone_session=True)[0]

        used = AppointmentService.mark_session_used(db, appointment.id)

        db.refresh(package)
        assert used.is_session_used is True
        assert package.used_sessions == 0

    def test_cancelled_session_cannot_be_used(self, db, app_settings, customer, product):
        appointment = book(db, customer, product)[0]
        AppointmentService.cancel_appointment(db, appointment.id)
        with pytest.raises(BookingError):
            AppointmentService.mark_session_used(db, appointment.id)

    def test_complete_consumes_session(self, db, app_settings, customer, product, make_customer_product, notifier):
        package = make_customer_product(customer, product, total=3)
        appointment = book(db, customer, product, customer_product_id=package.id)[0]

        completed = AppointmentService.complete_appointment(db, appointment.id, notifier=notifier)

        db.refresh(package)
        assert completed.status == "completed"
        assert completed.is_session_used is True
        assert package.remaining_sessions == 2
        assert notifier.kinds() == ["appointment:session_used", "appointment:completed"]


@pytest.mark.integration
class TestListAppointments:

    def test_filters(self, db, app_settings, customer, other_customer, product):
        book(db, customer, product)
        book(db, other_customer, product, time_str="09:00")
        book(db, customer, product, date_str=WEDNESDAY)

        assert len(AppointmentService.list_appointments(db, date_str=TUESDAY)) == 2
        by_customer = AppointmentService.list_appointments(db, customer_id=customer.id)
        assert [a.date for a in by_customer] == [TUESDAY, WEDNESDAY]
        assert [a.time for a in AppointmentService.list_appointments(db, date_str=TUESDAY)] == ["09:00", "10:00"]
