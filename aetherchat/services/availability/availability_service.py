# ===== aetherchat/services/availability/availability_service.py =====
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy.orm import Session

from aetherchat.config.settings import get_settings
from aetherchat.core.exceptions import BranchNotFound, ProductNotFound
from aetherchat.models.appointment import Appointment
from aetherchat.models.branch import Branch
from aetherchat.models.product import Product
from aetherchat.schemas.scheduling import AvailabilityResult, BookedSlot, SchedulingContext, SuggestedSlot
from aetherchat.services.scheduling.rule_resolution import (
    resolve_scheduling_context,
    scope_from_app_settings,
    scope_from_branch,
    scope_from_product,
)
from aetherchat.services.scheduling.slot_generator import CANCELLED_STATUS, generate_available_slots
from aetherchat.services.scheduling.time_slots import format_date, parse_date, parse_time, time_to_minutes
from aetherchat.services.settings.settings_service import SettingsService
from aetherchat.utils.datetime_utils import venue_now, venue_timezone

logger = logging.getLogger(__name__)

DateInput = Union[str, date]


def _as_date(value: DateInput) -> date:
    return value if isinstance(value, date) else parse_date(value)


class AvailabilityService:
    """Resolves rules for a date and produces bookable slots from persisted data"""

    @staticmethod
    def load_scheduling_inputs(
            db: Session,
            product_id: Optional[UUID] = None,
            branch_id: Optional[UUID] = None
    ) -> Tuple[object, Optional[Branch], Optional[Product]]:
        """Settings row, branch and product for a booking request"""
        settings = SettingsService.get_settings(db)

        product = None
        if product_id:
            product = db.query(Product).filter(Product.id == product_id).first()
            if not product:
                raise ProductNotFound(f"Product {product_id} not found")

        branch = None
        if branch_id:
            branch = db.query(Branch).filter(Branch.id == branch_id, Branch.is_active == True).first()
            if not branch:
                raise BranchNotFound(f"Branch {branch_id} not found or inactive")

        return settings, branch, product

    @staticmethod
    def resolve_context(
            db: Session,
            target_date: DateInput,
            product_id: Optional[UUID] = None,
            branch_id: Optional[UUID] = None
    ) -> SchedulingContext:
        settings, branch, product = AvailabilityService.load_scheduling_inputs(db, product_id, branch_id)
        return resolve_scheduling_context(
            target_date,
            scope_from_app_settings(settings),
            scope_from_branch(branch),
            scope_from_product(product),
        )

    @staticmethod
    def get_booked_slots(
            db: Session,
            target_date: DateInput,
            product_id: Optional[UUID] = None,
            branch_id: Optional[UUID] = None,
            exclude_appointment_id: Optional[UUID] = None
    ) -> List[BookedSlot]:
        """Non-cancelled appointments on the date, scoped to product and branch"""
        query = db.query(Appointment).filter(
            Appointment.date == format_date(_as_date(target_date)),
            Appointment.status != CANCELLED_STATUS,
        )
        if product_id:
            query = query.filter(Appointment.product_id == product_id)
        if branch_id:
            query = query.filter(Appointment.branch_id == branch_id)
        if exclude_appointment_id:
            query = query.filter(Appointment.id != exclude_appointment_id)

        return [
            BookedSlot(time=a.time, status=a.status, duration_minutes=a.duration_minutes)
            for a in query.all()
        ]

    @staticmethod
    def filter_past_slots(target_date: date, slots: List[str], now: datetime) -> List[str]:
        """Drop slots that already started at `now` (venue local time)"""
        if now.tzinfo is not None:
            now = now.astimezone(venue_timezone())
        today = now.date()

        if target_date < today:
            return []
        if target_date > today:
            return slots

        now_minutes = now.hour * 60 + now.minute
        return [slot for slot in slots if time_to_minutes(slot) > now_minutes]

    @staticmethod
    def get_available_slots(
            db: Session,
            target_date: DateInput,
            product_id: Optional[UUID] = None,
            branch_id: Optional[UUID] = None,
            now: Optional[datetime] = None,
            exclude_appointment_id: Optional[UUID] = None
    ) -> List[str]:
        """Bookable "HH:MM" starts for the date, past slots removed"""
        target = _as_date(target_date)
        context = AvailabilityService.resolve_context(db, target, product_id, branch_id)
        booked = AvailabilityService.get_booked_slots(
            db, target, product_id, branch_id, exclude_appointment_id
        )
        break_times = SettingsService.get_break_times(db)

        slots = generate_available_slots(context, booked, break_times)
        return AvailabilityService.filter_past_slots(target, slots, now or venue_now())

    @staticmethod
    def find_next_available_slots(
            db: Session,
            start_date: date,
            after_time: Optional[str] = None,
            product_id: Optional[UUID] = None,
            branch_id: Optional[UUID] = None,
            now: Optional[datetime] = None,
            limit: Optional[int] = None,
            search_days: Optional[int] = None
    ) -> List[SuggestedSlot]:
        """
        Suggest free slots from start_date onward. On start_date only slots
        after `after_time` are considered.
        """
        app_settings = get_settings()
        limit = limit or app_settings.SUGGESTION_MAX_SLOTS
        search_days = search_days or app_settings.SUGGESTION_SEARCH_DAYS

        branch_name = None
        if branch_id:
            branch = db.query(Branch).filter(Branch.id == branch_id).first()
            branch_name = branch.name if branch else None

        suggestions: List[SuggestedSlot] = []
        for offset in range(search_days):
            day = start_date + timedelta(days=offset)
            slots = AvailabilityService.get_available_slots(db, day, product_id, branch_id, now=now)

            if offset == 0 and after_time:
                after = time_to_minutes(after_time)
                slots = [s for s in slots if time_to_minutes(s) > after]

            for slot in slots:
                suggestions.append(SuggestedSlot(date=format_date(day), time=slot, branch=branch_name))
                if len(suggestions) >= limit:
                    return suggestions

        return suggestions

    @staticmethod
    def check_availability(
            db: Session,
            target_date: DateInput,
            time_str: str,
            product_id: Optional[UUID] = None,
            branch_id: Optional[UUID] = None,
            now: Optional[datetime] = None,
            exclude_appointment_id: Optional[UUID] = None
    ) -> AvailabilityResult:
        """Is time_str bookable on the date; alternatives suggested when not"""
        parse_time(time_str)
        target = _as_date(target_date)
        date_str = format_date(target)
        now = now or venue_now()

        context = AvailabilityService.resolve_context(db, target, product_id, branch_id)

        def _suggest(start: date, after: Optional[str]) -> List[SuggestedSlot]:
            return AvailabilityService.find_next_available_slots(
                db, start, after, product_id, branch_id, now=now
            )

        if context.is_off:
            return AvailabilityResult(
                is_available=False,
                reason=f"Ngày {date_str} là ngày nghỉ.",
                suggested_slots=_suggest(target + timedelta(days=1), None),
            )

        if not context.working_hours or context.number_of_staff <= 0:
            return AvailabilityResult(
                is_available=False,
                reason=f"Không có giờ làm việc hoặc nhân viên được cấu hình cho ngày {date_str}.",
                suggested_slots=_suggest(target + timedelta(days=1), None),
            )

        if time_str not in context.working_hours:
            return AvailabilityResult(
                is_available=False,
                reason=(
                    f"Thời gian {time_str} không phải là giờ bắt đầu dịch vụ hợp lệ trong ngày {date_str}. "
                    f"Các giờ có thể đặt: {', '.join(context.working_hours)}."
                ),
                suggested_slots=_suggest(target, time_str),
            )

        available = AvailabilityService.get_available_slots(
            db, target, product_id, branch_id, now=now, exclude_appointment_id=exclude_appointment_id
        )
        if time_str in available:
            return AvailabilityResult(is_available=True)

        logger.info(f"Slot {date_str} {time_str} unavailable for product {product_id}")
        return AvailabilityResult(
            is_available=False,
            reason=f"Khung giờ {time_str} ngày {date_str} đã kín lịch hoặc đã qua.",
            suggested_slots=_suggest(target, time_str),
        )
