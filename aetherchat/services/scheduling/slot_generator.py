# aetherchat/services/scheduling/slot_generator.py
"""Bookable slot generation for a resolved scheduling context"""
import logging
from typing import Iterable, List, Optional, Union

from aetherchat.schemas.scheduling import BookedSlot, BreakTime, SchedulingContext
from aetherchat.services.scheduling.time_slots import overlaps, time_to_minutes

logger = logging.getLogger(__name__)

CANCELLED_STATUS = "cancelled"


def _as_booked(slot: Union[BookedSlot, dict]) -> BookedSlot:
    return slot if isinstance(slot, BookedSlot) else BookedSlot.model_validate(slot)


def _as_break(window: Union[BreakTime, dict]) -> BreakTime:
    return window if isinstance(window, BreakTime) else BreakTime.model_validate(window)


def count_overlapping_bookings(
        slot_start: int,
        duration_minutes: int,
        booked: Iterable[BookedSlot],
        default_duration: Optional[int] = None
) -> int:
    """Count non-cancelled bookings whose window intersects the slot window"""
    default_duration = default_duration or duration_minutes
    count = 0
    for booking in booked:
        if booking.status == CANCELLED_STATUS:
            continue
        booking_start = time_to_minutes(booking.time)
        booking_end = booking_start + (booking.duration_minutes or default_duration)
        if overlaps(slot_start, duration_minutes, booking_start, booking_end):
            count += 1
    return count


def generate_available_slots(
        context: SchedulingContext,
        existing_appointments: Iterable[Union[BookedSlot, dict]] = (),
        break_times: Iterable[Union[BreakTime, dict]] = ()
) -> List[str]:
    """
    Return bookable "HH:MM" slot starts for the context's date.

    Slots overlapping a break window, or already holding number_of_staff
    overlapping bookings, are dropped. Configured order is kept.
    """
    if context.is_off:
        return []

    duration = context.service_duration_minutes
    booked = [_as_booked(slot) for slot in existing_appointments]
    breaks = [
        (time_to_minutes(window.start_time), time_to_minutes(window.end_time))
        for window in (_as_break(b) for b in break_times)
    ]

    available = []
    for slot in context.working_hours:
        start = time_to_minutes(slot)

        if any(overlaps(start, duration, b_start, b_end) for b_start, b_end in breaks):
            continue

        taken = count_overlapping_bookings(start, duration, booked)
        if taken >= context.number_of_staff:
            continue

        available.append(slot)

    logger.debug(f"{context.date}: {len(available)}/{len(context.working_hours)} slots available")
    return available


def is_slot_available(
        context: SchedulingContext,
        time_str: str,
        existing_appointments: Iterable[Union[BookedSlot, dict]] = (),
        break_times: Iterable[Union[BreakTime, dict]] = ()
) -> bool:
    return time_str in generate_available_slots(context, existing_appointments, break_times)
