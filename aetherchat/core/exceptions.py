# aetherchat/core/exceptions.py
"""Domain errors raised by the scheduling core and the services around it"""


class AetherChatError(ValueError):
    """Base class for every domain error"""


# ----------------------------------------------------------------------------
# Scheduling
# ----------------------------------------------------------------------------

class SchedulingError(AetherChatError):
    """Malformed scheduling input"""


class InvalidTimeFormat(SchedulingError):
    """A time-of-day string is not a valid HH:MM value"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid time format: {value!r} (expected HH:MM, 00:00-23:59)")


class InvalidDate(SchedulingError):
    """A calendar date string is not a valid YYYY-MM-DD value"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


class AmbiguousRuleWarning(UserWarning):
    """More than one specific-day rule targets the same date within one scope"""


# ----------------------------------------------------------------------------
# Session ledger
# ----------------------------------------------------------------------------

class SessionLedgerError(AetherChatError):
    """Invalid mutation of a customer product's session counters"""


class NoSessionsRemaining(SessionLedgerError):
    """Consumption attempted on a package with no sessions left"""

    def __init__(self, customer_product_id=None):
        self.customer_product_id = customer_product_id
        super().__init__(f"No sessions remaining for customer product {customer_product_id}")


# ----------------------------------------------------------------------------
# Booking
# ----------------------------------------------------------------------------

class BookingError(AetherChatError):
    """Booking request cannot be fulfilled"""


class SlotUnavailable(BookingError):
    """Requested slot is off, outside working hours or at capacity"""

    def __init__(self, date_str: str, time_str: str, reason: str = "", suggested_slots=None):
        self.date = date_str
        self.time = time_str
        self.reason = reason
        self.suggested_slots = suggested_slots or []
        super().__init__(f"Slot {date_str} {time_str} is not available: {reason}")


class NotFoundError(AetherChatError):
    """Referenced record does not exist"""


class AppointmentNotFound(NotFoundError):
    pass


class CustomerProductNotFound(NotFoundError):
    pass


class ProductNotFound(NotFoundError):
    pass


class CustomerNotFound(NotFoundError):
    pass


class BranchNotFound(NotFoundError):
    pass


# ----------------------------------------------------------------------------
# Reminders
# ----------------------------------------------------------------------------

class ReminderStateError(AetherChatError):
    """Reminder status may only move forward from pending"""
