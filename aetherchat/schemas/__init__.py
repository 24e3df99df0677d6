# aetherchat/schemas/__init__.py
from .scheduling import (
    SpecificDayRule,
    SchedulingScope,
    SchedulingContext,
    BreakTime,
    BookedSlot,
    SuggestedSlot,
    AvailabilityResult,
    AppointmentReminderSettings,
    ReminderRecord,
)

from .appointment import (
    AvailableSlotsResponse,
    AvailabilityCheckResponse,
    BookAppointmentRequest,
    CancelAppointmentRequest,
    RescheduleAppointmentRequest,
)

from .customer_product import (
    AssignProductRequest,
    UpdateCustomerProductRequest,
)

from .settings import UpdateSettingsRequest

__all__ = [
    "SpecificDayRule",
    "SchedulingScope",
    "SchedulingContext",
    "BreakTime",
    "BookedSlot",
    "SuggestedSlot",
    "AvailabilityResult",
    "AppointmentReminderSettings",
    "ReminderRecord",
    "AvailableSlotsResponse",
    "AvailabilityCheckResponse",
    "BookAppointmentRequest",
    "CancelAppointmentRequest",
    "RescheduleAppointmentRequest",
    "AssignProductRequest",
    "UpdateCustomerProductRequest",
    "UpdateSettingsRequest",
]
