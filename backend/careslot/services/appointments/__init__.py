from .booking import APPOINTMENT_TYPES, BookingRequest, book, scheduled_start
from .lifecycle import TERMINAL_STATUSES, TRANSITIONS, cancel, complete, confirm, reject
from .queries import list_appointments, pending_queue, urgency_label

__all__ = [
    "APPOINTMENT_TYPES",
    "BookingRequest",
    "book",
    "scheduled_start",
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "cancel",
    "complete",
    "confirm",
    "reject",
    "list_appointments",
    "pending_queue",
    "urgency_label",
]
