"""
Booking error taxonomy.

Every failure the booking core reports to its caller is a BookingError
subclass. `code` is stable for API clients; `status_code` is what the HTTP
layer answers with.
"""


class BookingError(Exception):
    code = "booking_error"
    status_code = 400
    default_message = "Booking request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidWindow(BookingError):
    code = "invalid_window"
    status_code = 422
    default_message = "Invalid schedule window"


class PastDateError(BookingError):
    code = "past_date"
    status_code = 400
    default_message = "Date and time are already in the past"


class InvalidSlotError(BookingError):
    code = "invalid_slot"
    status_code = 422
    default_message = "Requested time is not a bookable slot"


class SlotConflictError(BookingError):
    code = "slot_conflict"
    status_code = 409
    default_message = "This time slot was just taken, please pick another one"


class AppointmentNotFound(BookingError):
    code = "appointment_not_found"
    status_code = 404
    default_message = "Appointment not found"


class InvalidTransitionError(BookingError):
    code = "invalid_transition"
    status_code = 409
    default_message = "This appointment was already acted upon"


class PrematureCompletionError(BookingError):
    code = "premature_completion"
    status_code = 409
    default_message = "Appointment cannot be completed before its scheduled time"


class MissingReasonError(BookingError):
    code = "missing_reason"
    status_code = 422
    default_message = "A reason is required"


class TransientStoreError(BookingError):
    code = "store_unavailable"
    status_code = 503
    default_message = "Appointment store is temporarily unavailable, please retry"
