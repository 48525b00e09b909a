"""
Domain errors raised by the booking services.

Each error carries a stable ``kind`` and the HTTP status the API layer maps it
to. Handlers in ``main`` render them as ``{"detail": message, "type": kind}``.
"""

from typing import Optional


class BookingError(Exception):
    """Base class for recoverable booking-domain failures."""

    kind = "error"
    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(BookingError):
    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class AlreadyBookedError(BookingError):
    kind = "already_booked"
    status_code = 409
    default_message = "Slot already booked"


class ForbiddenError(BookingError):
    kind = "forbidden"
    status_code = 403
    default_message = "You are not allowed to perform this action"


class TooLateError(BookingError):
    kind = "too_late"
    status_code = 400
    default_message = "Cancellation is only allowed up to 2 hours before the appointment"


class InvalidSlotTimeError(BookingError):
    kind = "invalid_slot_time"
    status_code = 400
    default_message = "Invalid slot date/time"


class BookingValidationError(BookingError):
    kind = "validation_error"
    status_code = 400
    default_message = "Invalid input"


class ConflictError(BookingError):
    kind = "conflict"
    status_code = 409
    default_message = "Request conflicts with the current state"


class BookingNumberExhaustedError(BookingError):
    """Raised when no unique booking number could be generated."""

    kind = "internal_error"
    status_code = 500
    default_message = "Could not allocate a booking number"
