"""Error taxonomy for the availability and booking core.

Every error carries the HTTP status it maps to and a message that is safe
to show to the person booking. Routes never build error payloads by hand;
the handler registered in ``app.main`` renders ``{"error": message}``.
"""

from __future__ import annotations


class BookingError(Exception):
    status_code: int = 400
    default_message: str = "Booking request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    """Malformed or missing input (notes too long, bad date, ...)."""

    default_message = "Invalid booking request"


class InvalidProfessional(BookingError):
    """Professional missing, inactive, or owned by another business."""

    default_message = "Invalid professional"


class InvalidService(BookingError):
    """Service missing, inactive, or owned by another business."""

    default_message = "Invalid service"


class SlotConflict(BookingError):
    """The requested slot was taken between the availability read and the write."""

    status_code = 409
    default_message = "This time slot is no longer available, please pick another time"


class IdentityResolutionError(BookingError):
    """The client identity could neither be found nor created."""

    default_message = "Could not resolve client identity"


class UnexpectedError(BookingError):
    status_code = 500
    default_message = "Unexpected error, please try again"


class AppointmentNotFound(BookingError):
    status_code = 404
    default_message = "Appointment not found"


class InvalidStatusTransition(BookingError):
    default_message = "Invalid appointment status change"
