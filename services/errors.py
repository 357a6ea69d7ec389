"""
Booking and wallet errors.

Everything except PersistenceError is an expected business outcome: callers
catch it and show its message. Each error carries a stable ``code`` and the
HTTP status the API answers with.
"""

from typing import Any, Dict, Optional


class BookingError(Exception):
    """Base class for every failure the booking core reports."""

    status_code = 400
    default_message = "Booking request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.code = self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        out = {"error": self.message, "code": self.code}
        if self.details:
            out["details"] = self.details
        return out


class ValidationError(BookingError):
    default_message = "Invalid request"


class InvalidTimeSlot(ValidationError):
    default_message = "Invalid time slot. Use HH:MM or h:mm AM/PM"


class InvalidQRCode(ValidationError):
    default_message = "This QR code is not a PayGo center check-in code"


class UserNotFound(BookingError):
    status_code = 404
    default_message = "User not found"


class NotFound(BookingError):
    status_code = 404
    default_message = "Booking not found or access denied"


class CenterNotFound(BookingError):
    status_code = 404
    default_message = "Center not found"


class InvalidState(BookingError):
    status_code = 409
    default_message = "Only confirmed bookings can be cancelled"


class InvalidTransition(InvalidState):
    """The conditional status update found a different stored status."""

    default_message = "Booking was already updated"


class WindowClosed(BookingError):
    status_code = 409
    default_message = "Only bookings more than 1 hour before the session can be cancelled"


class InsufficientBalance(BookingError):
    status_code = 402
    default_message = "Insufficient wallet balance"


class CenterMismatch(BookingError):
    status_code = 409
    default_message = "This booking is for a different center"


class AlreadyCompleted(BookingError):
    status_code = 409
    default_message = "Attendance already marked"


class AlreadyCancelled(BookingError):
    status_code = 409
    default_message = "Cannot mark attendance for cancelled booking"


class NotToday(BookingError):
    status_code = 409
    default_message = "Attendance can only be marked on the day of booking"


class DuplicateTransaction(BookingError):
    status_code = 409
    default_message = "Wallet transaction already recorded"


class PersistenceError(BookingError):
    """The database rejected or failed a write. Safe to retry only from the top."""

    status_code = 503
    default_message = "Could not save your changes, please try again"
