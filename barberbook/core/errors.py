"""Booking error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations

from fastapi import status


class BookingError(Exception):
    """Base class for errors surfaced to booking callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    default_message: str = "Unexpected booking error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    default_message = "Invalid booking request"


class SlotTaken(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "slot_taken"
    default_message = "The selected time slot is no longer available"


class CustomerLimitExceeded(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "customer_limit_exceeded"
    default_message = "Maximum reservations per customer reached for this date"


class DayLimitExceeded(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "day_limit_exceeded"
    default_message = "No more reservations are accepted for this date"


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Reservation not found"


class AlreadyFinalized(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_finalized"
    default_message = "Reservation is already cancelled or rescheduled"


class DependencyUnavailable(BookingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "dependency_unavailable"
    default_message = "A required backend dependency is unavailable"


class AuthError(BookingError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "not_authenticated"
    default_message = "Could not validate credentials"


class Internal(BookingError):
    """Unexpected failure; the message is never shown verbatim to callers."""


__all__ = [
    "AlreadyFinalized",
    "AuthError",
    "BookingError",
    "CustomerLimitExceeded",
    "DayLimitExceeded",
    "DependencyUnavailable",
    "Internal",
    "NotFound",
    "SlotTaken",
    "ValidationError",
]
