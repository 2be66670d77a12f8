"""
Error taxonomy for booking operations.

Every failure a booking command can surface to a caller is one of the classes
below. Route handlers never build these responses themselves; the exception
handlers registered in ``main.py`` render them.
"""

from typing import Any, Optional


class BookingServiceError(Exception):
    """Base class for all classified booking failures."""

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: str = "BOOKING_ERROR",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class ValidationError(BookingServiceError):
    """Missing or malformed input, rejected before storage is touched."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="VALIDATION_ERROR", details=details)


class ConflictError(BookingServiceError):
    """The requested slot (or name) is already taken."""

    status_code = 409

    TABLE_ALREADY_BOOKED = "table_already_booked"
    USER_ALREADY_BOOKED = "user_already_booked"
    HALL_CLOSED = "hall_closed"
    DUPLICATE_NAME = "duplicate_name"

    def __init__(self, message: str, reason: str, details: Optional[Any] = None):
        self.reason = reason
        super().__init__(message, error_code=reason.upper(), details=details)


class NotFoundOrForbidden(BookingServiceError):
    """Target is absent or not owned by the caller; the two are not distinguished."""

    status_code = 404

    def __init__(self, message: str = "Booking not found or you do not have permission to cancel it."):
        super().__init__(message, error_code="NOT_FOUND_OR_FORBIDDEN")


class StorageUnavailable(BookingServiceError):
    """The relational store could not be reached. Safe to retry."""

    status_code = 503

    def __init__(self, message: str = "Storage is temporarily unavailable. Please retry.", details: Optional[Any] = None):
        super().__init__(message, error_code="STORAGE_UNAVAILABLE", details=details)
