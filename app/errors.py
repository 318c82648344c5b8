"""Booking error taxonomy.

Every error carries the HTTP status it maps to; ``app.main`` turns them into
``{"detail": message}`` responses.
"""


class BookingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Missing or malformed field, or an unknown enum value."""


class LeadTimeError(BookingError):
    """Slot starts too soon to be booked."""


class HorizonError(BookingError):
    """Slot is too far ahead to be booked."""


class ConflictError(BookingError):
    """Slot is already held by a pending booking."""

    status_code = 409


class SlotBlockedError(ConflictError):
    """Slot was marked unavailable by the administrator."""


class InvalidTransitionError(ConflictError):
    pass


class NotFoundError(BookingError):
    status_code = 404


class UnauthorizedError(BookingError):
    status_code = 401


class DownstreamNotificationFailure(Exception):
    """SMS provider rejected or failed a send. Logged, never returned to callers."""
