"""
Domain-specific exception hierarchy for the booking core.
"""


class BookingError(Exception):
    """Base class for all application-level errors."""


class ValidationError(BookingError):
    """Raised when input to the calculator or lifecycle is malformed."""


class StateTransitionError(BookingError):
    """Raised when a booking cannot move from its current status via an action."""

    def __init__(self, status: str, action: str, booking_id: str | None = None):
        self.status = status
        self.action = action
        self.booking_id = booking_id
        target = f"booking {booking_id}" if booking_id else "booking"
        super().__init__(f"Cannot {action} {target}: status is '{status}'")


class CancellationWindowError(BookingError):
    """Raised when cancellation is attempted too close to (or after) the appointment."""


class ConcurrencyConflictError(BookingError):
    """Raised when the chosen slot was taken between availability query and booking."""


class BookingNotFoundError(BookingError):
    """Raised when a booking id is unknown to the repository."""


class RepositoryError(BookingError):
    """Raised when booking data cannot be loaded or stored."""
