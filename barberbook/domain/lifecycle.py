"""
Booking state machine.

All status changes go through ``TRANSITIONS``; customer and owner flows share
the same table instead of checking statuses on their own.
"""

from dataclasses import replace
from enum import Enum
from typing import Dict, Tuple

from pendulum import DateTime

from .exceptions import CancellationWindowError, StateTransitionError, ValidationError
from .models import Booking, BookingStatus


class BookingAction(str, Enum):
    """Actions that move a booking between statuses."""
    CONFIRM = "confirm"
    COMPLETE = "complete"
    CANCEL = "cancel"


TRANSITIONS: Dict[Tuple[BookingStatus, BookingAction], BookingStatus] = {
    (BookingStatus.PENDING, BookingAction.CONFIRM): BookingStatus.CONFIRMED,
    (BookingStatus.PENDING, BookingAction.CANCEL): BookingStatus.CANCELLED,
    (BookingStatus.CONFIRMED, BookingAction.COMPLETE): BookingStatus.COMPLETED,
    (BookingStatus.CONFIRMED, BookingAction.CANCEL): BookingStatus.CANCELLED,
}

TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})


def next_status(status: BookingStatus, action: BookingAction) -> BookingStatus:
    """
    Look up the status reached by applying ``action`` to ``status``.

    Raises:
        StateTransitionError: If the table has no entry for the pair
    """
    try:
        return TRANSITIONS[(BookingStatus(status), BookingAction(action))]
    except KeyError:
        raise StateTransitionError(
            status=BookingStatus(status).value,
            action=BookingAction(action).value,
        ) from None


class BookingLifecycle:
    """
    Creates bookings and applies status transitions.

    Every method returns a new Booking; persisting it is the caller's job.
    """

    def __init__(self, cancellation_window_hours: int = 2):
        if cancellation_window_hours < 0:
            raise ValidationError(
                f"Cancellation window must not be negative, got {cancellation_window_hours}"
            )
        self.cancellation_window_hours = cancellation_window_hours

    def create(
        self,
        *,
        business_id: str,
        barber_id: str,
        customer_id: str,
        service_id: str,
        date_time: DateTime,
        duration_minutes: int,
        now: DateTime,
        notes: str | None = None,
    ) -> Booking:
        """
        Build a new pending booking.

        The caller must make sure the interval is still free; see
        ``BookingRepositoryProtocol.reserve_slot``.
        """
        for label, value in (
            ("business_id", business_id),
            ("barber_id", barber_id),
            ("customer_id", customer_id),
            ("service_id", service_id),
        ):
            if not value or not str(value).strip():
                raise ValidationError(f"{label} must not be empty")

        if duration_minutes <= 0:
            raise ValidationError(f"Duration must be positive, got {duration_minutes}")

        return Booking(
            business_id=business_id,
            barber_id=barber_id,
            customer_id=customer_id,
            service_id=service_id,
            date_time=date_time,
            duration_minutes=duration_minutes,
            status=BookingStatus.PENDING,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    def confirm(self, booking: Booking, now: DateTime) -> Booking:
        """pending -> confirmed."""
        return self._apply(booking, BookingAction.CONFIRM, now)

    def complete(self, booking: Booking, now: DateTime) -> Booking:
        """confirmed -> completed."""
        return self._apply(booking, BookingAction.COMPLETE, now)

    def cancel(self, booking: Booking, now: DateTime) -> Booking:
        """
        pending|confirmed -> cancelled.

        Raises:
            StateTransitionError: If the booking is already completed or cancelled
            CancellationWindowError: If the appointment has started or the
                lockout window before it has been reached
        """
        status = next_status_for(booking, BookingAction.CANCEL)

        if now >= booking.date_time:
            raise CancellationWindowError(
                f"Appointment at {booking.date_time.format('YYYY-MM-DD HH:mm')} has already started"
            )

        deadline = booking.date_time.subtract(hours=self.cancellation_window_hours)
        if now > deadline:
            raise CancellationWindowError(
                f"Cancellation closes {self.cancellation_window_hours}h before the appointment "
                f"(deadline {deadline.format('YYYY-MM-DD HH:mm')})"
            )

        return replace(booking, status=status, updated_at=now)

    def can_cancel(self, booking: Booking, now: DateTime) -> bool:
        """Whether ``cancel`` would succeed right now."""
        try:
            self.cancel(booking, now)
        except (StateTransitionError, CancellationWindowError):
            return False
        return True

    def _apply(self, booking: Booking, action: BookingAction, now: DateTime) -> Booking:
        status = next_status_for(booking, action)
        return replace(booking, status=status, updated_at=now)


def next_status_for(booking: Booking, action: BookingAction) -> BookingStatus:
    """Like ``next_status`` but reports the booking id on failure."""
    try:
        return next_status(booking.status, action)
    except StateTransitionError as exc:
        raise StateTransitionError(
            status=exc.status, action=exc.action, booking_id=booking.id
        ) from None
