"""
Tests for the booking state machine.
"""

import pendulum
import pytest

from barberbook.domain.exceptions import (
    CancellationWindowError,
    StateTransitionError,
    ValidationError,
)
from barberbook.domain.lifecycle import (
    TERMINAL_STATUSES,
    TRANSITIONS,
    BookingAction,
    BookingLifecycle,
    next_status,
)
from barberbook.domain.models import Booking, BookingStatus


TZ = "Europe/Berlin"
APPOINTMENT = pendulum.parse("2024-11-25 14:00", tz=TZ)
CREATED = pendulum.parse("2024-11-20 10:00", tz=TZ)


def _booking(status: BookingStatus) -> Booking:
    return Booking(
        id="bk-1",
        business_id="shop",
        barber_id="b1",
        customer_id="c1",
        service_id="s1",
        date_time=APPOINTMENT,
        duration_minutes=30,
        status=status,
        created_at=CREATED,
        updated_at=CREATED,
    )


class TestTransitionTable:
    """Tests for the central transition table."""

    def test_allowed_transitions(self):
        assert next_status(BookingStatus.PENDING, BookingAction.CONFIRM) == BookingStatus.CONFIRMED
        assert next_status(BookingStatus.CONFIRMED, BookingAction.COMPLETE) == BookingStatus.COMPLETED
        assert next_status(BookingStatus.PENDING, BookingAction.CANCEL) == BookingStatus.CANCELLED
        assert next_status(BookingStatus.CONFIRMED, BookingAction.CANCEL) == BookingStatus.CANCELLED

    def test_terminal_statuses_have_no_exits(self):
        for status in TERMINAL_STATUSES:
            for action in BookingAction:
                assert (status, action) not in TRANSITIONS
                with pytest.raises(StateTransitionError):
                    next_status(status, action)

    def test_accepts_plain_strings(self):
        assert next_status("pending", "confirm") == BookingStatus.CONFIRMED

    def test_error_carries_status_and_action(self):
        with pytest.raises(StateTransitionError) as exc_info:
            next_status(BookingStatus.PENDING, BookingAction.COMPLETE)

        assert exc_info.value.status == "pending"
        assert exc_info.value.action == "complete"


class TestBookingLifecycle:
    """Tests for BookingLifecycle."""

    def test_create_returns_pending_booking(self):
        lifecycle = BookingLifecycle()
        now = pendulum.parse("2024-11-24 12:00", tz=TZ)

        booking = lifecycle.create(
            business_id="shop",
            barber_id="b1",
            customer_id="c1",
            service_id="s1",
            date_time=APPOINTMENT,
            duration_minutes=30,
            notes="short on the sides",
            now=now,
        )

        assert booking.status == BookingStatus.PENDING
        assert booking.id is None
        assert booking.created_at == now
        assert booking.updated_at == now
        assert booking.notes == "short on the sides"

    @pytest.mark.parametrize(
        "field, value",
        [("barber_id", ""), ("customer_id", "  "), ("duration_minutes", 0)],
    )
    def test_create_validates_input(self, field, value):
        lifecycle = BookingLifecycle()
        kwargs = dict(
            business_id="shop",
            barber_id="b1",
            customer_id="c1",
            service_id="s1",
            date_time=APPOINTMENT,
            duration_minutes=30,
            now=CREATED,
        )
        kwargs[field] = value

        with pytest.raises(ValidationError):
            lifecycle.create(**kwargs)

    def test_confirm_pending(self):
        lifecycle = BookingLifecycle()
        now = pendulum.parse("2024-11-21 09:00", tz=TZ)

        confirmed = lifecycle.confirm(_booking(BookingStatus.PENDING), now)

        assert confirmed.status == BookingStatus.CONFIRMED
        assert confirmed.updated_at == now
        assert confirmed.created_at == CREATED

    def test_confirm_twice_is_rejected(self):
        lifecycle = BookingLifecycle()

        with pytest.raises(StateTransitionError, match="bk-1"):
            lifecycle.confirm(_booking(BookingStatus.CONFIRMED), CREATED)

    def test_complete_requires_confirmed(self):
        lifecycle = BookingLifecycle()
        now = pendulum.parse("2024-11-25 15:00", tz=TZ)

        assert lifecycle.complete(_booking(BookingStatus.CONFIRMED), now).status == BookingStatus.COMPLETED
        for status in (BookingStatus.PENDING, BookingStatus.COMPLETED, BookingStatus.CANCELLED):
            with pytest.raises(StateTransitionError):
                lifecycle.complete(_booking(status), now)

    def test_original_booking_is_not_mutated(self):
        lifecycle = BookingLifecycle()
        original = _booking(BookingStatus.PENDING)

        lifecycle.confirm(original, CREATED)

        assert original.status == BookingStatus.PENDING

    @pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CONFIRMED])
    def test_cancel_well_ahead(self, status):
        lifecycle = BookingLifecycle(cancellation_window_hours=2)
        now = pendulum.parse("2024-11-25 11:00", tz=TZ)

        cancelled = lifecycle.cancel(_booking(status), now)

        assert cancelled.status == BookingStatus.CANCELLED
        assert cancelled.updated_at == now

    def test_cancel_exactly_at_deadline_is_allowed(self):
        lifecycle = BookingLifecycle(cancellation_window_hours=2)

        cancelled = lifecycle.cancel(_booking(BookingStatus.PENDING), APPOINTMENT.subtract(hours=2))

        assert cancelled.status == BookingStatus.CANCELLED

    def test_cancel_inside_window_is_rejected(self):
        """One hour before with a two hour window is too late."""
        lifecycle = BookingLifecycle(cancellation_window_hours=2)

        with pytest.raises(CancellationWindowError):
            lifecycle.cancel(_booking(BookingStatus.PENDING), APPOINTMENT.subtract(hours=1))

    def test_cancel_after_start_is_rejected(self):
        lifecycle = BookingLifecycle(cancellation_window_hours=0)

        with pytest.raises(CancellationWindowError):
            lifecycle.cancel(_booking(BookingStatus.CONFIRMED), APPOINTMENT)
        with pytest.raises(CancellationWindowError):
            lifecycle.cancel(_booking(BookingStatus.CONFIRMED), APPOINTMENT.add(minutes=5))

    def test_cancel_without_window_until_start(self):
        lifecycle = BookingLifecycle(cancellation_window_hours=0)

        cancelled = lifecycle.cancel(_booking(BookingStatus.CONFIRMED), APPOINTMENT.subtract(minutes=1))

        assert cancelled.status == BookingStatus.CANCELLED

    @pytest.mark.parametrize("status", [BookingStatus.COMPLETED, BookingStatus.CANCELLED])
    def test_cancel_terminal_booking_is_a_transition_error(self, status):
        lifecycle = BookingLifecycle()

        with pytest.raises(StateTransitionError):
            lifecycle.cancel(_booking(status), CREATED)

    def test_can_cancel(self):
        lifecycle = BookingLifecycle(cancellation_window_hours=2)

        assert lifecycle.can_cancel(_booking(BookingStatus.PENDING), CREATED)
        assert not lifecycle.can_cancel(_booking(BookingStatus.PENDING), APPOINTMENT.subtract(hours=1))
        assert not lifecycle.can_cancel(_booking(BookingStatus.COMPLETED), CREATED)

    def test_negative_window_is_rejected(self):
        with pytest.raises(ValidationError):
            BookingLifecycle(cancellation_window_hours=-1)
