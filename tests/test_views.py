"""
Tests for booking groupings.
"""

import pendulum

from barberbook.domain.models import Booking, BookingStatus
from barberbook.domain.views import categorize_bookings, daily_overview


TZ = "Europe/Berlin"


def _booking(booking_id: str, start: str, status: BookingStatus) -> Booking:
    return Booking(
        id=booking_id,
        business_id="shop",
        barber_id="b1",
        customer_id="c1",
        service_id="s1",
        date_time=pendulum.parse(start, tz=TZ),
        duration_minutes=30,
        status=status,
    )


def test_categorize_bookings():
    """Cancelled future bookings count as past; lists are ordered."""
    now = pendulum.parse("2024-11-25 12:00", tz=TZ)
    bookings = [
        _booking("later", "2024-11-28 10:00", BookingStatus.PENDING),
        _booking("soon", "2024-11-26 10:00", BookingStatus.CONFIRMED),
        _booking("dropped", "2024-11-27 10:00", BookingStatus.CANCELLED),
        _booking("done", "2024-11-20 10:00", BookingStatus.COMPLETED),
        _booking("morning", "2024-11-25 09:00", BookingStatus.CONFIRMED),
    ]

    upcoming, past = categorize_bookings(bookings, now)

    assert [b.id for b in upcoming] == ["soon", "later"]
    assert [b.id for b in past] == ["dropped", "morning", "done"]


def test_daily_overview():
    bookings = [
        _booking("a", "2024-11-25 09:00", BookingStatus.PENDING),
        _booking("b", "2024-11-25 11:00", BookingStatus.CONFIRMED),
        _booking("c", "2024-11-25 12:00", BookingStatus.COMPLETED),
        _booking("d", "2024-11-25 13:00", BookingStatus.CANCELLED),
        _booking("e", "2024-11-26 09:00", BookingStatus.PENDING),
    ]

    overview = daily_overview(bookings, pendulum.date(2024, 11, 25), TZ)

    assert [b.id for b in overview.bookings] == ["a", "b", "c"]
    assert [b.id for b in overview.pending] == ["a"]
    assert [b.id for b in overview.confirmed] == ["b", "c"]


def test_daily_overview_uses_local_day():
    """00:30 Berlin time belongs to the Berlin date even though it is the previous UTC day."""
    booking = _booking("early", "2024-11-25 00:30", BookingStatus.PENDING)

    assert daily_overview([booking], pendulum.date(2024, 11, 25), TZ).bookings == [booking]
    assert daily_overview([booking], pendulum.date(2024, 11, 24), "UTC").bookings == [booking]
