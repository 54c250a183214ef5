"""
Read-side groupings of bookings for customer and owner screens.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Tuple

from pendulum import DateTime

from .models import Booking, BookingStatus, local_date


def categorize_bookings(
    bookings: Iterable[Booking],
    now: DateTime,
) -> Tuple[List[Booking], List[Booking]]:
    """
    Split a customer's bookings into upcoming and past.

    Upcoming: not cancelled and starting after ``now``, soonest first.
    Past: everything else, most recent first.
    """
    upcoming: List[Booking] = []
    past: List[Booking] = []

    for booking in bookings:
        if booking.date_time > now and booking.is_active:
            upcoming.append(booking)
        else:
            past.append(booking)

    upcoming.sort(key=lambda b: b.date_time)
    past.sort(key=lambda b: b.date_time, reverse=True)
    return upcoming, past


@dataclass
class DailyOverview:
    """The owner's view of one business day."""
    day: date
    bookings: List[Booking] = field(default_factory=list)

    @property
    def pending(self) -> List[Booking]:
        return [b for b in self.bookings if b.status == BookingStatus.PENDING]

    @property
    def confirmed(self) -> List[Booking]:
        """Confirmed and already completed bookings."""
        return [
            b for b in self.bookings
            if b.status in (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)
        ]


def daily_overview(bookings: Iterable[Booking], day: date, timezone: str) -> DailyOverview:
    """Collect the non-cancelled bookings that start on ``day`` in local time."""
    target = local_date(day, timezone)
    todays = [
        b for b in bookings
        if b.is_active and local_date(b.date_time, timezone) == target
    ]
    todays.sort(key=lambda b: b.date_time)
    return DailyOverview(day=target, bookings=todays)
