"""
Core business logic for calculating bookable time slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from datetime import date
from typing import Iterable, List

import pendulum
from pendulum import Date, DateTime

from .exceptions import ValidationError
from .models import Booking, TimeRange, TimeSlot, WorkingHours, local_date


class SlotCalculator:
    """
    Calculates the slot grid for one barber, one date and one service.

    Algorithm:
    1. Return nothing when the shop is closed that day
    2. Generate candidate start times from opening time, one per granularity
       step, as long as the start is before closing time
    3. Mark a candidate unavailable if it overlaps an active booking or starts
       before the advance-booking floor
    4. Return every candidate in chronological order (taken ones included)

    Only the slot's start is compared with closing time; a long service may
    run past it.
    """

    def __init__(self, slot_granularity_minutes: int = 30, min_advance_booking_hours: int = 1):
        if slot_granularity_minutes <= 0:
            raise ValidationError(
                f"Slot granularity must be positive, got {slot_granularity_minutes}"
            )
        if min_advance_booking_hours < 0:
            raise ValidationError(
                f"Minimum advance booking must not be negative, got {min_advance_booking_hours}"
            )
        self.slot_granularity_minutes = slot_granularity_minutes
        self.min_advance_booking_hours = min_advance_booking_hours

    def calculate_slots(
        self,
        day: date,
        working_hours: WorkingHours,
        service_duration_minutes: int,
        existing_bookings: Iterable[Booking],
        now: DateTime,
        timezone: str = "UTC",
    ) -> List[TimeSlot]:
        """
        Compute the slot list for a single day.

        Args:
            day: Local calendar date being booked
            working_hours: Opening window for that date's weekday
            service_duration_minutes: Length of the requested service
            existing_bookings: The barber's bookings touching that date
            now: Current instant, used for the advance-booking floor
            timezone: IANA timezone the working hours are expressed in

        Returns:
            List of TimeSlot objects ordered by start time

        Raises:
            ValidationError: If the duration is not positive or the hours are malformed
        """
        if not working_hours.is_open:
            return []

        if service_duration_minutes <= 0:
            raise ValidationError(
                f"Service duration must be positive, got {service_duration_minutes}"
            )

        opens = working_hours.start_time()
        closes = working_hours.end_time()
        calendar_day = local_date(day, timezone)

        busy_ranges = self._busy_ranges(existing_bookings)
        earliest_start = now.add(hours=self.min_advance_booking_hours)

        slots: List[TimeSlot] = []
        minute = opens.hour * 60 + opens.minute
        closing_minute = closes.hour * 60 + closes.minute

        while minute < closing_minute:
            slot_start = self._at_minute(calendar_day, minute, timezone)
            slot_range = TimeRange(
                start=slot_start,
                end=slot_start.add(minutes=service_duration_minutes),
            )

            is_booked = any(slot_range.overlaps(busy) for busy in busy_ranges)
            is_too_soon = slot_start < earliest_start

            slots.append(
                TimeSlot(
                    time=f"{minute // 60:02d}:{minute % 60:02d}",
                    available=not is_booked and not is_too_soon,
                    time_range=slot_range,
                )
            )

            minute += self.slot_granularity_minutes

        return slots

    def _busy_ranges(self, bookings: Iterable[Booking]) -> List[TimeRange]:
        """
        Occupied intervals of all active bookings, sorted by start.

        Cancelled bookings are skipped even if the repository handed them in.
        """
        ranges = [booking.interval() for booking in bookings if booking.is_active]
        return sorted(ranges, key=lambda r: r.start)

    @staticmethod
    def _at_minute(day: Date, minute_of_day: int, timezone: str) -> DateTime:
        return pendulum.datetime(
            day.year,
            day.month,
            day.day,
            minute_of_day // 60,
            minute_of_day % 60,
            tz=timezone,
        )


def bookable_dates(today: date, max_advance_booking_days: int) -> List[Date]:
    """
    Consecutive calendar dates a customer may pick, starting with ``today``.

    Example: today=2024-11-25, max_advance_booking_days=3
    Result: [2024-11-25, 2024-11-26, 2024-11-27]
    """
    if max_advance_booking_days <= 0:
        return []

    first = pendulum.date(today.year, today.month, today.day)
    return [first.add(days=offset) for offset in range(max_advance_booking_days)]
