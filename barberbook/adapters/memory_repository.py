"""
In-process booking repository.

Used by the tests and as the base of the JSON file store. ``reserve_slot``
checks and inserts under one lock, so two concurrent requests for the same
barber interval cannot both succeed. Status changes can name the status they
expect to replace, which turns a stale read into a conflict.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List

import pendulum
from pendulum import DateTime

from ..domain.exceptions import BookingNotFoundError, ConcurrencyConflictError
from ..domain.models import Booking, BookingStatus, TimeRange

logger = logging.getLogger(__name__)


def day_range(day: date, timezone: str) -> TimeRange:
    """The local calendar day as a half-open range."""
    start = pendulum.datetime(day.year, day.month, day.day, tz=timezone)
    return TimeRange(start=start, end=start.add(days=1))


class InMemoryBookingRepository:
    """
    Dictionary-backed implementation of ``BookingRepositoryProtocol``.
    """

    def __init__(self, bookings: Iterable[Booking] | None = None):
        self._bookings: Dict[str, Booking] = {}
        self._lock = asyncio.Lock()
        for booking in bookings or []:
            stored = self._with_identity(booking)
            self._bookings[stored.id] = stored

    def all_bookings(self) -> List[Booking]:
        """Snapshot of every stored booking ordered by appointment time."""
        return sorted(self._bookings.values(), key=lambda b: b.date_time)

    async def get_booking(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    async def get_bookings_for_barber_on_date(
        self,
        barber_id: str,
        day: date,
        timezone: str,
    ) -> List[Booking]:
        window = day_range(day, timezone)
        return [
            booking for booking in self.all_bookings()
            if booking.barber_id == barber_id
            and booking.is_active
            and booking.interval().overlaps(window)
        ]

    async def get_bookings_for_customer(self, customer_id: str) -> List[Booking]:
        bookings = [b for b in self._bookings.values() if b.customer_id == customer_id]
        return sorted(bookings, key=lambda b: b.date_time, reverse=True)

    async def get_bookings_for_business(
        self,
        business_id: str,
        day: date | None = None,
        timezone: str = "UTC",
    ) -> List[Booking]:
        bookings = [b for b in self.all_bookings() if b.business_id == business_id]
        if day is None:
            return bookings

        window = day_range(day, timezone)
        return [b for b in bookings if window.start <= b.date_time < window.end]

    async def persist_booking(self, booking: Booking) -> Booking:
        async with self._lock:
            return await self._write(booking)

    async def reserve_slot(self, booking: Booking) -> Booking:
        async with self._lock:
            requested = booking.interval()
            for existing in self._bookings.values():
                if (
                    existing.barber_id == booking.barber_id
                    and existing.is_active
                    and existing.interval().overlaps(requested)
                ):
                    logger.warning(
                        "Slot %s for barber %s conflicts with booking %s",
                        requested,
                        booking.barber_id,
                        existing.id,
                    )
                    raise ConcurrencyConflictError(
                        f"Barber {booking.barber_id} is no longer free at "
                        f"{booking.date_time.format('YYYY-MM-DD HH:mm')}"
                    )
            return await self._write(booking)

    async def persist_status_change(
        self,
        booking_id: str,
        new_status: BookingStatus,
        updated_at: DateTime | None = None,
        expected_status: BookingStatus | None = None,
    ) -> None:
        async with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                raise BookingNotFoundError(f"Booking not found: {booking_id}")
            if expected_status is not None and booking.status != expected_status:
                raise ConcurrencyConflictError(
                    f"Booking {booking_id} changed to '{booking.status.value}' "
                    f"while it was being updated"
                )

            self._publish(
                replace(
                    booking,
                    status=BookingStatus(new_status),
                    updated_at=updated_at or pendulum.now("UTC"),
                )
            )

    async def _write(self, booking: Booking) -> Booking:
        """Store a new booking; called with the lock held."""
        stored = self._with_identity(booking)
        self._publish(stored)
        logger.debug("Stored booking %s", stored.id)
        return stored

    def _publish(self, booking: Booking) -> None:
        """Replace the stored entry and commit, restoring the old entry if the commit fails."""
        previous = self._bookings.get(booking.id)
        self._bookings[booking.id] = booking
        try:
            self._commit()
        except Exception:
            if previous is None:
                del self._bookings[booking.id]
            else:
                self._bookings[booking.id] = previous
            raise

    def _commit(self) -> None:
        """Hook called after every mutation; nothing to flush in memory."""

    @staticmethod
    def _with_identity(booking: Booking) -> Booking:
        now = pendulum.now("UTC")
        return replace(
            booking,
            id=booking.id or uuid.uuid4().hex,
            created_at=booking.created_at or now,
            updated_at=booking.updated_at or now,
        )
