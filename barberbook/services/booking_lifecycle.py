"""
Application service for creating bookings and moving them through their
lifecycle.

Booking creation never trusts an earlier availability read: it hands the new
booking to ``reserve_slot`` which checks and inserts in one step. Status
changes pass along the status they were computed from, so a concurrent change
surfaces as a ``ConcurrencyConflictError`` instead of being overwritten.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Tuple

import pendulum
from pendulum import DateTime

from ..domain.exceptions import BookingNotFoundError, ValidationError
from ..domain.lifecycle import BookingLifecycle
from ..domain.models import Booking
from ..domain.views import DailyOverview, categorize_bookings, daily_overview
from .repository import BookingRepositoryProtocol

logger = logging.getLogger(__name__)


class BookingLifecycleService:
    """
    Coordinates the lifecycle rules with the booking repository.
    """

    def __init__(
        self,
        repository: BookingRepositoryProtocol,
        lifecycle: BookingLifecycle,
        *,
        timezone: str = "UTC",
        min_advance_booking_hours: int = 0,
        clock: Callable[[], DateTime] | None = None,
    ) -> None:
        self._repository = repository
        self._lifecycle = lifecycle
        self._timezone = timezone
        self._min_advance_booking_hours = min_advance_booking_hours
        self._clock = clock or (lambda: pendulum.now(timezone))

    async def create_booking(
        self,
        *,
        business_id: str,
        barber_id: str,
        customer_id: str,
        service_id: str,
        date_time: DateTime,
        duration_minutes: int,
        notes: str | None = None,
    ) -> Booking:
        """
        Create a pending booking and reserve its interval.

        Raises:
            ValidationError: If the input is malformed or the start is too soon
            ConcurrencyConflictError: If the interval was taken in the meantime
        """
        now = self._clock()
        earliest_start = now.add(hours=self._min_advance_booking_hours)
        if date_time < earliest_start:
            raise ValidationError(
                f"Bookings must start at or after {earliest_start.format('YYYY-MM-DD HH:mm')}"
            )

        booking = self._lifecycle.create(
            business_id=business_id,
            barber_id=barber_id,
            customer_id=customer_id,
            service_id=service_id,
            date_time=date_time,
            duration_minutes=duration_minutes,
            notes=notes,
            now=now,
        )

        stored = await self._repository.reserve_slot(booking)
        logger.info(
            "Booking %s created for barber %s at %s (%d min)",
            stored.id,
            barber_id,
            date_time.to_iso8601_string(),
            duration_minutes,
        )
        return stored

    async def confirm_booking(self, booking_id: str) -> Booking:
        """pending -> confirmed."""
        booking = await self._load(booking_id)
        return await self._store(booking, self._lifecycle.confirm(booking, self._clock()))

    async def complete_booking(self, booking_id: str) -> Booking:
        """confirmed -> completed."""
        booking = await self._load(booking_id)
        return await self._store(booking, self._lifecycle.complete(booking, self._clock()))

    async def cancel_booking(self, booking_id: str) -> Booking:
        """pending|confirmed -> cancelled, subject to the cancellation window."""
        booking = await self._load(booking_id)
        return await self._store(booking, self._lifecycle.cancel(booking, self._clock()))

    async def customer_bookings(self, customer_id: str) -> Tuple[List[Booking], List[Booking]]:
        """A customer's bookings split into (upcoming, past)."""
        bookings = await self._repository.get_bookings_for_customer(customer_id)
        return categorize_bookings(bookings, self._clock())

    async def business_overview(self, business_id: str, day: date | None = None) -> DailyOverview:
        """The owner's dashboard for ``day`` (today when omitted)."""
        target = day or self._clock().in_timezone(self._timezone).date()
        bookings = await self._repository.get_bookings_for_business(
            business_id,
            target,
            self._timezone,
        )
        return daily_overview(bookings, target, self._timezone)

    async def _load(self, booking_id: str) -> Booking:
        booking = await self._repository.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking not found: {booking_id}")
        return booking

    async def _store(self, loaded: Booking, booking: Booking) -> Booking:
        await self._repository.persist_status_change(
            booking.id,
            booking.status,
            updated_at=booking.updated_at,
            expected_status=loaded.status,
        )
        logger.info("Booking %s is now %s", booking.id, booking.status.value)
        return booking
