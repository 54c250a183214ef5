"""
Contract between the booking services and whatever stores bookings.
"""

from __future__ import annotations

from datetime import date
from typing import List, Protocol

from pendulum import DateTime

from ..domain.models import Booking, BookingStatus


class BookingRepositoryProtocol(Protocol):
    """Protocol describing the storage behaviour needed by the services."""

    async def get_bookings_for_barber_on_date(
        self,
        barber_id: str,
        day: date,
        timezone: str,
    ) -> List[Booking]:
        """Return the barber's non-cancelled bookings touching the local ``day``."""

    async def get_booking(self, booking_id: str) -> Booking | None:
        """Return a single booking, or None if unknown."""

    async def get_bookings_for_customer(self, customer_id: str) -> List[Booking]:
        """Return all bookings of a customer, newest first."""

    async def get_bookings_for_business(
        self,
        business_id: str,
        day: date | None = None,
        timezone: str = "UTC",
    ) -> List[Booking]:
        """Return a business's bookings, optionally limited to one local day."""

    async def persist_booking(self, booking: Booking) -> Booking:
        """Store a booking unconditionally, assigning id and timestamps."""

    async def reserve_slot(self, booking: Booking) -> Booking:
        """
        Atomically check the barber's interval is free and store the booking.

        Raises ConcurrencyConflictError if an active booking overlaps.
        """

    async def persist_status_change(
        self,
        booking_id: str,
        new_status: BookingStatus,
        updated_at: DateTime | None = None,
        expected_status: BookingStatus | None = None,
    ) -> None:
        """
        Record a new status.

        When ``expected_status`` is given the stored status is compared and
        replaced in one step.

        Raises BookingNotFoundError for unknown ids and ConcurrencyConflictError
        if the stored status is no longer ``expected_status``.
        """
