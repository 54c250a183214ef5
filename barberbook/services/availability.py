"""
Application service for answering "when can this barber take me?".

The service fetches the barber's bookings via the repository adapter and
delegates the actual slot computation to the domain-level
``SlotCalculator``. Clock and repository are injected so tests can pin both.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, List

import pendulum
from pendulum import Date, DateTime

from ..domain.models import Booking, TimeSlot, WeeklySchedule, WorkingHours, local_date
from ..domain.slot_calculator import SlotCalculator, bookable_dates
from .repository import BookingRepositoryProtocol

logger = logging.getLogger(__name__)

Clock = Callable[[], DateTime]


class AvailabilityService:
    """
    Orchestrates booking retrieval and slot calculation for one business.
    """

    def __init__(
        self,
        repository: BookingRepositoryProtocol,
        slot_calculator: SlotCalculator,
        schedule: WeeklySchedule,
        *,
        timezone: str = "UTC",
        max_advance_booking_days: int = 30,
        clock: Clock | None = None,
    ) -> None:
        self._repository = repository
        self._slot_calculator = slot_calculator
        self._schedule = schedule
        self._timezone = timezone
        self._max_advance_booking_days = max_advance_booking_days
        self._clock = clock or (lambda: pendulum.now(timezone))

    @property
    def timezone(self) -> str:
        return self._timezone

    def now(self) -> DateTime:
        return self._clock()

    def working_hours_for(self, day: date) -> WorkingHours:
        """Working hours of the local calendar date ``day``."""
        return self._schedule.for_date(day, self._timezone)

    def available_dates(self) -> List[Date]:
        """Dates offered for booking, starting today in the business's timezone."""
        today = local_date(self.now(), self._timezone)
        return bookable_dates(today, self._max_advance_booking_days)

    async def get_slots(
        self,
        *,
        barber_id: str,
        day: date,
        service_duration_minutes: int,
    ) -> List[TimeSlot]:
        """
        Retrieve the barber's bookings for ``day`` and compute the slot grid.
        """
        calendar_day = local_date(day, self._timezone)
        working_hours = self.working_hours_for(calendar_day)

        if not working_hours.is_open:
            logger.debug("Closed on %s, no slots for barber %s", calendar_day, barber_id)
            return []

        bookings = await self._repository.get_bookings_for_barber_on_date(
            barber_id,
            calendar_day,
            self._timezone,
        )

        slots = self.calculate_slots(
            day=calendar_day,
            working_hours=working_hours,
            service_duration_minutes=service_duration_minutes,
            bookings=bookings,
        )
        logger.debug(
            "Barber %s on %s: %d/%d slots available",
            barber_id,
            calendar_day,
            sum(1 for slot in slots if slot.available),
            len(slots),
        )
        return slots

    async def get_available_slots(
        self,
        *,
        barber_id: str,
        day: date,
        service_duration_minutes: int,
    ) -> List[TimeSlot]:
        """Only the slots that can be booked right now."""
        slots = await self.get_slots(
            barber_id=barber_id,
            day=day,
            service_duration_minutes=service_duration_minutes,
        )
        return [slot for slot in slots if slot.available]

    def calculate_slots(
        self,
        *,
        day: Date,
        working_hours: WorkingHours,
        service_duration_minutes: int,
        bookings: Iterable[Booking],
    ) -> List[TimeSlot]:
        """Calculate the slot grid from already fetched bookings."""
        return self._slot_calculator.calculate_slots(
            day=day,
            working_hours=working_hours,
            service_duration_minutes=service_duration_minutes,
            existing_bookings=bookings,
            now=self.now(),
            timezone=self._timezone,
        )
