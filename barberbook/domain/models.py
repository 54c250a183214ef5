"""
Domain models for schedules, time slots and bookings.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Dict, List

import pendulum
from pendulum import Date, DateTime

from .exceptions import ValidationError


WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_clock_time(value: str) -> time:
    """
    Parse an "HH:MM" wall-clock string.

    Raises:
        ValidationError: If the string is not a valid 24-hour time
    """
    match = _CLOCK_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")

    return time(hour=hour, minute=minute)


def local_date(value: date, timezone: str | None = None) -> Date:
    """
    Reduce a date or datetime to a local calendar date.

    Datetimes are first moved into ``timezone`` so the day boundary matches
    the barber's wall clock rather than UTC.
    """
    if isinstance(value, datetime):
        moment = pendulum.instance(value)
        if timezone:
            moment = moment.in_timezone(timezone)
        return moment.date()
    return pendulum.date(value.year, value.month, value.day)


def weekday_name(day: date) -> str:
    """Return the lowercase English weekday name for a calendar date."""
    return WEEKDAY_NAMES[day.weekday()]


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another (half-open intervals)."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class WorkingHours:
    """
    One weekday's operating window.

    When ``is_open`` is false, ``start`` and ``end`` carry no meaning.
    """
    start: str = "00:00"
    end: str = "00:00"
    is_open: bool = False

    @classmethod
    def closed(cls) -> "WorkingHours":
        """The well-defined value for a day without opening hours."""
        return cls(start="00:00", end="00:00", is_open=False)

    def start_time(self) -> time:
        """Get opening time as time object."""
        return parse_clock_time(self.start)

    def end_time(self) -> time:
        """Get closing time as time object."""
        return parse_clock_time(self.end)

    def get_range_for_day(self, day: date, timezone: str) -> TimeRange | None:
        """
        Get the opening window for a specific calendar day.
        Returns None if closed or if the window is empty.
        """
        if not self.is_open:
            return None

        opens, closes = self.start_time(), self.end_time()
        if closes <= opens:
            return None

        start = pendulum.datetime(day.year, day.month, day.day, opens.hour, opens.minute, tz=timezone)
        end = pendulum.datetime(day.year, day.month, day.day, closes.hour, closes.minute, tz=timezone)
        return TimeRange(start=start, end=end)


@dataclass
class WeeklySchedule:
    """
    Working hours for all seven weekdays, keyed by lowercase English name.

    Invariant: every weekday key is present.
    """
    days: Dict[str, WorkingHours]

    def __post_init__(self):
        missing = [name for name in WEEKDAY_NAMES if name not in self.days]
        if missing:
            raise ValidationError(f"Weekly schedule is missing days: {', '.join(missing)}")

    @classmethod
    def default(cls) -> "WeeklySchedule":
        """Standard shop hours: weekdays 09-18, Saturday 09-15, Sunday closed."""
        weekday = WorkingHours(start="09:00", end="18:00", is_open=True)
        return cls(
            days={
                "monday": weekday,
                "tuesday": weekday,
                "wednesday": weekday,
                "thursday": weekday,
                "friday": weekday,
                "saturday": WorkingHours(start="09:00", end="15:00", is_open=True),
                "sunday": WorkingHours.closed(),
            }
        )

    def for_weekday(self, name: str) -> WorkingHours:
        """
        Return the working hours for a weekday name.

        Unknown or malformed names yield ``WorkingHours.closed()``.
        """
        if not isinstance(name, str):
            return WorkingHours.closed()
        return self.days.get(name.strip().lower(), WorkingHours.closed())

    def for_date(self, day: date, timezone: str | None = None) -> WorkingHours:
        """Return the working hours for the local calendar date of ``day``."""
        return self.for_weekday(weekday_name(local_date(day, timezone)))


class BookingStatus(str, Enum):
    """Lifecycle stage of a booking."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Booking:
    """
    An appointment of one customer with one barber for one service.

    ``id`` is None until the repository persists the booking.
    """
    business_id: str
    barber_id: str
    customer_id: str
    service_id: str
    date_time: DateTime
    duration_minutes: int
    status: BookingStatus = BookingStatus.PENDING
    notes: str | None = None
    id: str | None = None
    created_at: DateTime | None = None
    updated_at: DateTime | None = None

    @property
    def end_time(self) -> DateTime:
        """Exclusive end of the appointment."""
        return self.date_time.add(minutes=self.duration_minutes)

    @property
    def is_active(self) -> bool:
        """Cancelled bookings no longer occupy the barber's time."""
        return self.status != BookingStatus.CANCELLED

    def interval(self) -> TimeRange:
        """The occupied half-open interval [date_time, date_time + duration)."""
        return TimeRange(start=self.date_time, end=self.end_time)


@dataclass(frozen=True)
class TimeSlot:
    """
    A candidate appointment start time and whether it can be booked.
    """
    time: str
    available: bool
    time_range: TimeRange

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, YYYY-MM-DD | HH:MM - HH:MM (available)
        """
        start = self.time_range.start
        weekday = weekday_name(start).capitalize()
        state = "available" if self.available else "taken"
        return (
            f"{weekday}, {start.format('YYYY-MM-DD')} | "
            f"{self.time} - {self.time_range.end.format('HH:mm')} ({state})"
        )


@dataclass(frozen=True)
class Service:
    """A bookable service offered by the business."""
    id: str
    name: str
    duration_minutes: int
    price: float = 0.0
    is_active: bool = True


@dataclass(frozen=True)
class Barber:
    """A barber working at the business."""
    id: str
    name: str
    specialties: List[str] = field(default_factory=list)
    is_active: bool = True
