"""
Tests for domain models.
"""

from datetime import time

import pendulum
import pytest

from barberbook.domain.exceptions import ValidationError
from barberbook.domain.models import (
    Booking,
    BookingStatus,
    TimeRange,
    WeeklySchedule,
    WorkingHours,
    local_date,
    parse_clock_time,
    weekday_name,
)


TZ = "Europe/Berlin"


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = pendulum.parse("2024-11-25 09:00", tz=TZ)
        end = pendulum.parse("2024-11-25 17:00", tz=TZ)

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 480  # 8 hours

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        start = pendulum.parse("2024-11-25 17:00", tz=TZ)
        end = pendulum.parse("2024-11-25 09:00", tz=TZ)

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=start, end=end)

    def test_overlaps(self):
        """Test overlap detection."""
        tr1 = TimeRange(
            start=pendulum.parse("2024-11-25 09:00", tz=TZ),
            end=pendulum.parse("2024-11-25 12:00", tz=TZ)
        )
        tr2 = TimeRange(
            start=pendulum.parse("2024-11-25 11:00", tz=TZ),
            end=pendulum.parse("2024-11-25 14:00", tz=TZ)
        )
        tr3 = TimeRange(
            start=pendulum.parse("2024-11-25 14:00", tz=TZ),
            end=pendulum.parse("2024-11-25 17:00", tz=TZ)
        )

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)

    def test_touching_ranges_do_not_overlap(self):
        """Half-open ranges sharing only a boundary are disjoint."""
        first = TimeRange(
            start=pendulum.parse("2024-11-25 09:30", tz=TZ),
            end=pendulum.parse("2024-11-25 10:00", tz=TZ)
        )
        second = TimeRange(
            start=pendulum.parse("2024-11-25 10:00", tz=TZ),
            end=pendulum.parse("2024-11-25 10:30", tz=TZ)
        )

        assert not first.overlaps(second)
        assert not second.overlaps(first)


class TestClockParsing:
    """Tests for HH:MM parsing."""

    def test_parse_valid_times(self):
        assert parse_clock_time("09:00") == time(9, 0)
        assert parse_clock_time("9:30") == time(9, 30)
        assert parse_clock_time("23:59") == time(23, 59)

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "0900", "", "9:5"])
    def test_parse_invalid_times(self, value):
        with pytest.raises(ValidationError):
            parse_clock_time(value)


class TestWorkingHours:
    """Tests for WorkingHours model."""

    def test_closed_value(self):
        closed = WorkingHours.closed()

        assert not closed.is_open
        assert closed.get_range_for_day(pendulum.date(2024, 11, 25), TZ) is None

    def test_get_range_for_day(self):
        """Test getting working hours for a specific day."""
        hours = WorkingHours(start="09:30", end="17:00", is_open=True)

        work_range = hours.get_range_for_day(pendulum.date(2024, 11, 25), TZ)

        assert work_range is not None
        assert work_range.start.hour == 9
        assert work_range.start.minute == 30
        assert work_range.end.hour == 17
        assert work_range.end.minute == 0
        assert work_range.start.timezone_name == TZ

    def test_malformed_hours_raise_on_use(self):
        hours = WorkingHours(start="9am", end="17:00", is_open=True)

        with pytest.raises(ValidationError):
            hours.start_time()


class TestWeeklySchedule:
    """Tests for WeeklySchedule lookup."""

    def test_default_schedule(self):
        schedule = WeeklySchedule.default()

        assert schedule.for_weekday("monday") == WorkingHours("09:00", "18:00", True)
        assert schedule.for_weekday("saturday") == WorkingHours("09:00", "15:00", True)
        assert not schedule.for_weekday("sunday").is_open

    def test_missing_day_is_rejected(self):
        days = dict(WeeklySchedule.default().days)
        del days["wednesday"]

        with pytest.raises(ValidationError, match="wednesday"):
            WeeklySchedule(days=days)

    def test_weekday_names_are_normalized(self):
        schedule = WeeklySchedule.default()

        assert schedule.for_weekday("  Monday ") == schedule.for_weekday("monday")

    @pytest.mark.parametrize("name", ["mon", "funday", "", None])
    def test_malformed_weekday_is_closed(self, name):
        schedule = WeeklySchedule.default()

        assert schedule.for_weekday(name) == WorkingHours.closed()

    def test_for_date_uses_local_calendar_date(self):
        """23:30 UTC on Sunday is already Monday in Berlin."""
        schedule = WeeklySchedule.default()
        instant = pendulum.parse("2024-11-24T23:30:00+00:00")

        assert weekday_name(instant) == "sunday"
        assert local_date(instant, TZ) == pendulum.date(2024, 11, 25)
        assert schedule.for_date(instant, TZ).is_open
        assert not schedule.for_date(instant, "UTC").is_open

    def test_for_date_with_plain_date(self):
        schedule = WeeklySchedule.default()

        assert not schedule.for_date(pendulum.date(2024, 11, 24)).is_open
        assert schedule.for_date(pendulum.date(2024, 11, 23)).end == "15:00"


class TestBooking:
    """Tests for Booking helpers."""

    def test_interval_and_activity(self):
        booking = Booking(
            business_id="shop",
            barber_id="b1",
            customer_id="c1",
            service_id="s1",
            date_time=pendulum.parse("2024-11-25 10:00", tz=TZ),
            duration_minutes=45,
        )

        assert booking.status == BookingStatus.PENDING
        assert booking.is_active
        assert booking.end_time == pendulum.parse("2024-11-25 10:45", tz=TZ)
        assert booking.interval().duration_minutes() == 45

    def test_cancelled_booking_is_not_active(self):
        booking = Booking(
            business_id="shop",
            barber_id="b1",
            customer_id="c1",
            service_id="s1",
            date_time=pendulum.parse("2024-11-25 10:00", tz=TZ),
            duration_minutes=30,
            status=BookingStatus.CANCELLED,
        )

        assert not booking.is_active
