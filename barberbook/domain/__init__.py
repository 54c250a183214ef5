"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    BookingError,
    BookingNotFoundError,
    CancellationWindowError,
    ConcurrencyConflictError,
    RepositoryError,
    StateTransitionError,
    ValidationError,
)
from .lifecycle import TRANSITIONS, BookingAction, BookingLifecycle, next_status
from .models import (
    Barber,
    Booking,
    BookingStatus,
    Service,
    TimeRange,
    TimeSlot,
    WeeklySchedule,
    WorkingHours,
)
from .slot_calculator import SlotCalculator, bookable_dates
from .views import DailyOverview, categorize_bookings, daily_overview

__all__ = [
    "Barber",
    "Booking",
    "BookingAction",
    "BookingError",
    "BookingLifecycle",
    "BookingNotFoundError",
    "BookingStatus",
    "CancellationWindowError",
    "ConcurrencyConflictError",
    "DailyOverview",
    "RepositoryError",
    "Service",
    "SlotCalculator",
    "StateTransitionError",
    "TRANSITIONS",
    "TimeRange",
    "TimeSlot",
    "ValidationError",
    "WeeklySchedule",
    "WorkingHours",
    "bookable_dates",
    "categorize_bookings",
    "daily_overview",
    "next_status",
]
