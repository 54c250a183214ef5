"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService
from .booking_lifecycle import BookingLifecycleService
from .repository import BookingRepositoryProtocol

__all__ = ["AvailabilityService", "BookingLifecycleService", "BookingRepositoryProtocol"]
