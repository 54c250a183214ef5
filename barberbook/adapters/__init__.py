"""
Adapters layer - Booking storage implementations.
"""

from .json_repository import JsonFileBookingRepository
from .memory_repository import InMemoryBookingRepository

__all__ = ["InMemoryBookingRepository", "JsonFileBookingRepository"]
