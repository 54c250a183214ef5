"""
Booking repository persisted to a JSON file, for the command-line front end.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import pendulum

from ..domain.exceptions import RepositoryError
from ..domain.models import Booking, BookingStatus
from .memory_repository import InMemoryBookingRepository

logger = logging.getLogger(__name__)


def booking_to_record(booking: Booking) -> Dict[str, Any]:
    """Serialize a booking into plain JSON types."""
    return {
        "id": booking.id,
        "businessId": booking.business_id,
        "barberId": booking.barber_id,
        "customerId": booking.customer_id,
        "serviceId": booking.service_id,
        "dateTime": booking.date_time.to_iso8601_string(),
        "duration": booking.duration_minutes,
        "status": booking.status.value,
        "notes": booking.notes,
        "createdAt": booking.created_at.to_iso8601_string() if booking.created_at else None,
        "updatedAt": booking.updated_at.to_iso8601_string() if booking.updated_at else None,
    }


def booking_from_record(record: Dict[str, Any]) -> Booking:
    """
    Parse a stored record back into a Booking.

    Raises:
        KeyError: If a required field is missing
        ValueError: If a timestamp or status is malformed
    """
    created_at = record.get("createdAt")
    updated_at = record.get("updatedAt")
    return Booking(
        id=record["id"],
        business_id=record["businessId"],
        barber_id=record["barberId"],
        customer_id=record["customerId"],
        service_id=record["serviceId"],
        date_time=pendulum.parse(record["dateTime"]),
        duration_minutes=int(record["duration"]),
        status=BookingStatus(record["status"]),
        notes=record.get("notes"),
        created_at=pendulum.parse(created_at) if created_at else None,
        updated_at=pendulum.parse(updated_at) if updated_at else None,
    )


class JsonFileBookingRepository(InMemoryBookingRepository):
    """
    Keeps bookings in memory and rewrites the whole file after each change.

    The file holds a JSON list of booking records. A missing file is treated
    as an empty store and created on the first write.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> List[Booking]:
        if not self.path.exists():
            logger.info("No booking file at %s, starting empty", self.path)
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise RepositoryError(f"Could not read bookings from {self.path}: {exc}") from exc

        if not isinstance(records, list):
            raise RepositoryError(f"{self.path} must contain a JSON list of bookings")

        try:
            bookings = [booking_from_record(record) for record in records]
        except (KeyError, TypeError, ValueError) as exc:
            raise RepositoryError(f"Invalid booking record in {self.path}: {exc}") from exc

        logger.debug("Loaded %d bookings from %s", len(bookings), self.path)
        return bookings

    def _commit(self) -> None:
        records = [booking_to_record(booking) for booking in self.all_bookings()]
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise RepositoryError(f"Could not write bookings to {self.path}: {exc}") from exc
