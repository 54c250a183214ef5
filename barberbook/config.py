"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, List

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import ValidationError as DomainValidationError
from .domain.models import (
    WEEKDAY_NAMES,
    Barber,
    Service,
    WeeklySchedule,
    WorkingHours,
    parse_clock_time,
)


class BookingRules(BaseModel):
    """Booking policy constants consumed by the core."""
    slot_granularity_minutes: int = 30
    min_advance_booking_hours: int = 1
    max_advance_booking_days: int = 30
    cancellation_window_hours: int = 2

    @field_validator("slot_granularity_minutes", "max_advance_booking_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure step sizes and ranges are positive."""
        if value <= 0:
            raise ValueError(f"must be greater than zero, got {value}")
        return value

    @field_validator("min_advance_booking_hours", "cancellation_window_hours")
    @classmethod
    def validate_not_negative(cls, value: int) -> int:
        """Lead times may be zero but never negative."""
        if value < 0:
            raise ValueError(f"must not be negative, got {value}")
        return value


class WorkingHoursConfig(BaseModel):
    """One weekday's opening window as written in the config file."""
    start: str = "09:00"
    end: str = "18:00"
    is_open: bool = True

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        """Validate HH:MM format."""
        try:
            parsed = parse_clock_time(value)
        except DomainValidationError as exc:
            raise ValueError(str(exc)) from exc
        return f"{parsed.hour:02d}:{parsed.minute:02d}"

    @model_validator(mode="after")
    def validate_hours_order(self) -> "WorkingHoursConfig":
        """Ensure an open day opens before it closes."""
        if self.is_open and parse_clock_time(self.end) <= parse_clock_time(self.start):
            raise ValueError(f"end ({self.end}) must be later than start ({self.start})")
        return self

    def to_domain(self) -> WorkingHours:
        return WorkingHours(start=self.start, end=self.end, is_open=self.is_open)


def _default_working_hours() -> Dict[str, WorkingHoursConfig]:
    schedule = WeeklySchedule.default()
    return {
        name: WorkingHoursConfig(start=hours.start, end=hours.end, is_open=hours.is_open)
        for name, hours in schedule.days.items()
    }


class ServiceConfig(BaseModel):
    """Service offered by the business."""
    id: str
    name: str
    duration_minutes: int
    price: float = 0.0
    is_active: bool = True

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure service duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    def to_domain(self) -> Service:
        return Service(
            id=self.id,
            name=self.name,
            duration_minutes=self.duration_minutes,
            price=self.price,
            is_active=self.is_active,
        )


class BarberConfig(BaseModel):
    """Barber configuration."""
    id: str
    name: str  # Also accepted as alias on the command line
    specialties: List[str] = Field(default_factory=list)
    is_active: bool = True

    def to_domain(self) -> Barber:
        return Barber(
            id=self.id,
            name=self.name,
            specialties=list(self.specialties),
            is_active=self.is_active,
        )


class BusinessConfig(BaseModel):
    """The shop whose calendar is being managed."""
    id: str
    name: str
    timezone: str = "Europe/Berlin"
    working_hours: Dict[str, WorkingHoursConfig] = Field(default_factory=_default_working_hours)
    barbers: List[BarberConfig] = Field(default_factory=list)
    services: List[ServiceConfig] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject unknown IANA zone names early."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("working_hours")
    @classmethod
    def validate_weekdays(cls, value: Dict[str, WorkingHoursConfig]) -> Dict[str, WorkingHoursConfig]:
        """Require exactly the seven weekday keys."""
        normalized = {key.strip().lower(): hours for key, hours in value.items()}
        unknown = sorted(set(normalized) - set(WEEKDAY_NAMES))
        if unknown:
            raise ValueError(f"Unknown weekday names: {', '.join(unknown)}")
        missing = [name for name in WEEKDAY_NAMES if name not in normalized]
        if missing:
            raise ValueError(f"working_hours is missing days: {', '.join(missing)}")
        return normalized

    @field_validator("barbers", "services")
    @classmethod
    def validate_unique_ids(cls, value: list) -> list:
        """Ensure ids are unique within each catalogue."""
        seen: set[str] = set()
        for entry in value:
            if entry.id in seen:
                raise ValueError(f"Duplicate id detected: {entry.id}")
            seen.add(entry.id)
        return value

    def weekly_schedule(self) -> WeeklySchedule:
        return WeeklySchedule(
            days={name: hours.to_domain() for name, hours in self.working_hours.items()}
        )

    def find_barber(self, identifier: str) -> BarberConfig | None:
        """Find a barber by id or (case-insensitive) name."""
        for barber in self.barbers:
            if barber.id == identifier or barber.name.lower() == identifier.lower():
                return barber
        return None

    def find_service(self, identifier: str) -> ServiceConfig | None:
        """Find a service by id or (case-insensitive) name."""
        for service in self.services:
            if service.id == identifier or service.name.lower() == identifier.lower():
                return service
        return None


class AppConfig(BaseModel):
    """Application configuration."""
    business: BusinessConfig
    booking: BookingRules = Field(default_factory=BookingRules)
    data_file: Path = Path("bookings.json")
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        # A relative data file lives next to the config it was declared in
        if not config.data_file.is_absolute():
            config = config.model_copy(update={"data_file": config_path.parent / config.data_file})
        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
