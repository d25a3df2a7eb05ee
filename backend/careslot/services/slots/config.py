# backend/careslot/services/slots/config.py
"""
Booking configuration and canonical time helpers.

Times cross the system boundary as "HH:MM" strings; the slot grid works
in minutes since midnight.
"""

import re
from dataclasses import dataclass
from datetime import date
from functools import lru_cache

from ...config import settings

TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for booking/slots system.

    Attributes:
        horizon_days: How many days ahead the calendar shows slots
        default_slot_duration_minutes: Slot length for new schedule windows
        reminder_before_minutes: Lead time of appointment reminders
    """
    horizon_days: int = 60
    default_slot_duration_minutes: int = 30
    reminder_before_minutes: int = 120

    def __post_init__(self):
        """Validate configuration."""
        if self.horizon_days < 1:
            raise ValueError(f"horizon_days must be positive, got {self.horizon_days}")
        if self.default_slot_duration_minutes < 1:
            raise ValueError(
                "default_slot_duration_minutes must be positive, "
                f"got {self.default_slot_duration_minutes}"
            )


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton) from settings."""
    return BookingConfig(
        horizon_days=settings.horizon_days,
        default_slot_duration_minutes=settings.default_slot_duration_minutes,
        reminder_before_minutes=settings.reminder_before_minutes,
    )


def time_str_to_minutes(value: str) -> int:
    """"09:30" -> 570. Raises ValueError on anything but "HH:MM"."""
    match = TIME_RE.match(value)
    if not match:
        raise ValueError(f"Time must be HH:MM, got {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time_str(minutes: int) -> str:
    """570 -> "09:30"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def sunday_based_weekday(target_date: date) -> int:
    """Weekday with Sunday = 0, as schedule windows store it."""
    return (target_date.weekday() + 1) % 7
