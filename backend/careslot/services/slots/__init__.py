# backend/careslot/services/slots/__init__.py
"""
Slots calculation module.

Schedule model -> slot generator (per date) -> availability resolver.
"""

from .config import BookingConfig, get_booking_config
from .schedule import BreakWindow, ProviderSchedule, ScheduleWindow
from .calculator import Slot, generate_slots
from .availability import available_slots, calendar_days, day_schedule

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "BreakWindow",
    "ProviderSchedule",
    "ScheduleWindow",
    "Slot",
    "generate_slots",
    "available_slots",
    "calendar_days",
    "day_schedule",
]
