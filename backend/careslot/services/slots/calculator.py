# backend/careslot/services/slots/calculator.py
"""
Slot generation for one provider on one date.

Expands each schedule window on a fixed grid of slot_duration_minutes.
A step [t, t + duration) is emitted only if it fits inside its window,
and is flagged is_break when it intersects a break by any positive span.

Contains:
✓ schedule windows for the weekday
✓ recurring and date-pinned breaks

Does NOT contain:
✗ Bookings (applied by the availability resolver)
✗ Past-date rejection (callers decide what "now" is)
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .config import minutes_to_time_str
from .schedule import BreakWindow, ProviderSchedule


@dataclass
class Slot:
    id: str
    provider_id: int
    date: date
    start_time: str
    duration_minutes: int
    is_break: bool = False
    is_booked: bool = False
    appointment_id: Optional[int] = None
    break_label: Optional[str] = None

    @property
    def is_bookable(self) -> bool:
        return not self.is_break and not self.is_booked


def slot_id(provider_id: int, target_date: date, start_time: str) -> str:
    return f"{provider_id}|{target_date.isoformat()}|{start_time}"


def generate_slots(
    schedule: ProviderSchedule,
    provider_id: int,
    target_date: date,
) -> list[Slot]:
    """
    Generate candidate slots for a provider on a date.

    Returns:
        Slots in ascending start time. Empty list = no window that day.
    """
    windows = list(schedule.windows_for(provider_id, target_date))
    if not windows:
        return []

    breaks = schedule.breaks_for(provider_id, target_date)

    slots: list[Slot] = []
    for window in windows:
        step = window.slot_duration_minutes
        end_min = window.end_minutes

        t = window.start_minutes
        while t + step <= end_min:
            time_str = minutes_to_time_str(t)
            brk = _intersecting_break(breaks, t, t + step)
            slots.append(Slot(
                id=slot_id(provider_id, target_date, time_str),
                provider_id=provider_id,
                date=target_date,
                start_time=time_str,
                duration_minutes=step,
                is_break=brk is not None,
                break_label=brk.label if brk else None,
            ))
            t += step

    return slots


# ── Helpers ──────────────────────────────────────────────────────────────


def _intersecting_break(
    breaks: list[BreakWindow],
    start_min: int,
    end_min: int,
) -> Optional[BreakWindow]:
    """First break overlapping [start_min, end_min) by a positive span."""
    for brk in breaks:
        if start_min < brk.end_minutes and brk.start_minutes < end_min:
            return brk
    return None
