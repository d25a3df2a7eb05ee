# backend/careslot/services/slots/schedule.py
"""
Provider schedule: recurring weekly windows and break windows.

Windows are stored per provider and weekday (0 = Sunday). Breaks either
recur on a weekday or are pinned to a single date, and must sit inside a
window of the same provider and weekday.
"""

import datetime
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterator, Optional

from ...models import BreakWindows, ScheduleWindows
from ..errors import InvalidWindow
from ..repository import BookingRepository
from .config import get_booking_config, sunday_based_weekday, time_str_to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleWindow:
    provider_id: int
    day_of_week: int
    start_time: str
    end_time: str
    slot_duration_minutes: int = 30
    id: Optional[int] = None

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_str_to_minutes(self.end_time)

    @classmethod
    def from_row(cls, row: ScheduleWindows) -> "ScheduleWindow":
        return cls(
            id=row.id,
            provider_id=row.provider_id,
            day_of_week=row.day_of_week,
            start_time=row.start_time,
            end_time=row.end_time,
            slot_duration_minutes=row.slot_duration_minutes,
        )


@dataclass(frozen=True)
class BreakWindow:
    provider_id: int
    start_time: str
    end_time: str
    label: str = "Break"
    day_of_week: Optional[int] = None
    date: Optional[datetime.date] = None
    id: Optional[int] = None

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_str_to_minutes(self.end_time)

    @property
    def weekday(self) -> int:
        if self.date is not None:
            return sunday_based_weekday(self.date)
        return self.day_of_week

    @classmethod
    def from_row(cls, row: BreakWindows) -> "BreakWindow":
        return cls(
            id=row.id,
            provider_id=row.provider_id,
            day_of_week=row.day_of_week,
            date=row.date,
            start_time=row.start_time,
            end_time=row.end_time,
            label=row.label,
        )


def _interval(start_time: str, end_time: str) -> tuple[int, int]:
    try:
        start = time_str_to_minutes(start_time)
        end = time_str_to_minutes(end_time)
    except ValueError as e:
        raise InvalidWindow(str(e)) from e
    if start >= end:
        raise InvalidWindow(f"Start {start_time} must be before end {end_time}")
    return start, end


class ProviderSchedule:
    """Schedule model backed by the booking repository."""

    def __init__(self, repo: BookingRepository):
        self.repo = repo

    # ── Windows ──────────────────────────────────────────────────────────

    def add_window(self, window: ScheduleWindow) -> ScheduleWindow:
        start, end = _interval(window.start_time, window.end_time)

        if not 0 <= window.day_of_week <= 6:
            raise InvalidWindow(f"day_of_week must be 0-6, got {window.day_of_week}")
        if window.slot_duration_minutes <= 0:
            raise InvalidWindow("slot_duration_minutes must be positive")

        for other in self.repo.get_schedule_windows(window.provider_id):
            if other.day_of_week != window.day_of_week:
                continue
            other_start = time_str_to_minutes(other.start_time)
            other_end = time_str_to_minutes(other.end_time)
            if start < other_end and other_start < end:
                granularity = (
                    "conflicting slot duration"
                    if other.slot_duration_minutes != window.slot_duration_minutes
                    else "same slot duration"
                )
                raise InvalidWindow(
                    f"Window {window.start_time}-{window.end_time} overlaps "
                    f"{other.start_time}-{other.end_time} ({granularity})"
                )

        row = ScheduleWindows(
            provider_id=window.provider_id,
            day_of_week=window.day_of_week,
            start_time=window.start_time,
            end_time=window.end_time,
            slot_duration_minutes=window.slot_duration_minutes,
        )
        self.repo.add(row)
        self.repo.commit()
        logger.info(
            f"Schedule window {row.id} added for provider={row.provider_id} "
            f"day={row.day_of_week} {row.start_time}-{row.end_time}"
        )
        return ScheduleWindow.from_row(row)

    def windows_for(self, provider_id: int, target_date: date) -> Iterator[ScheduleWindow]:
        """Windows applying to the weekday of target_date, by start time."""
        weekday = sunday_based_weekday(target_date)
        rows = [
            w for w in self.repo.get_schedule_windows(provider_id)
            if w.day_of_week == weekday
        ]
        rows.sort(key=lambda w: time_str_to_minutes(w.start_time))
        for row in rows:
            yield ScheduleWindow.from_row(row)

    def list_windows(self, provider_id: int) -> list[ScheduleWindow]:
        return [
            ScheduleWindow.from_row(row)
            for row in self.repo.get_schedule_windows(provider_id)
        ]

    def remove_window(self, window_id: int) -> bool:
        """Delete a window together with the breaks it contains."""
        row = self.repo.db.get(ScheduleWindows, window_id)
        if row is None:
            return False

        window = ScheduleWindow.from_row(row)
        contained = [
            brk for brk in self.repo.get_break_windows(window.provider_id)
            if BreakWindow.from_row(brk).weekday == window.day_of_week
            and window.start_minutes <= time_str_to_minutes(brk.start_time)
            and time_str_to_minutes(brk.end_time) <= window.end_minutes
        ]

        for brk in contained:
            self.repo.delete(brk)
        self.repo.delete(row)
        self.repo.commit()
        logger.info(
            f"Schedule window {window_id} removed for provider={window.provider_id} "
            f"with {len(contained)} break(s)"
        )
        return True

    # ── Breaks ───────────────────────────────────────────────────────────

    def add_break(self, brk: BreakWindow) -> BreakWindow:
        start, end = _interval(brk.start_time, brk.end_time)

        if (brk.day_of_week is None) == (brk.date is None):
            raise InvalidWindow("Break needs exactly one of day_of_week or date")
        if brk.day_of_week is not None and not 0 <= brk.day_of_week <= 6:
            raise InvalidWindow(f"day_of_week must be 0-6, got {brk.day_of_week}")

        weekday = brk.weekday
        contained = any(
            w.day_of_week == weekday
            and time_str_to_minutes(w.start_time) <= start
            and end <= time_str_to_minutes(w.end_time)
            for w in self.repo.get_schedule_windows(brk.provider_id)
        )
        if not contained:
            raise InvalidWindow(
                f"Break {brk.start_time}-{brk.end_time} is not inside a schedule window"
            )

        row = BreakWindows(
            provider_id=brk.provider_id,
            day_of_week=brk.day_of_week,
            date=brk.date,
            start_time=brk.start_time,
            end_time=brk.end_time,
            label=brk.label,
        )
        self.repo.add(row)
        self.repo.commit()
        logger.info(
            f"Break {row.id} ({row.label}) added for provider={row.provider_id} "
            f"{row.start_time}-{row.end_time}"
        )
        return BreakWindow.from_row(row)

    def breaks_for(self, provider_id: int, target_date: date) -> list[BreakWindow]:
        return [
            BreakWindow.from_row(row)
            for row in self.repo.get_break_windows(provider_id, target_date)
        ]

    def list_breaks(self, provider_id: int) -> list[BreakWindow]:
        return [
            BreakWindow.from_row(row)
            for row in self.repo.get_break_windows(provider_id)
        ]

    def remove_break(self, break_id: int) -> bool:
        row = self.repo.db.get(BreakWindows, break_id)
        if row is None:
            return False
        self.repo.delete(row)
        self.repo.commit()
        return True


def default_window(provider_id: int, day_of_week: int, start_time: str, end_time: str) -> ScheduleWindow:
    """Window using the configured default slot duration."""
    return ScheduleWindow(
        provider_id=provider_id,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        slot_duration_minutes=get_booking_config().default_slot_duration_minutes,
    )
