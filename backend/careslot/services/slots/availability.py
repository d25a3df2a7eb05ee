# backend/careslot/services/slots/availability.py
"""
Slot availability for a provider.

Takes the generated slots of a day (calculator) and subtracts:
- break slots
- slots held by a pending or confirmed appointment

"No slots" is an empty list, never an error.
"""

import logging
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from ..repository import BookingRepository
from .calculator import Slot, generate_slots
from .config import BookingConfig, get_booking_config, time_str_to_minutes
from .schedule import ProviderSchedule

logger = logging.getLogger(__name__)


def day_schedule(
    db: Session,
    provider_id: int,
    target_date: date,
) -> list[Slot]:
    """Every slot of the day, annotated with break and booking state."""
    repo = BookingRepository(db)
    slots = generate_slots(ProviderSchedule(repo), provider_id, target_date)
    if not slots:
        return []

    booked = {
        appt.time: appt.id
        for appt in repo.find_active_appointments(provider_id, target_date)
    }

    for slot in slots:
        if slot.is_break:
            continue
        appointment_id = booked.get(slot.start_time)
        if appointment_id is not None:
            slot.is_booked = True
            slot.appointment_id = appointment_id

    return slots


def available_slots(
    db: Session,
    provider_id: int,
    target_date: date,
) -> list[Slot]:
    """Bookable slots (not a break, not booked) in ascending time."""
    slots = [s for s in day_schedule(db, provider_id, target_date) if s.is_bookable]
    logger.debug(
        f"provider={provider_id} date={target_date}: {len(slots)} available slots"
    )
    return slots


def calendar_days(
    db: Session,
    provider_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Open slot counts per day over a range clamped to the booking horizon.

    Slots of today that already started count as closed.
    """
    config = config or get_booking_config()
    now = now or datetime.now()
    today = now.date()

    if start_date is None or start_date < today:
        start_date = today
    max_date = today + timedelta(days=config.horizon_days)
    if end_date is None or end_date > max_date:
        end_date = max_date
    if end_date < start_date:
        end_date = start_date

    now_min = now.hour * 60 + now.minute
    days = []
    current = start_date
    while current <= end_date:
        slots = available_slots(db, provider_id, current)
        if current == today:
            slots = [s for s in slots if time_str_to_minutes(s.start_time) > now_min]
        days.append({
            "date": current,
            "has_slots": bool(slots),
            "open_slots_count": len(slots),
        })
        current += timedelta(days=1)

    return {
        "provider_id": provider_id,
        "start_date": start_date,
        "end_date": end_date,
        "days": days,
        "horizon_days": config.horizon_days,
    }
