# backend/careslot/routers/slots.py
"""
Slots API endpoints.

GET /slots/available - Bookable slots of a provider on a date
GET /slots/schedule  - All slots of the day with break/booking state
GET /slots/calendar  - Open slot counts per day over the booking horizon
"""

from datetime import date, datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import SlotRead, SlotsCalendarResponse
from ..services.slots import available_slots, calendar_days, day_schedule, get_booking_config


router = APIRouter(prefix="/slots", tags=["slots"])


def get_now() -> datetime:
    """Request clock; every date check of one request derives from it."""
    return datetime.now()


@router.get("/available", response_model=list[SlotRead])
def get_available_slots(
    provider_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Bookable slots for a provider on a day. Empty list = nothing free."""
    config = get_booking_config()
    today = now.date()

    if target_date < today:
        raise HTTPException(status_code=400, detail="Date cannot be in the past")
    if target_date > today + timedelta(days=config.horizon_days):
        raise HTTPException(
            status_code=400,
            detail=f"Date cannot be more than {config.horizon_days} days ahead",
        )

    slots = available_slots(db, provider_id, target_date)

    if target_date == today:
        current_time = now.strftime("%H:%M")
        slots = [s for s in slots if s.start_time > current_time]

    return slots


@router.get("/schedule", response_model=list[SlotRead])
def get_day_schedule(
    provider_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Provider's day grid, including breaks and booked slots."""
    return day_schedule(db, provider_id, target_date)


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_slots_calendar(
    provider_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Calendar of days with open slots, clamped to the booking horizon."""
    result = calendar_days(
        db,
        provider_id,
        start_date=start_date,
        end_date=end_date,
        config=get_booking_config(),
        now=now,
    )
    return SlotsCalendarResponse(**result)
