# backend/careslot/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class SlotRead(BaseModel):
    """A single slot of a provider's day."""
    id: str
    provider_id: int
    date: date
    start_time: str  # "HH:MM"
    duration_minutes: int
    is_break: bool
    is_booked: bool
    appointment_id: Optional[int] = None
    break_label: Optional[str] = None

    model_config = {"from_attributes": True}


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    has_slots: bool
    open_slots_count: int = 0

    model_config = {"from_attributes": True}


class SlotsCalendarResponse(BaseModel):
    """Response with calendar of available days."""
    provider_id: int
    start_date: date
    end_date: date
    days: list[SlotsDayStatus]

    horizon_days: int = Field(description="How many days ahead slots are shown")

    model_config = {"from_attributes": True}
