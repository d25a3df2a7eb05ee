# backend/careslot/schemas/appointments.py

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from .schedule import TIME_PATTERN

AppointmentType = Literal["consultation", "follow-up", "check-up", "emergency", "other"]
AppointmentStatus = Literal["pending", "confirmed", "rejected", "cancelled", "completed"]


class AppointmentCreate(BaseModel):
    provider_id: int
    date: date
    time: str = Field(pattern=TIME_PATTERN)
    duration_minutes: int = Field(gt=0)
    type: AppointmentType = "consultation"
    reason: str = Field(min_length=1)
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class AppointmentRead(BaseModel):
    id: int

    patient_id: int
    provider_id: int

    date: date
    time: str
    duration_minutes: int

    status: AppointmentStatus
    type: str
    reason: str
    notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime
    confirmed_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    rejection_reason: Optional[str] = None

    model_config = {"from_attributes": True}


class RejectRequest(BaseModel):
    reason: str = Field(min_length=1)


class CancelRequest(BaseModel):
    reason: Optional[str] = None


class PendingItem(BaseModel):
    appointment: AppointmentRead
    urgency: Literal["Urgent", "Overdue", "Pending", "New"]

    model_config = {"from_attributes": True}


class PendingQueueResponse(BaseModel):
    provider_id: int
    type_counts: dict[str, int]
    items: list[PendingItem]
