# backend/careslot/schemas/schedule.py

import datetime
from typing import Optional
from pydantic import BaseModel, Field

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ScheduleWindowCreate(BaseModel):
    provider_id: int
    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday")
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    slot_duration_minutes: Optional[int] = Field(default=None, gt=0)

    model_config = {"from_attributes": True}


class ScheduleWindowRead(BaseModel):
    id: int
    provider_id: int
    day_of_week: int
    start_time: str
    end_time: str
    slot_duration_minutes: int

    model_config = {"from_attributes": True}


class BreakWindowCreate(BaseModel):
    provider_id: int
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    date: Optional[datetime.date] = None
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    label: str = "Break"

    model_config = {"from_attributes": True}


class BreakWindowRead(BaseModel):
    id: int
    provider_id: int
    day_of_week: Optional[int] = None
    date: Optional[datetime.date] = None
    start_time: str
    end_time: str
    label: str

    model_config = {"from_attributes": True}
