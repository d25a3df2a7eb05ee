# backend/careslot/routers/schedule.py
# Provider schedule management. PATCH = 405, DELETE = ALLOWED (hard)

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth import Identity, get_identity, require_provider
from ..database import get_db
from ..models import BreakWindows as DBBreakWindows
from ..models import ScheduleWindows as DBScheduleWindows
from ..schemas.schedule import (
    BreakWindowCreate,
    BreakWindowRead,
    ScheduleWindowCreate,
    ScheduleWindowRead,
)
from ..services.repository import BookingRepository
from ..services.slots import BreakWindow, ProviderSchedule, ScheduleWindow
from ..services.slots.schedule import default_window

router = APIRouter(prefix="/schedule", tags=["schedule"])


def _schedule(db: Session) -> ProviderSchedule:
    return ProviderSchedule(BookingRepository(db))


# ── Windows ──────────────────────────────────────────────────────────────


@router.get("/windows", response_model=list[ScheduleWindowRead])
def list_windows(provider_id: int, db: Session = Depends(get_db)):
    return _schedule(db).list_windows(provider_id)


@router.post(
    "/windows", response_model=ScheduleWindowRead, status_code=status.HTTP_201_CREATED
)
def create_window(
    data: ScheduleWindowCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    require_provider(identity, data.provider_id)

    if data.slot_duration_minutes is None:
        window = default_window(
            data.provider_id, data.day_of_week, data.start_time, data.end_time
        )
    else:
        window = ScheduleWindow(**data.model_dump())

    return _schedule(db).add_window(window)


@router.patch("/windows/{id}")
def patch_window_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/windows/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_window(
    id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    obj = db.get(DBScheduleWindows, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    require_provider(identity, obj.provider_id)
    _schedule(db).remove_window(id)


# ── Breaks ───────────────────────────────────────────────────────────────


@router.get("/breaks", response_model=list[BreakWindowRead])
def list_breaks(provider_id: int, db: Session = Depends(get_db)):
    return _schedule(db).list_breaks(provider_id)


@router.post(
    "/breaks", response_model=BreakWindowRead, status_code=status.HTTP_201_CREATED
)
def create_break(
    data: BreakWindowCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    require_provider(identity, data.provider_id)
    return _schedule(db).add_break(BreakWindow(**data.model_dump()))


@router.patch("/breaks/{id}")
def patch_break_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/breaks/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_break(
    id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    obj = db.get(DBBreakWindows, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    require_provider(identity, obj.provider_id)
    _schedule(db).remove_break(id)
