# backend/careslot/routers/appointments.py
# Booking and lifecycle. PATCH = 405, DELETE = 405 (appointments are never deleted)

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth import Identity, get_identity, require_provider
from ..database import get_db
from ..models import Appointments as DBAppointments
from ..schemas.appointments import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentStatus,
    AppointmentType,
    CancelRequest,
    PendingQueueResponse,
    RejectRequest,
)
from ..services import appointments as svc
from ..services.events import NotificationSink, get_notification_sink

router = APIRouter(prefix="/appointments", tags=["appointments"])


def _get_or_404(db: Session, id: int) -> DBAppointments:
    obj = db.get(DBAppointments, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


def _require_party(identity: Identity, appointment: DBAppointments) -> None:
    if identity.user_id not in (appointment.patient_id, appointment.provider_id):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not a party to this appointment")


@router.get("/", response_model=list[AppointmentRead])
def list_appointments(
    provider_id: Optional[int] = None,
    patient_id: Optional[int] = None,
    status: Optional[AppointmentStatus] = None,
    type: Optional[AppointmentType] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """Appointments visible to the caller: providers see theirs, patients theirs."""
    if identity.is_provider:
        provider_id = identity.user_id
    else:
        patient_id = identity.user_id

    return svc.list_appointments(
        db,
        provider_id=provider_id,
        patient_id=patient_id,
        status=status,
        type=type,
        date_from=date_from,
        date_to=date_to,
        skip=skip,
        limit=limit,
    )


@router.get("/pending", response_model=PendingQueueResponse)
def pending_appointments(
    type: Optional[AppointmentType] = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """The calling provider's pending requests, earliest first."""
    if not identity.is_provider:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Only providers have a pending queue")
    return svc.pending_queue(db, identity.user_id, type=type)


@router.get("/{id}", response_model=AppointmentRead)
def get_appointment(
    id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    obj = _get_or_404(db, id)
    _require_party(identity, obj)
    return obj


@router.post("/", response_model=AppointmentRead, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentCreate,
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
    identity: Identity = Depends(get_identity),
):
    if not identity.is_patient:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Only patients can book appointments")

    request = svc.BookingRequest(patient_id=identity.user_id, **data.model_dump())
    return svc.book(db, request, sink)


@router.post("/{id}/confirm", response_model=AppointmentRead)
def confirm_appointment(
    id: int,
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
    identity: Identity = Depends(get_identity),
):
    require_provider(identity, _get_or_404(db, id).provider_id)
    return svc.confirm(db, id, sink)


@router.post("/{id}/reject", response_model=AppointmentRead)
def reject_appointment(
    id: int,
    data: RejectRequest,
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
    identity: Identity = Depends(get_identity),
):
    require_provider(identity, _get_or_404(db, id).provider_id)
    return svc.reject(db, id, data.reason, sink)


@router.post("/{id}/cancel", response_model=AppointmentRead)
def cancel_appointment(
    id: int,
    data: CancelRequest,
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
    identity: Identity = Depends(get_identity),
):
    _require_party(identity, _get_or_404(db, id))
    return svc.cancel(db, id, data.reason, sink, actor_id=identity.user_id)


@router.post("/{id}/complete", response_model=AppointmentRead)
def complete_appointment(
    id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    require_provider(identity, _get_or_404(db, id).provider_id)
    return svc.complete(db, id)


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
