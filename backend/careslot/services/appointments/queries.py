"""Read-side queries: appointment lists and the provider's pending queue."""

import logging
from collections import Counter
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointments
from .booking import APPOINTMENT_TYPES

logger = logging.getLogger(__name__)


def list_appointments(
    db: Session,
    provider_id: Optional[int] = None,
    patient_id: Optional[int] = None,
    status: Optional[str] = None,
    type: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: Optional[int] = 100,
) -> list[Appointments]:
    """Filtered appointments ordered by date and time."""
    query = db.query(Appointments)

    if provider_id is not None:
        query = query.filter(Appointments.provider_id == provider_id)
    if patient_id is not None:
        query = query.filter(Appointments.patient_id == patient_id)
    if status is not None:
        query = query.filter(Appointments.status == status)
    if type is not None:
        query = query.filter(Appointments.type == type)
    if date_from is not None:
        query = query.filter(Appointments.date >= date_from)
    if date_to is not None:
        query = query.filter(Appointments.date <= date_to)

    return (
        query.order_by(Appointments.date, Appointments.time)
        .offset(skip)
        .limit(limit)
        .all()
    )


def urgency_label(appointment: Appointments, now: datetime) -> str:
    """
    Triage label for a pending request.

    Emergencies are always "Urgent"; otherwise by days waiting:
    3+ "Overdue", 1+ "Pending", else "New".
    """
    if appointment.type == "emergency":
        return "Urgent"
    days_waiting = (now - appointment.created_at).days
    if days_waiting >= 3:
        return "Overdue"
    if days_waiting >= 1:
        return "Pending"
    return "New"


def pending_queue(
    db: Session,
    provider_id: int,
    type: Optional[str] = None,
    now: datetime | None = None,
) -> dict:
    """Pending requests of a provider, earliest first, with per-type counts."""
    now = now or datetime.now()
    pending = list_appointments(db, provider_id=provider_id, status="pending", limit=None)

    counts = Counter(appt.type for appt in pending)
    type_counts = {"all": len(pending)}
    type_counts.update({t: counts.get(t, 0) for t in APPOINTMENT_TYPES})

    if type is not None:
        pending = [appt for appt in pending if appt.type == type]

    return {
        "provider_id": provider_id,
        "type_counts": type_counts,
        "items": [
            {"appointment": appt, "urgency": urgency_label(appt, now)}
            for appt in pending
        ],
    }
