# backend/careslot/services/appointments/lifecycle.py
"""
Appointment state machine.

    pending ──confirm──▶ confirmed ──complete──▶ completed
       │                    │
       ├──reject──▶ rejected└──cancel──▶ cancelled
       └──cancel──▶ cancelled

rejected, cancelled and completed are terminal. Each transition is a
compare-and-swap on the status read in the same transaction; when a
concurrent request already moved the appointment, the loser gets
InvalidTransitionError and nothing changes. Reject and cancel release the
slot so it can be booked again.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointments
from ..errors import (
    AppointmentNotFound,
    InvalidTransitionError,
    MissingReasonError,
    PrematureCompletionError,
)
from ..events import (
    APPOINTMENT_CANCELLED,
    APPOINTMENT_CONFIRMED,
    APPOINTMENT_REJECTED,
    NotificationSink,
    dispatch,
)
from ..repository import BookingRepository
from .booking import scheduled_start

logger = logging.getLogger(__name__)

# transition -> (allowed prior statuses, resulting status)
TRANSITIONS: dict[str, tuple[frozenset[str], str]] = {
    "confirm": (frozenset({"pending"}), "confirmed"),
    "reject": (frozenset({"pending"}), "rejected"),
    "cancel": (frozenset({"pending", "confirmed"}), "cancelled"),
    "complete": (frozenset({"confirmed"}), "completed"),
}

TERMINAL_STATUSES = frozenset({"rejected", "cancelled", "completed"})


def confirm(
    db: Session,
    appointment_id: int,
    sink: NotificationSink,
    now: datetime | None = None,
) -> Appointments:
    now = now or datetime.now()
    appointment = _transition(db, appointment_id, "confirm", {"confirmed_at": now}, now)

    dispatch(
        sink,
        user_id=appointment.patient_id,
        notification_type=APPOINTMENT_CONFIRMED,
        title="Appointment confirmed",
        message=(
            f"Your appointment on {appointment.date.isoformat()} at "
            f"{appointment.time} has been confirmed."
        ),
        related_entity_id=appointment.id,
    )
    return appointment


def reject(
    db: Session,
    appointment_id: int,
    reason: str,
    sink: NotificationSink,
    now: datetime | None = None,
) -> Appointments:
    if not reason or not reason.strip():
        raise MissingReasonError("A rejection reason is required")

    appointment = _transition(
        db,
        appointment_id,
        "reject",
        {"rejection_reason": reason.strip()},
        now or datetime.now(),
        release_slot=True,
    )

    dispatch(
        sink,
        user_id=appointment.patient_id,
        notification_type=APPOINTMENT_REJECTED,
        title="Appointment rejected",
        message=(
            f"Your appointment request for {appointment.date.isoformat()} at "
            f"{appointment.time} was rejected: {appointment.rejection_reason}"
        ),
        related_entity_id=appointment.id,
    )
    return appointment


def cancel(
    db: Session,
    appointment_id: int,
    reason: Optional[str],
    sink: NotificationSink,
    actor_id: Optional[int] = None,
    now: datetime | None = None,
) -> Appointments:
    """
    Cancel a pending or confirmed appointment.

    The counterparty of actor_id is notified: the patient when the provider
    cancels, the provider otherwise.
    """
    reason = reason.strip() if reason else None
    appointment = _transition(
        db,
        appointment_id,
        "cancel",
        {"cancellation_reason": reason},
        now or datetime.now(),
        release_slot=True,
    )

    if actor_id is not None and actor_id == appointment.provider_id:
        recipient = appointment.patient_id
    else:
        recipient = appointment.provider_id

    message = (
        f"The appointment on {appointment.date.isoformat()} at "
        f"{appointment.time} has been cancelled."
    )
    if reason:
        message += f" Reason: {reason}"

    dispatch(
        sink,
        user_id=recipient,
        notification_type=APPOINTMENT_CANCELLED,
        title="Appointment cancelled",
        message=message,
        related_entity_id=appointment.id,
    )
    return appointment


def complete(
    db: Session,
    appointment_id: int,
    now: datetime | None = None,
) -> Appointments:
    """Mark a confirmed appointment completed once its start has passed."""
    now = now or datetime.now()

    def _started(appointment: Appointments) -> None:
        starts_at = scheduled_start(appointment.date, appointment.time)
        if starts_at >= now:
            raise PrematureCompletionError(
                f"Appointment {appointment.id} is scheduled for "
                f"{starts_at.isoformat(sep=' ', timespec='minutes')}"
            )

    return _transition(db, appointment_id, "complete", {}, now, guard=_started)


# ── Helpers ──────────────────────────────────────────────────────────────


def _transition(
    db: Session,
    appointment_id: int,
    name: str,
    fields: dict,
    now: datetime,
    release_slot: bool = False,
    guard=None,
) -> Appointments:
    """Apply one transition atomically and return the refreshed appointment."""
    allowed, new_status = TRANSITIONS[name]
    fields = {**fields, "updated_at": now}
    repo = BookingRepository(db)

    try:
        appointment = repo.get_appointment(appointment_id)
        if appointment is None:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")

        current = appointment.status
        if current not in allowed:
            raise InvalidTransitionError(
                f"Cannot {name} appointment {appointment_id}: it is already {current}"
            )
        if guard is not None:
            guard(appointment)

        if not repo.update_appointment_status(appointment_id, current, new_status, fields):
            # Another request changed the status between read and write
            raise InvalidTransitionError(
                f"Cannot {name} appointment {appointment_id}: it was already acted upon"
            )
        if release_slot:
            repo.release_slot(appointment_id)

        repo.commit()
    except Exception:
        repo.rollback()
        raise

    db.refresh(appointment)
    logger.info(f"Appointment {appointment_id}: {current} → {new_status} ({name})")
    return appointment
