# backend/careslot/services/appointments/booking.py
"""
Booking transaction.

Validates one booking request against the provider's schedule and commits
it as a pending appointment. Checks run in this order, each with its own
error:

1. slot start already elapsed          → PastDateError
2. not a non-break slot of the schedule → InvalidSlotError
3. slot held by pending/confirmed appt  → SlotConflictError

The final insert is guarded by the partial unique index on
(provider_id, date, time), so two concurrent bookers of one slot cannot
both succeed; the loser gets SlotConflictError and a retry is safe.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointments
from ..errors import InvalidSlotError, PastDateError, SlotConflictError
from ..events import APPOINTMENT_REQUESTED, NotificationSink, dispatch
from ..repository import BookingRepository
from ..slots import ProviderSchedule, generate_slots
from ..slots.config import time_str_to_minutes

logger = logging.getLogger(__name__)

APPOINTMENT_TYPES = ("consultation", "follow-up", "check-up", "emergency", "other")


@dataclass(frozen=True)
class BookingRequest:
    patient_id: int
    provider_id: int
    date: date
    time: str
    duration_minutes: int
    type: str = "consultation"
    reason: str = ""
    notes: Optional[str] = None


def scheduled_start(target_date: date, time_str: str) -> datetime:
    """Combine a date and an "HH:MM" string into a naive local datetime."""
    minutes = time_str_to_minutes(time_str)
    return datetime.combine(target_date, datetime.min.time()) + timedelta(minutes=minutes)


def book(
    db: Session,
    request: BookingRequest,
    sink: NotificationSink,
    now: datetime | None = None,
) -> Appointments:
    """
    Book one slot for a patient.

    Returns:
        The created appointment in status "pending".
    """
    now = now or datetime.now()
    repo = BookingRepository(db)

    logger.info(
        f"Booking request: patient={request.patient_id} provider={request.provider_id} "
        f"{request.date} {request.time}"
    )

    # Step 1: past check
    try:
        starts_at = scheduled_start(request.date, request.time)
    except ValueError as e:
        raise InvalidSlotError(str(e)) from e

    if starts_at <= now:
        raise PastDateError(f"{request.date} {request.time} is already in the past")

    # Step 2: the time must be a real, non-break slot
    slots = generate_slots(ProviderSchedule(repo), request.provider_id, request.date)
    slot = next((s for s in slots if s.start_time == request.time), None)

    if slot is None:
        raise InvalidSlotError(
            f"Provider {request.provider_id} has no slot at {request.date} {request.time}"
        )
    if slot.is_break:
        raise InvalidSlotError(f"{request.time} falls in a break ({slot.break_label})")
    if request.duration_minutes != slot.duration_minutes:
        raise InvalidSlotError(
            f"Slot at {request.time} lasts {slot.duration_minutes} minutes, "
            f"not {request.duration_minutes}"
        )

    # Step 3: conflict check, then insert-or-fail
    try:
        existing = repo.find_appointment(request.provider_id, request.date, request.time)
        if existing is not None:
            logger.warning(
                f"Slot conflict: provider={request.provider_id} {request.date} {request.time} "
                f"held by appointment={existing.id}"
            )
            raise SlotConflictError()

        appointment = Appointments(
            patient_id=request.patient_id,
            provider_id=request.provider_id,
            date=request.date,
            time=request.time,
            duration_minutes=request.duration_minutes,
            status="pending",
            type=request.type,
            reason=request.reason,
            notes=request.notes,
            created_at=now,
            updated_at=now,
        )
        repo.insert_appointment_if_absent(appointment)
        repo.mark_slot_booked(
            slot_id=slot.id,
            provider_id=slot.provider_id,
            target_date=slot.date,
            start_time=slot.start_time,
            duration_minutes=slot.duration_minutes,
            appointment_id=appointment.id,
        )
        repo.commit()
    except Exception:
        repo.rollback()
        raise

    logger.info(
        f"Appointment {appointment.id} booked (pending) for provider={appointment.provider_id} "
        f"{appointment.date} {appointment.time}"
    )

    dispatch(
        sink,
        user_id=appointment.provider_id,
        notification_type=APPOINTMENT_REQUESTED,
        title="New appointment request",
        message=(
            f"New {appointment.type} request for {appointment.date.isoformat()} "
            f"at {appointment.time}: {appointment.reason}"
        ),
        related_entity_id=appointment.id,
    )

    return appointment
