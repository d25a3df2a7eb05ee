"""
Data-access layer for the booking core.

All appointment, slot and schedule reads/writes go through BookingRepository
so the core never touches global state. Store outages (SQLite busy timeout,
dropped connections) surface as TransientStoreError.
"""

import logging
from datetime import date
from functools import wraps
from typing import Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..models import (
    ACTIVE_STATUSES,
    Appointments,
    BreakWindows,
    ScheduleWindows,
    Slots,
)
from .errors import SlotConflictError, TransientStoreError

logger = logging.getLogger(__name__)


def _store_call(method):
    """Translate store outages into TransientStoreError."""

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except OperationalError as e:
            self.db.rollback()
            logger.warning(f"Store unavailable in {method.__name__}: {e}")
            raise TransientStoreError() from e

    return wrapper


class BookingRepository:
    """Repository over one SQLAlchemy session (one unit of work)."""

    def __init__(self, db: Session):
        self.db = db

    # ── Appointments ─────────────────────────────────────────────────────

    @_store_call
    def get_appointment(self, appointment_id: int) -> Optional[Appointments]:
        return self.db.get(Appointments, appointment_id)

    @_store_call
    def find_appointment(
        self,
        provider_id: int,
        target_date: date,
        time_str: str,
        statuses: Iterable[str] = ACTIVE_STATUSES,
    ) -> Optional[Appointments]:
        return (
            self.db.query(Appointments)
            .filter(
                Appointments.provider_id == provider_id,
                Appointments.date == target_date,
                Appointments.time == time_str,
                Appointments.status.in_(list(statuses)),
            )
            .first()
        )

    @_store_call
    def find_active_appointments(
        self, provider_id: int, target_date: date
    ) -> list[Appointments]:
        """Pending/confirmed appointments of a provider on one date."""
        return (
            self.db.query(Appointments)
            .filter(
                Appointments.provider_id == provider_id,
                Appointments.date == target_date,
                Appointments.status.in_(ACTIVE_STATUSES),
            )
            .order_by(Appointments.time)
            .all()
        )

    @_store_call
    def insert_appointment_if_absent(self, appointment: Appointments) -> Appointments:
        """
        Insert a new appointment, relying on the partial unique index.

        Raises SlotConflictError when another non-terminal appointment
        already holds (provider_id, date, time).
        """
        self.db.add(appointment)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(
                f"Unique slot constraint rejected booking for provider={appointment.provider_id} "
                f"{appointment.date} {appointment.time}"
            )
            raise SlotConflictError() from e
        return appointment

    @_store_call
    def update_appointment_status(
        self,
        appointment_id: int,
        expected_status: str,
        new_status: str,
        fields: dict | None = None,
    ) -> bool:
        """
        Compare-and-swap status update.

        fields carries the other columns to set, updated_at included.
        Returns False when the row is no longer in expected_status.
        """
        values = dict(fields or {})
        values["status"] = new_status

        updated = (
            self.db.query(Appointments)
            .filter(
                Appointments.id == appointment_id,
                Appointments.status == expected_status,
            )
            .update(values, synchronize_session=False)
        )
        return updated == 1

    # ── Slots ────────────────────────────────────────────────────────────

    @_store_call
    def mark_slot_booked(
        self,
        slot_id: str,
        provider_id: int,
        target_date: date,
        start_time: str,
        duration_minutes: int,
        appointment_id: int,
    ) -> Slots:
        row = self.db.get(Slots, slot_id)
        if row is None:
            row = Slots(
                id=slot_id,
                provider_id=provider_id,
                date=target_date,
                start_time=start_time,
                duration_minutes=duration_minutes,
                is_break=False,
            )
            self.db.add(row)

        row.is_booked = True
        row.appointment_id = appointment_id
        self.db.flush()
        return row

    @_store_call
    def release_slot(self, appointment_id: int) -> int:
        """Free the slot held by an appointment. Returns rows released."""
        return (
            self.db.query(Slots)
            .filter(Slots.appointment_id == appointment_id)
            .update(
                {"is_booked": False, "appointment_id": None},
                synchronize_session=False,
            )
        )

    # ── Schedule ─────────────────────────────────────────────────────────

    @_store_call
    def get_schedule_windows(self, provider_id: int) -> list[ScheduleWindows]:
        return (
            self.db.query(ScheduleWindows)
            .filter(ScheduleWindows.provider_id == provider_id)
            .order_by(ScheduleWindows.day_of_week, ScheduleWindows.start_time)
            .all()
        )

    @_store_call
    def get_break_windows(
        self, provider_id: int, target_date: date | None = None
    ) -> list[BreakWindows]:
        """All breaks of a provider, or only those applying to target_date."""
        query = self.db.query(BreakWindows).filter(
            BreakWindows.provider_id == provider_id
        )
        if target_date is not None:
            weekday = (target_date.weekday() + 1) % 7  # 0 = Sunday
            query = query.filter(
                or_(
                    BreakWindows.date == target_date,
                    BreakWindows.day_of_week == weekday,
                )
            )
        return query.order_by(BreakWindows.start_time).all()

    # ── Unit of work ─────────────────────────────────────────────────────

    @_store_call
    def add(self, obj) -> None:
        self.db.add(obj)
        self.db.flush()

    @_store_call
    def delete(self, obj) -> None:
        self.db.delete(obj)

    @_store_call
    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
