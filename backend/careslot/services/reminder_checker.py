"""
Appointment reminder checker.

Periodically checks for upcoming confirmed appointments and enqueues an
appointment-reminder notification for the patient.

Reminder window: start - reminder_before_minutes <= now < start.
Each appointment is reminded once (sent-marker key in Redis).

Runs as an asyncio task in backend lifespan.
Uses synchronous DB and Redis (via asyncio.to_thread).
"""

import asyncio
import logging
from datetime import datetime, timedelta

from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..database import SessionLocal
from ..models import Appointments
from .appointments.booking import scheduled_start
from .events import APPOINTMENT_REMINDER, NotificationSink, RedisNotificationSink, dispatch

logger = logging.getLogger(__name__)

SENT_KEY_TTL = 86400  # 24 hours, one reminder per appointment


async def reminder_checker_loop() -> None:
    """Periodic loop that enqueues reminders for upcoming appointments."""
    from ..redis_client import redis_client

    logger.info("reminder_checker_loop started")
    sink = RedisNotificationSink(redis_client)

    try:
        while True:
            try:
                await asyncio.to_thread(_run_once, redis_client, sink)
            except asyncio.CancelledError:
                logger.info("reminder_checker_loop cancelled")
                raise
            except Exception:
                logger.exception("reminder_checker_loop error")

            await asyncio.sleep(settings.reminder_check_interval)
    except asyncio.CancelledError:
        pass


def _run_once(redis: Redis, sink: NotificationSink) -> None:
    db = SessionLocal()
    try:
        check_upcoming_appointments(
            db, redis, sink, datetime.now(), settings.reminder_before_minutes
        )
    finally:
        db.close()


def check_upcoming_appointments(
    db: Session,
    redis: Redis,
    sink: NotificationSink,
    now: datetime,
    remind_before: int,
) -> int:
    """Enqueue due reminders. Returns how many were sent."""
    if remind_before <= 0:
        return 0

    horizon = now + timedelta(minutes=remind_before)
    appointments = (
        db.query(Appointments)
        .filter(
            Appointments.status == "confirmed",
            Appointments.date >= now.date(),
            Appointments.date <= horizon.date(),
        )
        .all()
    )

    sent = 0
    for appointment in appointments:
        try:
            if _process_single_appointment(appointment, redis, sink, now, remind_before):
                sent += 1
        except Exception:
            logger.exception(
                f"Error processing appointment {appointment.id} for reminder"
            )
    return sent


def _process_single_appointment(
    appointment: Appointments,
    redis: Redis,
    sink: NotificationSink,
    now: datetime,
    remind_before: int,
) -> bool:
    sent_key = f"apptremind:sent:{appointment.id}"
    if redis.exists(sent_key):
        return False

    starts_at = scheduled_start(appointment.date, appointment.time)
    reminder_time = starts_at - timedelta(minutes=remind_before)

    if now < reminder_time or now >= starts_at:
        return False

    delivered = dispatch(
        sink,
        user_id=appointment.patient_id,
        notification_type=APPOINTMENT_REMINDER,
        title="Upcoming appointment",
        message=(
            f"Reminder: your {appointment.type} appointment is on "
            f"{appointment.date.isoformat()} at {appointment.time}."
        ),
        related_entity_id=appointment.id,
    )
    if not delivered:
        return False

    redis.setex(sent_key, SENT_KEY_TTL, "1")
    logger.info(
        f"appointment_reminder emitted for appointment={appointment.id} "
        f"(starts at {starts_at.strftime('%H:%M')}, reminded {remind_before} min before)"
    )
    return True
