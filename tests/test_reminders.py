"""Tests for the appointment reminder checker."""

from datetime import datetime

from careslot.models import Appointments
from careslot.services.events import APPOINTMENT_REMINDER
from careslot.services.reminder_checker import SENT_KEY_TTL, check_upcoming_appointments

from .conftest import MONDAY, NOW, PATIENT_A, PROVIDER_ID


class FakeRedis:
    """Just enough of redis.Redis for sent-marker keys."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def exists(self, key):
        return int(key in self.store)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl


def _appointment(db, time="09:00", status="confirmed"):
    appointment = Appointments(
        patient_id=PATIENT_A,
        provider_id=PROVIDER_ID,
        date=MONDAY,
        time=time,
        duration_minutes=30,
        status=status,
        type="consultation",
        reason="check",
        created_at=NOW,
        updated_at=NOW,
    )
    db.add(appointment)
    db.commit()
    return appointment


class TestReminderChecker:
    def test_reminds_inside_window(self, db, sink):
        appointment = _appointment(db)
        redis = FakeRedis()

        sent = check_upcoming_appointments(db, redis, sink, datetime(2030, 1, 7, 7, 30), 120)

        assert sent == 1
        assert sink.types() == [APPOINTMENT_REMINDER]
        assert sink.notifications[0]["user_id"] == PATIENT_A
        assert redis.ttls[f"apptremind:sent:{appointment.id}"] == SENT_KEY_TTL

    def test_reminds_once(self, db, sink):
        _appointment(db)
        redis = FakeRedis()

        check_upcoming_appointments(db, redis, sink, datetime(2030, 1, 7, 7, 30), 120)
        sent = check_upcoming_appointments(db, redis, sink, datetime(2030, 1, 7, 8, 0), 120)

        assert sent == 0
        assert len(sink.notifications) == 1

    def test_too_early_or_already_started(self, db, sink):
        _appointment(db)
        redis = FakeRedis()

        assert check_upcoming_appointments(db, redis, sink, datetime(2030, 1, 7, 6, 59), 120) == 0
        assert check_upcoming_appointments(db, redis, sink, datetime(2030, 1, 7, 9, 0), 120) == 0
        assert sink.notifications == []

    def test_only_confirmed(self, db, sink):
        _appointment(db, status="pending")
        _appointment(db, time="09:30", status="cancelled")

        assert check_upcoming_appointments(db, FakeRedis(), sink, datetime(2030, 1, 7, 8, 0), 120) == 0

    def test_failed_delivery_retried(self, db, failing_sink, sink):
        """No sent-marker is stored when the sink is down."""
        _appointment(db)
        redis = FakeRedis()
        now = datetime(2030, 1, 7, 8, 0)

        assert check_upcoming_appointments(db, redis, failing_sink, now, 120) == 0
        assert redis.store == {}
        assert check_upcoming_appointments(db, redis, sink, now, 120) == 1
