"""Shared fixtures: in-memory store, recording notification sink, fixed clock."""

from datetime import date, datetime

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from careslot.database import init_db, make_engine
from careslot.services.repository import BookingRepository
from careslot.services.slots import ProviderSchedule, ScheduleWindow

PROVIDER_ID = 1
OTHER_PROVIDER_ID = 2
PATIENT_A = 101
PATIENT_B = 102

# 2030-01-07 is a Monday (day_of_week 1 with Sunday = 0)
MONDAY = date(2030, 1, 7)
NOW = datetime(2030, 1, 6, 12, 0)


class RecordingSink:
    """Notification sink that keeps everything it was given."""

    def __init__(self):
        self.notifications = []

    def enqueue_notification(self, user_id, type, title, message, related_entity_id=None):
        self.notifications.append({
            "user_id": user_id,
            "type": type,
            "title": title,
            "message": message,
            "related_entity_id": related_entity_id,
        })

    def types(self):
        return [n["type"] for n in self.notifications]


class FailingSink:
    """Notification sink whose backend is down."""

    def __init__(self):
        self.calls = 0

    def enqueue_notification(self, user_id, type, title, message, related_entity_id=None):
        self.calls += 1
        raise RedisConnectionError("redis is down")


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def schedule(db):
    return ProviderSchedule(BookingRepository(db))


@pytest.fixture
def monday_window(schedule):
    """Provider 1 works Mondays 09:00-10:00 in 30-minute slots."""
    return schedule.add_window(ScheduleWindow(
        provider_id=PROVIDER_ID,
        day_of_week=1,
        start_time="09:00",
        end_time="10:00",
        slot_duration_minutes=30,
    ))
