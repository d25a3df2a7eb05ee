"""Tests for appointment listing and the pending queue."""

from datetime import datetime, timedelta

import pytest

from careslot.models import Appointments
from careslot.services.appointments import list_appointments, pending_queue, urgency_label

from .conftest import MONDAY, NOW, OTHER_PROVIDER_ID, PATIENT_A, PATIENT_B, PROVIDER_ID


def _add(db, time, status="pending", type="consultation", provider_id=PROVIDER_ID,
         patient_id=PATIENT_A, day=MONDAY, created_at=NOW):
    appointment = Appointments(
        patient_id=patient_id,
        provider_id=provider_id,
        date=day,
        time=time,
        duration_minutes=30,
        status=status,
        type=type,
        reason="check",
        created_at=created_at,
        updated_at=created_at,
    )
    db.add(appointment)
    db.commit()
    return appointment


class TestListAppointments:
    def test_ordered_by_date_and_time(self, db):
        _add(db, "11:00")
        _add(db, "09:00", day=MONDAY + timedelta(days=1))
        _add(db, "09:00")

        result = list_appointments(db, provider_id=PROVIDER_ID)

        assert [(a.date, a.time) for a in result] == [
            (MONDAY, "09:00"), (MONDAY, "11:00"), (MONDAY + timedelta(days=1), "09:00"),
        ]

    def test_filters(self, db):
        _add(db, "09:00", status="confirmed")
        _add(db, "09:30", type="emergency")
        _add(db, "10:00", patient_id=PATIENT_B)
        _add(db, "09:00", provider_id=OTHER_PROVIDER_ID)
        _add(db, "09:00", day=MONDAY + timedelta(days=7))

        assert len(list_appointments(db, provider_id=PROVIDER_ID)) == 4
        assert len(list_appointments(db, status="confirmed")) == 1
        assert len(list_appointments(db, type="emergency")) == 1
        assert len(list_appointments(db, patient_id=PATIENT_B)) == 1
        assert len(list_appointments(db, date_from=MONDAY, date_to=MONDAY)) == 4

    def test_paging(self, db):
        for time in ("09:00", "09:30", "10:00"):
            _add(db, time)

        page = list_appointments(db, skip=1, limit=1)

        assert [a.time for a in page] == ["09:30"]


class TestUrgency:
    @pytest.mark.parametrize("waited, type, expected", [
        (timedelta(hours=2), "consultation", "New"),
        (timedelta(days=1), "consultation", "Pending"),
        (timedelta(days=3), "check-up", "Overdue"),
        (timedelta(minutes=5), "emergency", "Urgent"),
    ])
    def test_labels(self, waited, type, expected):
        appointment = Appointments(type=type, created_at=NOW - waited)

        assert urgency_label(appointment, NOW) == expected


class TestPendingQueue:
    def test_queue_counts_and_items(self, db):
        _add(db, "10:00", type="emergency")
        _add(db, "09:00", created_at=NOW - timedelta(days=4))
        _add(db, "09:30", status="confirmed")
        _add(db, "11:00", provider_id=OTHER_PROVIDER_ID)

        queue = pending_queue(db, PROVIDER_ID, now=NOW)

        assert queue["provider_id"] == PROVIDER_ID
        assert queue["type_counts"]["all"] == 2
        assert queue["type_counts"]["emergency"] == 1
        assert queue["type_counts"]["consultation"] == 1
        assert queue["type_counts"]["follow-up"] == 0
        assert [(i["appointment"].time, i["urgency"]) for i in queue["items"]] == [
            ("09:00", "Overdue"), ("10:00", "Urgent"),
        ]

    def test_type_filter_keeps_counts(self, db):
        """Filtering by type narrows the items, not the counts."""
        _add(db, "09:00", type="emergency")
        _add(db, "09:30")

        queue = pending_queue(db, PROVIDER_ID, type="emergency", now=NOW)

        assert queue["type_counts"]["all"] == 2
        assert len(queue["items"]) == 1

    def test_empty_queue(self, db):
        queue = pending_queue(db, PROVIDER_ID, now=datetime(2030, 1, 1))

        assert queue["items"] == []
        assert queue["type_counts"]["all"] == 0
