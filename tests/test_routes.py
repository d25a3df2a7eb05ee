"""Tests for the HTTP API."""

from datetime import date, datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient

from careslot import redis_client as redis_client_module
from careslot.database import get_db
from careslot.main import app
from careslot.routers.slots import get_now
from careslot.services.events import get_notification_sink

from .conftest import OTHER_PROVIDER_ID, PATIENT_A, PATIENT_B, PROVIDER_ID, RecordingSink


def _next_monday() -> date:
    today = date.today()
    return today + timedelta(days=(7 - today.weekday()) or 7)


# Routes run on the real clock; next Monday is always ahead and inside the horizon
DAY = _next_monday().isoformat()


def provider(user_id=PROVIDER_ID):
    return {"X-User-Id": str(user_id), "X-User-Role": "provider"}


def patient(user_id=PATIENT_A):
    return {"X-User-Id": str(user_id), "X-User-Role": "patient"}


@pytest.fixture
def route_sink():
    return RecordingSink()


@pytest.fixture
def client(session_factory, route_sink):
    """Test client bound to the in-memory store and a recording sink."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_sink] = lambda: route_sink
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client_with_window(client):
    response = client.post(
        "/schedule/windows",
        json={
            "provider_id": PROVIDER_ID,
            "day_of_week": 1,
            "start_time": "09:00",
            "end_time": "10:00",
        },
        headers=provider(),
    )
    assert response.status_code == 201
    return client


def _book(client, user_id=PATIENT_A, time="09:00"):
    return client.post(
        "/appointments/",
        json={
            "provider_id": PROVIDER_ID,
            "date": DAY,
            "time": time,
            "duration_minutes": 30,
            "reason": "Sore throat",
        },
        headers=patient(user_id),
    )


def _available(client):
    response = client.get("/slots/available", params={"provider_id": PROVIDER_ID, "date": DAY})
    assert response.status_code == 200
    return [s["start_time"] for s in response.json()]


class TestScheduleRoutes:
    def test_create_window_uses_default_duration(self, client_with_window):
        response = client_with_window.get("/schedule/windows", params={"provider_id": PROVIDER_ID})

        assert response.status_code == 200
        assert response.json()[0]["slot_duration_minutes"] == 30

    def test_overlapping_window_422(self, client_with_window):
        response = client_with_window.post(
            "/schedule/windows",
            json={
                "provider_id": PROVIDER_ID,
                "day_of_week": 1,
                "start_time": "09:30",
                "end_time": "11:00",
                "slot_duration_minutes": 30,
            },
            headers=provider(),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "invalid_window"

    def test_identity_required(self, client):
        body = {"provider_id": PROVIDER_ID, "day_of_week": 1, "start_time": "09:00", "end_time": "10:00"}

        assert client.post("/schedule/windows", json=body).status_code == 401
        assert client.post("/schedule/windows", json=body, headers=provider(OTHER_PROVIDER_ID)).status_code == 403
        assert client.post("/schedule/windows", json=body, headers=patient()).status_code == 403

    def test_patch_not_allowed(self, client):
        assert client.patch("/schedule/windows/1", json={}).status_code == 405

    def test_break_and_delete(self, client_with_window):
        response = client_with_window.post(
            "/schedule/breaks",
            json={"provider_id": PROVIDER_ID, "day_of_week": 1, "start_time": "09:30", "end_time": "10:00"},
            headers=provider(),
        )
        assert response.status_code == 201
        assert _available(client_with_window) == ["09:00"]

        deleted = client_with_window.delete(f"/schedule/breaks/{response.json()['id']}", headers=provider())
        assert deleted.status_code == 204
        assert _available(client_with_window) == ["09:00", "09:30"]

    def test_delete_missing_window_404(self, client):
        assert client.delete("/schedule/windows/42", headers=provider()).status_code == 404


class TestSlotRoutes:
    def test_available(self, client_with_window):
        assert _available(client_with_window) == ["09:00", "09:30"]

    def test_past_date_400(self, client_with_window):
        response = client_with_window.get(
            "/slots/available", params={"provider_id": PROVIDER_ID, "date": "2000-01-03"}
        )

        assert response.status_code == 400

    def test_one_clock_per_request(self, client_with_window):
        """Past, horizon and started-slot checks all use the request clock."""
        monday = date.fromisoformat(DAY)

        app.dependency_overrides[get_now] = lambda: datetime.combine(monday, time(9, 10))
        assert _available(client_with_window) == ["09:30"]

        app.dependency_overrides[get_now] = lambda: datetime.combine(
            monday - timedelta(days=1), time(23, 59, 59)
        )
        assert _available(client_with_window) == ["09:00", "09:30"]

        app.dependency_overrides[get_now] = lambda: datetime.combine(
            monday + timedelta(days=1), time(0, 0)
        )
        response = client_with_window.get(
            "/slots/available", params={"provider_id": PROVIDER_ID, "date": DAY}
        )
        assert response.status_code == 400

    def test_beyond_horizon_400(self, client_with_window):
        response = client_with_window.get(
            "/slots/available", params={"provider_id": PROVIDER_ID, "date": "2999-01-07"}
        )

        assert response.status_code == 400

    def test_day_schedule_shows_booking(self, client_with_window):
        appointment_id = _book(client_with_window).json()["id"]

        response = client_with_window.get(
            "/slots/schedule", params={"provider_id": PROVIDER_ID, "date": DAY}
        )
        slots = {s["start_time"]: s for s in response.json()}

        assert slots["09:00"]["is_booked"] is True
        assert slots["09:00"]["appointment_id"] == appointment_id

    def test_calendar(self, client_with_window):
        response = client_with_window.get("/slots/calendar", params={"provider_id": PROVIDER_ID})

        assert response.status_code == 200
        data = response.json()
        assert data["provider_id"] == PROVIDER_ID
        assert len(data["days"]) == data["horizon_days"] + 1


class TestAppointmentRoutes:
    def test_book_then_conflict(self, client_with_window, route_sink):
        first = _book(client_with_window, PATIENT_A)
        assert first.status_code == 201
        assert first.json()["status"] == "pending"
        assert first.json()["patient_id"] == PATIENT_A
        assert route_sink.notifications[0]["user_id"] == PROVIDER_ID

        second = _book(client_with_window, PATIENT_B)
        assert second.status_code == 409
        assert second.json()["code"] == "slot_conflict"

    def test_invalid_slot_422(self, client_with_window):
        response = _book(client_with_window, time="09:10")

        assert response.status_code == 422
        assert response.json()["code"] == "invalid_slot"

    def test_providers_cannot_book(self, client_with_window):
        response = client_with_window.post(
            "/appointments/",
            json={"provider_id": PROVIDER_ID, "date": DAY, "time": "09:00",
                  "duration_minutes": 30, "reason": "x"},
            headers=provider(),
        )

        assert response.status_code == 403

    def test_confirm_flow(self, client_with_window):
        appointment_id = _book(client_with_window).json()["id"]

        assert client_with_window.post(
            f"/appointments/{appointment_id}/confirm", headers=provider(OTHER_PROVIDER_ID)
        ).status_code == 403

        confirmed = client_with_window.post(f"/appointments/{appointment_id}/confirm", headers=provider())
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "confirmed"
        assert confirmed.json()["confirmed_at"] is not None

        again = client_with_window.post(f"/appointments/{appointment_id}/confirm", headers=provider())
        assert again.status_code == 409
        assert again.json()["code"] == "invalid_transition"

        early = client_with_window.post(f"/appointments/{appointment_id}/complete", headers=provider())
        assert early.status_code == 409
        assert early.json()["code"] == "premature_completion"

    def test_reject_frees_slot(self, client_with_window):
        appointment_id = _book(client_with_window).json()["id"]
        assert _available(client_with_window) == ["09:30"]

        empty = client_with_window.post(
            f"/appointments/{appointment_id}/reject", json={"reason": ""}, headers=provider()
        )
        assert empty.status_code == 422

        rejected = client_with_window.post(
            f"/appointments/{appointment_id}/reject",
            json={"reason": "scheduling conflict"},
            headers=provider(),
        )
        assert rejected.status_code == 200
        assert rejected.json()["status"] == "rejected"
        assert _available(client_with_window) == ["09:00", "09:30"]

    def test_patient_cancel(self, client_with_window, route_sink):
        appointment_id = _book(client_with_window).json()["id"]

        stranger = client_with_window.post(
            f"/appointments/{appointment_id}/cancel", json={}, headers=patient(PATIENT_B)
        )
        assert stranger.status_code == 403

        cancelled = client_with_window.post(
            f"/appointments/{appointment_id}/cancel",
            json={"reason": "feeling better"},
            headers=patient(),
        )
        assert cancelled.status_code == 200
        assert cancelled.json()["cancellation_reason"] == "feeling better"
        assert route_sink.notifications[-1]["user_id"] == PROVIDER_ID

    def test_get_and_list(self, client_with_window):
        appointment_id = _book(client_with_window).json()["id"]
        _book(client_with_window, PATIENT_B, time="09:30")

        assert client_with_window.get(f"/appointments/{appointment_id}", headers=patient()).status_code == 200
        assert client_with_window.get(f"/appointments/{appointment_id}", headers=patient(PATIENT_B)).status_code == 403
        assert client_with_window.get("/appointments/999", headers=patient()).status_code == 404

        mine = client_with_window.get("/appointments/", headers=patient())
        assert [a["id"] for a in mine.json()] == [appointment_id]

        theirs = client_with_window.get("/appointments/", headers=provider())
        assert len(theirs.json()) == 2

    def test_pending_queue(self, client_with_window):
        _book(client_with_window)

        response = client_with_window.get("/appointments/pending", headers=provider())

        assert response.status_code == 200
        data = response.json()
        assert data["type_counts"]["all"] == 1
        assert data["items"][0]["urgency"] == "New"
        assert data["items"][0]["appointment"]["time"] == "09:00"

        assert client_with_window.get("/appointments/pending", headers=patient()).status_code == 403


class TestHealth:
    def test_health(self, client, monkeypatch):
        monkeypatch.setattr(redis_client_module.redis_client, "ping", lambda: True)

        assert client.get("/health").json() == {"redis": True}
