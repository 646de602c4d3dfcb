"""
API tests: routing, status codes and error bodies (httpx + ASGITransport).
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient

from config import settings
from app.api.deps import get_booking_service
from app.api.routers.admin_stats import booking_rate
from app.core.exceptions import CalendarError
from app.main import app
from app.services.booking_service import BookingService
from app.services.calendar_service import CalendarEvent
from db.session import get_db, get_session_maker

IST = ZoneInfo("Asia/Kolkata")


def tomorrow() -> str:
    return (datetime.now(IST).date() + timedelta(days=1)).isoformat()


def tomorrow_at(hour: int, minute: int = 0) -> str:
    day = datetime.now(IST).date() + timedelta(days=1)
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=IST).isoformat()


@pytest.fixture
def notifier():
    notifier = AsyncMock()
    notifier.create_event.return_value = CalendarEvent("evt-1", "https://meet.google.com/abc")
    return notifier


@pytest.fixture
async def client(session_maker, notifier, monkeypatch):
    monkeypatch.setattr(settings, "env", "test")
    monkeypatch.setattr(settings, "department_matching", True)
    monkeypatch.setattr(settings, "admin_emails", "admin@example.com")

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    app.dependency_overrides[get_booking_service] = lambda: BookingService(session_maker, notifier=notifier)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def declare(client, interviewer_id, start="10:00", end="11:00"):
    response = await client.post(
        "/api/v1/availability/future",
        params={"interviewer_id": interviewer_id},
        json={"availabilities": [{"date": tomorrow(), "start_time": start, "end_time": end}]},
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthz(self, client):
        response = await client.get("/healthz")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestAvailabilityApi:
    """Test interviewer endpoints."""

    @pytest.mark.asyncio
    async def test_declare_and_list(self, client, make_interviewer):
        interviewer = await make_interviewer()

        body = await declare(client, interviewer.id, "10:00", "11:00")
        assert body == {"slots_created": 2, "skipped_ranges": 0}
        await declare(client, interviewer.id, "11:00", "12:00")

        response = await client.get("/api/v1/availability", params={"interviewer_id": interviewer.id})

        assert response.status_code == 200
        [day] = response.json()
        assert day["date"] == tomorrow()
        assert len(day["ranges"]) == 1
        start = datetime.fromisoformat(day["ranges"][0]["start_time"]).astimezone(IST)
        end = datetime.fromisoformat(day["ranges"][0]["end_time"]).astimezone(IST)
        assert (start.hour, end.hour) == (10, 12)

    @pytest.mark.asyncio
    async def test_duplicate_declare_returns_200(self, client, make_interviewer):
        interviewer = await make_interviewer()
        await declare(client, interviewer.id)

        response = await client.post(
            "/api/v1/availability/future",
            params={"interviewer_id": interviewer.id},
            json={"availabilities": [{"date": tomorrow(), "start_time": "10:00", "end_time": "11:00"}]},
        )

        assert response.status_code == 200
        assert response.json()["slots_created"] == 0

    @pytest.mark.asyncio
    async def test_today_endpoint_rejects_tomorrow(self, client, make_interviewer):
        interviewer = await make_interviewer()

        response = await client.post(
            "/api/v1/availability/today",
            params={"interviewer_id": interviewer.id},
            json={"availabilities": [{"date": tomorrow(), "start_time": "10:00", "end_time": "11:00"}]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_replace_days(self, client, make_interviewer):
        interviewer = await make_interviewer()
        await declare(client, interviewer.id, "10:00", "11:00")

        response = await client.put(
            "/api/v1/availability/days",
            params={"interviewer_id": interviewer.id},
            json={"days": [{"date": tomorrow(), "ranges": [{"start_time": "15:00", "end_time": "16:00"}]}]},
        )

        assert response.status_code == 200
        assert response.json() == {"slots_created": 2, "slots_removed": 2}

    @pytest.mark.asyncio
    async def test_delete_range(self, client, make_interviewer):
        interviewer = await make_interviewer()
        await declare(client, interviewer.id, "10:00", "11:00")

        response = await client.request(
            "DELETE",
            "/api/v1/availability",
            params={"interviewer_id": interviewer.id},
            json={"start_time": tomorrow_at(10), "end_time": tomorrow_at(10, 30)},
        )
        assert response.status_code == 200
        assert response.json() == {"deleted_count": 1}

        again = await client.request(
            "DELETE",
            "/api/v1/availability",
            params={"interviewer_id": interviewer.id},
            json={"start_time": tomorrow_at(10), "end_time": tomorrow_at(10, 30)},
        )
        assert again.status_code == 404
        assert again.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_interviewer_is_required_outside_dev(self, client):
        response = await client.get("/api/v1/availability")

        assert response.status_code == 401
        assert response.json()["error"] == "not_authenticated"

    @pytest.mark.asyncio
    async def test_unknown_interviewer(self, client):
        response = await client.get("/api/v1/availability", params={"interviewer_id": 999})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me(self, client, make_interviewer):
        interviewer = await make_interviewer(email="admin@example.com")

        response = await client.get("/api/v1/interviewers/me", params={"interviewer_id": interviewer.id})

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "admin@example.com"
        assert body["calendar_connected"] is False
        assert body["is_admin"] is True

    @pytest.mark.asyncio
    async def test_schema_errors_are_422(self, client, make_interviewer):
        interviewer = await make_interviewer()

        response = await client.post(
            "/api/v1/availability/future",
            params={"interviewer_id": interviewer.id},
            json={"availabilities": []},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


class TestBookingApi:
    """Test student endpoints."""

    def _payload(self, student, **overrides):
        payload = {
            "start_time": tomorrow_at(10),
            "student_name": student.name,
            "student_email": student.email,
            "student_phone": student.phone,
        }
        payload.update(overrides)
        return payload

    @pytest.mark.asyncio
    async def test_student_check(self, client, make_student):
        student = await make_student()

        yes = await client.post("/api/v1/students/check", json={"phone": student.phone})
        no = await client.post("/api/v1/students/check", json={"phone": "+910000000000"})

        assert yes.json() == {"authorized": True}
        assert no.json() == {"authorized": False}

    @pytest.mark.asyncio
    async def test_public_availability(self, client, make_interviewer, make_student):
        first = await make_interviewer()
        second = await make_interviewer()
        student = await make_student()
        await declare(client, first.id, "10:00", "10:30")
        await declare(client, second.id, "10:00", "10:30")

        response = await client.get("/api/v1/bookings/availability", params={"phone": student.phone})

        assert response.status_code == 200
        assert list(response.json()) == [tomorrow()]
        [slot] = response.json()[tomorrow()]
        assert slot["open_interviewers"] == 2

    @pytest.mark.asyncio
    async def test_public_availability_needs_phone(self, client):
        response = await client.get("/api/v1/bookings/availability")

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_book_then_already_booked(self, client, make_interviewer, make_student):
        interviewer = await make_interviewer()
        student = await make_student()
        await declare(client, interviewer.id, "10:00", "11:00")

        response = await client.post("/api/v1/bookings", json=self._payload(student))

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["status"] == "created"
        assert body["meeting_link"] == "https://meet.google.com/abc"
        assert body["interviewer_email"] == interviewer.email

        again = await client.post(
            "/api/v1/bookings", json=self._payload(student, start_time=tomorrow_at(10, 30))
        )
        assert again.status_code == 409
        assert again.json()["error"] == "already_booked"
        assert again.json()["booking"]["id"] == body["id"]

    @pytest.mark.asyncio
    async def test_degraded_booking_is_207(self, client, notifier, make_interviewer, make_student):
        interviewer = await make_interviewer()
        student = await make_student()
        await declare(client, interviewer.id, "10:00", "11:00")
        notifier.create_event.side_effect = CalendarError("calendar down")

        response = await client.post("/api/v1/bookings", json=self._payload(student))

        assert response.status_code == 207
        body = response.json()
        assert body["status"] == "created_degraded"
        assert body["notification_error"] == "calendar down"
        assert body["meeting_link"].startswith(settings.fallback_meeting_base_url)

    @pytest.mark.asyncio
    async def test_slot_unavailable(self, client, make_interviewer, make_student):
        interviewer = await make_interviewer()
        student = await make_student()
        await declare(client, interviewer.id, "10:00", "11:00")

        response = await client.post(
            "/api/v1/bookings", json=self._payload(student, start_time=tomorrow_at(16))
        )

        assert response.status_code == 409
        assert response.json()["error"] == "slot_unavailable"

    @pytest.mark.asyncio
    async def test_not_authorized(self, client, make_interviewer, make_student):
        interviewer = await make_interviewer()
        student = await make_student()
        await declare(client, interviewer.id, "10:00", "11:00")

        response = await client.post(
            "/api/v1/bookings", json=self._payload(student, student_phone="+910000000000")
        )

        assert response.status_code == 403
        assert response.json()["error"] == "not_authorized"

    @pytest.mark.asyncio
    async def test_no_interviewers(self, client, make_interviewer, make_student):
        await make_interviewer(department="CS")
        student = await make_student(department="Math")

        response = await client.post("/api/v1/bookings", json=self._payload(student))

        assert response.status_code == 409
        assert response.json()["error"] == "no_interviewers"

    @pytest.mark.asyncio
    async def test_past_time(self, client, make_student):
        student = await make_student()
        yesterday = (datetime.now(IST) - timedelta(days=1)).isoformat()

        response = await client.post("/api/v1/bookings", json=self._payload(student, start_time=yesterday))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_bad_email_is_422(self, client, make_student):
        student = await make_student()

        response = await client.post(
            "/api/v1/bookings", json=self._payload(student, student_email="nope")
        )

        assert response.status_code == 422


class TestBookingRate:
    def test_rounds_to_whole_percent(self):
        assert booking_rate(1, 3) == 33
        assert booking_rate(2, 3) == 67
        assert booking_rate(1, 2) == 50

    def test_no_slots_is_zero(self):
        assert booking_rate(0, 0) == 0


class TestAdminApi:
    """Test admin endpoints."""

    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden(self, client, make_interviewer):
        interviewer = await make_interviewer(email="someone@example.com")

        response = await client.get("/api/v1/admin/interviewers", params={"interviewer_id": interviewer.id})

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    @pytest.mark.asyncio
    async def test_admin_views(self, client, make_interviewer, make_student):
        admin = await make_interviewer(email="admin@example.com")
        booked = await make_student()
        await make_student()
        await declare(client, admin.id, "10:00", "11:00")
        response = await client.post("/api/v1/bookings", json={
            "start_time": tomorrow_at(10),
            "student_name": booked.name,
            "student_email": booked.email,
            "student_phone": booked.phone,
        })
        assert response.status_code == 201
        params = {"interviewer_id": admin.id}

        interviewers = (await client.get("/api/v1/admin/interviewers", params=params)).json()
        assert interviewers[0]["total_slots"] == 2
        assert interviewers[0]["booked_slots"] == 1

        interviewees = (await client.get("/api/v1/admin/interviewees", params=params)).json()
        assert [i["student_email"] for i in interviewees] == [booked.email]

        status = (await client.get("/api/v1/admin/booking-status", params=params)).json()
        assert status["total_students"] == 2
        assert status["booked"] == 1
        assert status["booked_phones"] == [booked.phone]

        dashboard = (await client.get("/api/v1/admin/dashboard", params=params)).json()
        assert dashboard["bookings_total"] == 1
        assert dashboard["students_total"] == 2
        assert len(dashboard["days"]) == 3
        assert dashboard["days"][1] == {
            "date": tomorrow(), "total_slots": 2, "booked_slots": 1, "open_slots": 1, "booking_rate": 50
        }
        assert dashboard["booking_rate"] == 50

        booked_interviews = (await client.get("/api/v1/admin/booked-interviews", params=params)).json()
        assert len(booked_interviews) == 1
        assert booked_interviews[0]["application_id"] == booked.application_id
        assert booked_interviews[0]["phone"] == booked.phone
        assert booked_interviews[0]["interviewer_name"] == admin.name
        assert booked_interviews[0]["meeting_link"]

    @pytest.mark.asyncio
    async def test_export_csv(self, client, make_interviewer, make_student):
        admin = await make_interviewer(email="admin@example.com")
        student = await make_student()
        await declare(client, admin.id, "10:00", "10:30")
        await client.post("/api/v1/bookings", json={
            "start_time": tomorrow_at(10),
            "student_name": student.name,
            "student_email": student.email,
            "student_phone": student.phone,
        })

        response = await client.get("/api/v1/admin/export/bookings", params={"interviewer_id": admin.id})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert len(lines) == 2
        assert student.email in lines[1]
