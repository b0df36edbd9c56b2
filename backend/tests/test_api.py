"""HTTP tests: request/response shapes and error status mapping."""

import uuid
from datetime import time

import pytest

from app.models import AppointmentStatus
from app.services.booking_service import BookingService
from conftest import MONDAY, add_appointment


def booking_payload(seed, **overrides) -> dict:
    payload = {
        "businessId": seed.business_id,
        "professionalId": seed.professional_id,
        "serviceId": seed.service_id,
        "date": "2026-10-19",
        "time": "10:00",
        "name": "Maria Souza",
        "email": "maria@example.com",
        "phone": "+5511999990000",
    }
    payload.update(overrides)
    return payload


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        response = await client.get("/", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

        generated = await client.get("/")
        assert generated.headers["X-Request-ID"]


class TestAvailabilityRoute:
    @pytest.mark.asyncio
    async def test_returns_slots(self, client, seed):
        response = await client.get(
            f"/api/businesses/{seed.business_id}/availability",
            params={
                "professional_id": seed.professional_id,
                "service_id": seed.service_id,
                "date": "2026-10-19",
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["date"] == "2026-10-19"
        assert body["slots"] == ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00"]

    @pytest.mark.asyncio
    async def test_invalid_service_is_400(self, client, seed):
        response = await client.get(
            f"/api/businesses/{seed.business_id}/availability",
            params={
                "professional_id": seed.professional_id,
                "service_id": seed.inactive_service_id,
                "date": "2026-10-19",
            },
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid service"}

    @pytest.mark.asyncio
    async def test_bad_date_is_400(self, client, seed):
        response = await client.get(
            f"/api/businesses/{seed.business_id}/availability",
            params={
                "professional_id": seed.professional_id,
                "service_id": seed.service_id,
                "date": "19/10/2026",
            },
        )
        assert response.status_code == 400
        assert "date" in response.json()["error"]


class TestPublicBookingRoute:
    @pytest.mark.asyncio
    async def test_success_shape_and_reminder(self, client, seed, scheduler):
        response = await client.post("/api/public-booking", json=booking_payload(seed, notes="Primeira vez"))
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        uuid.UUID(body["reservationId"])

        assert len(scheduler.requests) == 1
        reminder = scheduler.requests[0]
        assert reminder.reservation_id == body["reservationId"]
        assert reminder.professional_name == "Ana"
        assert reminder.time == time(10, 0)

    @pytest.mark.asyncio
    async def test_slot_conflict_is_409(self, client, session, seed, scheduler):
        await add_appointment(session, seed, MONDAY, time(10, 0), 60)
        response = await client.post("/api/public-booking", json=booking_payload(seed))
        assert response.status_code == 409
        assert "no longer available" in response.json()["error"]
        assert scheduler.requests == []

    @pytest.mark.asyncio
    async def test_notes_too_long_is_400(self, client, seed):
        response = await client.post("/api/public-booking", json=booking_payload(seed, notes="x" * 501))
        assert response.status_code == 400
        assert "500" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_inactive_professional_is_400(self, client, seed):
        response = await client.post(
            "/api/public-booking",
            json=booking_payload(seed, professionalId=seed.inactive_professional_id),
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid professional"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"time": "25:00"},
            {"time": "10:00+03:00"},
            {"time": "10:00:00.999999-05:00"},
            {"time": "10:00:30"},
            {"time": 36000},
            {"date": "2026-02-30"},
            {"date": 1792368000},
            {"date": "2026-10-19T10:00:00"},
            {"email": "not-an-email"},
            {"name": ""},
        ],
    )
    async def test_malformed_input_is_400(self, client, seed, overrides):
        response = await client.post("/api/public-booking", json=booking_payload(seed, **overrides))
        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_missing_field_is_400(self, client, seed):
        payload = booking_payload(seed)
        del payload["email"]
        response = await client.post("/api/public-booking", json=payload)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_input_books_nothing(self, client, seed):
        await client.post("/api/public-booking", json=booking_payload(seed, time="10:00+03:00"))
        listing = await client.get(f"/api/businesses/{seed.business_id}/appointments")
        assert listing.json()["appointments"] == []

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_500_with_request_id(self, client, seed, scheduler, monkeypatch):
        async def broken(self, request):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(BookingService, "book", broken)
        response = await client.post(
            "/api/public-booking",
            json=booking_payload(seed),
            headers={"X-Request-ID": "trace-500"},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Unexpected error, please try again"}
        assert response.headers["X-Request-ID"] == "trace-500"
        assert scheduler.requests == []


class TestRegisterClientRoute:
    @pytest.mark.asyncio
    async def test_register_is_idempotent(self, client, seed):
        payload = {
            "businessId": seed.business_id,
            "name": "Maria",
            "phone": "+55 (11) 99999-0000",
            "email": "Maria@Example.com",
        }
        first = await client.post("/api/public-booking/register-client", json=payload)
        second = await client.post("/api/public-booking/register-client", json=payload)
        assert first.status_code == 200
        assert first.json()["data"]["phone"] == "+5511999990000"
        assert first.json()["data"]["email"] == "maria@example.com"
        assert first.json()["data"]["id"] == second.json()["data"]["id"]

    @pytest.mark.asyncio
    async def test_unknown_business(self, client):
        response = await client.post(
            "/api/public-booking/register-client",
            json={"businessId": str(uuid.uuid4()), "name": "Maria", "phone": "1199", "email": "m@example.com"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Business not found"}


class TestAppointmentRoutes:
    @pytest.mark.asyncio
    async def test_list_and_confirm(self, client, seed):
        booked = await client.post("/api/public-booking", json=booking_payload(seed))
        reservation_id = booked.json()["reservationId"]

        listing = await client.get(
            f"/api/businesses/{seed.business_id}/appointments", params={"date": "2026-10-19"}
        )
        assert listing.status_code == 200
        appointments = listing.json()["appointments"]
        assert [a["id"] for a in appointments] == [reservation_id]
        assert appointments[0]["status"] == AppointmentStatus.PENDING
        assert appointments[0]["time"] == "10:00"

        confirmed = await client.patch(
            f"/api/businesses/{seed.business_id}/appointments/{reservation_id}/status",
            json={"status": "confirmed"},
        )
        assert confirmed.status_code == 200
        assert confirmed.json()["appointment"]["status"] == "confirmed"

        reopened = await client.patch(
            f"/api/businesses/{seed.business_id}/appointments/{reservation_id}/status",
            json={"status": "pending"},
        )
        assert reopened.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_appointment_is_404(self, client, seed):
        response = await client.patch(
            f"/api/businesses/{seed.business_id}/appointments/{uuid.uuid4()}/status",
            json={"status": "cancelled"},
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Appointment not found"}

    @pytest.mark.asyncio
    async def test_unknown_status_is_400(self, client, seed):
        response = await client.patch(
            f"/api/businesses/{seed.business_id}/appointments/{uuid.uuid4()}/status",
            json={"status": "archived"},
        )
        assert response.status_code == 400


class TestOnboardingRoutes:
    @pytest.mark.asyncio
    async def test_create_business_then_book(self, client):
        response = await client.post(
            "/api/onboarding/businesses",
            json={
                "name": "Clinica Sul",
                "slug": "clinica-sul",
                "business_type": "clinic",
                "opening_time": "08:00",
                "closing_time": "10:00",
                "working_days": ["Monday", "wednesday"],
                "services": [{"name": "Consulta", "duration_minutes": 40}],
                "professionals": [{"display_name": "Dra. Paula"}],
            },
        )
        assert response.status_code == 200
        body = response.json()
        business_id = body["business_id"]
        service_id = body["services"][0]["id"]
        professional_id = body["professionals"][0]["id"]

        availability = await client.get(
            f"/api/businesses/{business_id}/availability",
            params={"professional_id": professional_id, "service_id": service_id, "date": "2026-10-19"},
        )
        assert availability.json()["slots"] == ["08:00", "08:40", "09:20"]

        closed = await client.get(
            f"/api/businesses/{business_id}/availability",
            params={"professional_id": professional_id, "service_id": service_id, "date": "2026-10-20"},
        )
        assert closed.json()["slots"] == []

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, client, seed):
        response = await client.post(
            "/api/onboarding/businesses",
            json={"name": "Copy", "slug": "barbearia-centro"},
        )
        assert response.status_code == 400
        assert "already in use" in response.json()["error"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"opening_time": "18:00", "closing_time": "09:00"},
            {"working_days": ["funday"]},
            {"services": [{"name": "Zero", "duration_minutes": 0}]},
        ],
    )
    async def test_invalid_configuration(self, client, overrides):
        payload = {"name": "Bad", "slug": "bad", "opening_time": "09:00", "closing_time": "18:00"}
        payload.update(overrides)
        response = await client.post("/api/onboarding/businesses", json=payload)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_hours(self, client, seed):
        response = await client.put(
            f"/api/onboarding/businesses/{seed.business_id}/hours",
            json={"opening_time": "10:00", "closing_time": "12:00", "working_days": ["monday"]},
        )
        assert response.status_code == 200
        assert response.json()["working_days"] == ["monday"]

        availability = await client.get(
            f"/api/businesses/{seed.business_id}/availability",
            params={
                "professional_id": seed.professional_id,
                "service_id": seed.service_id,
                "date": "2026-10-19",
            },
        )
        assert availability.json()["slots"] == ["10:00", "11:00"]
