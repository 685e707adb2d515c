"""API route tests through the ASGI app with an in-memory database."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vetcare.database import get_db
from vetcare.main import app
from tests.support import MONDAY


@pytest_asyncio.fixture
async def client(session_factory, seed):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def booking_payload(seed, pet=None, start="2030-06-03T10:00:00"):
    return {
        "pet_uuid": (pet or seed.pet).pet_uuid,
        "vet_id": seed.vet.id,
        "clinic_id": seed.clinic.id,
        "appointment_date": start,
        "appointment_type": "wellness_exam",
    }


async def create(client, seed, **kwargs):
    owner = kwargs.pop("owner", seed.owner)
    response = await client.post(
        "/api/appointments/",
        json=booking_payload(seed, **kwargs),
        headers={"X-User-Id": str(owner.id)},
    )
    assert response.status_code == 201, response.text
    return response.json()["appointment_uuid"]


@pytest.mark.asyncio
async def test_health(client):
    assert (await client.get("/")).json()["status"] == "healthy"
    assert (await client.get("/health")).status_code == 200


@pytest.mark.asyncio
async def test_appointment_types_carry_typical_duration(client):
    response = await client.get("/api/appointments/types")

    durations = {item["appointment_type"]: item["duration_minutes"] for item in response.json()}
    assert durations["surgery"] == 120
    assert durations["vaccination"] == 15
    assert durations["sick_visit"] == 30


@pytest.mark.asyncio
async def test_create_requires_requester_header(client, seed):
    response = await client.post("/api/appointments/", json=booking_payload(seed))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_then_fetch(client, seed):
    appointment_uuid = await create(client, seed)

    response = await client.get(f"/api/appointments/{appointment_uuid}")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "requested"
    assert body["duration_minutes"] == 30
    assert "id" not in body


@pytest.mark.asyncio
async def test_double_booking_is_a_conflict(client, seed):
    await create(client, seed)

    response = await client.post(
        "/api/appointments/",
        json=booking_payload(seed, pet=seed.other_pet, start="2030-06-03T10:15:00"),
        headers={"X-User-Id": str(seed.other_owner.id)},
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "The veterinarian already has an appointment at this time."


@pytest.mark.asyncio
async def test_utc_suffixed_times_still_conflict(client, seed):
    await create(client, seed, start="2030-06-03T10:00:00Z")

    response = await client.post(
        "/api/appointments/",
        json=booking_payload(seed, pet=seed.other_pet, start="2030-06-03T10:15:00Z"),
        headers={"X-User-Id": str(seed.other_owner.id)},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_slot_table(client, seed):
    appointment_uuid = await create(client, seed)

    response = await client.get(
        "/api/appointments/slots",
        params={"vet_id": seed.vet.id, "clinic_id": seed.clinic.id, "date": MONDAY.date().isoformat()},
    )

    slots = response.json()
    assert len(slots) == 6
    booked = [slot for slot in slots if not slot["available"]]
    assert booked == [{
        "start_time": "2030-06-03T10:00:00",
        "available": False,
        "status": "booked",
        "appointment_uuid": appointment_uuid,
    }]


@pytest.mark.asyncio
async def test_slot_table_requires_every_query_field(client, seed):
    response = await client.get("/api/appointments/slots", params={"vet_id": seed.vet.id})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_my_appointments(client, seed):
    appointment_uuid = await create(client, seed)

    mine = await client.get("/api/appointments/mine", headers={"X-User-Id": str(seed.owner.id)})
    theirs = await client.get("/api/appointments/mine", headers={"X-User-Id": str(seed.other_owner.id)})

    assert [item["appointment_uuid"] for item in mine.json()] == [appointment_uuid]
    assert theirs.json() == []


@pytest.mark.asyncio
async def test_lifecycle_over_http(client, seed):
    appointment_uuid = await create(client, seed)

    assert (await client.post(f"/api/appointments/{appointment_uuid}/confirm")).json()["status"] == "confirmed"

    again = await client.post(f"/api/appointments/{appointment_uuid}/confirm")
    assert again.status_code == 400
    assert again.json()["detail"] == "Cannot confirm a confirmed appointment."

    assert (await client.post(f"/api/appointments/{appointment_uuid}/check-in")).status_code == 200
    assert (await client.post(f"/api/appointments/{appointment_uuid}/complete")).json()["status"] == "completed"

    moved = await client.post(
        f"/api/appointments/{appointment_uuid}/reschedule",
        json={"appointment_date": "2030-06-03T11:00:00"},
        headers={"X-User-Id": str(seed.owner.id)},
    )
    assert moved.status_code == 400
    assert moved.json()["detail"] == "Cannot reschedule a completed appointment."


@pytest.mark.asyncio
async def test_reschedule_by_someone_else_is_forbidden(client, seed):
    appointment_uuid = await create(client, seed)

    response = await client.post(
        f"/api/appointments/{appointment_uuid}/reschedule",
        json={"appointment_date": "2030-06-03T11:00:00"},
        headers={"X-User-Id": str(seed.other_owner.id)},
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_cancel(client, seed):
    appointment_uuid = await create(client, seed)

    assert (await client.post(f"/api/appointments/{appointment_uuid}/cancel")).json()["status"] == "cancelled"
    assert (await client.post(f"/api/appointments/{appointment_uuid}/cancel")).status_code == 200

    missing = await client.post("/api/appointments/nope/cancel")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Appointment not found."


@pytest.mark.asyncio
async def test_status_overwrite_is_admin_only(client, seed):
    appointment_uuid = await create(client, seed)

    denied = await client.patch(
        f"/api/appointments/{appointment_uuid}/status",
        json={"status": "no_show"},
        headers={"X-User-Id": str(seed.owner.id)},
    )
    allowed = await client.patch(
        f"/api/appointments/{appointment_uuid}/status",
        json={"status": "no_show"},
        headers={"X-User-Id": str(seed.admin.id)},
    )

    assert denied.status_code == 403
    assert allowed.json() == {"appointment_uuid": appointment_uuid, "status": "no_show"}


@pytest.mark.asyncio
async def test_vet_availability(client, seed):
    response = await client.get(f"/api/veterinarians/{seed.vet.id}/availability")

    assert [window["day_of_week"] for window in response.json()] == [1, 2]
    assert (await client.get("/api/veterinarians/999/availability")).status_code == 404


@pytest.mark.asyncio
async def test_calendar_settings(client, seed):
    url = f"/api/users/{seed.owner.id}/calendar-settings"
    headers = {"X-User-Id": str(seed.owner.id)}

    missing_token = await client.put(url, json={"google_calendar_sync": True}, headers=headers)
    other_user = await client.put(
        url,
        json={"google_calendar_sync": False},
        headers={"X-User-Id": str(seed.other_owner.id)},
    )
    disabled = await client.put(url, json={"google_calendar_sync": False}, headers=headers)

    assert missing_token.status_code == 422
    assert other_user.status_code == 403
    assert disabled.json() == {"user_id": seed.owner.id, "google_calendar_sync": False, "synced_appointments": 0}
