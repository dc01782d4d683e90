import pytest
from httpx import ASGITransport, AsyncClient

from queuewise.main import create_app

from conftest import booking_body


@pytest.fixture
async def target(make_clinic, make_doctor):
    clinic = await make_clinic()
    doctor = await make_doctor(clinic)
    return clinic, doctor


async def test_book_and_rebook(client, target):
    clinic, doctor = target

    res = await client.post("/api/public/book", json=booking_body(clinic, doctor))
    assert res.status_code == 200
    first = res.json()
    assert first["ok"] is True
    assert first["queueNumber"] == 1
    assert first["alreadyBooked"] is False

    res = await client.post("/api/public/book", json=booking_body(clinic, doctor))
    again = res.json()
    assert again["alreadyBooked"] is True
    assert again["ticketId"] == first["ticketId"]
    assert again["queueNumber"] is None


async def test_book_errors_are_structured(client, target):
    clinic, doctor = target

    res = await client.post("/api/public/book", json=booking_body(clinic, doctor, phone="12"))
    assert res.status_code == 400
    assert res.json() == {"ok": False, "error": "invalid phone number format"}

    res = await client.post("/api/public/book", json=booking_body(clinic, doctor, clinicSlug="nowhere"))
    assert res.status_code == 404
    assert res.json() == {"ok": False, "error": "clinic not found or inactive"}

    res = await client.post("/api/public/book", json=["not", "an", "object"])
    assert res.status_code == 400
    assert res.json()["ok"] is False


async def test_ticket_and_queue_state(client, target):
    clinic, doctor = target
    booked = (await client.post("/api/public/book", json=booking_body(clinic, doctor))).json()

    res = await client.get(f"/api/public/tickets/{booked['ticketId']}")
    assert res.status_code == 200
    ticket = res.json()
    assert ticket["display_name"] == "A.M.A."
    assert ticket["phone_last4"] == "5678"
    assert ticket["status"] == "Waiting"
    assert "phone" not in ticket and "name" not in ticket

    res = await client.get(f"/api/public/queue-state/{clinic.id}/{doctor.id}")
    assert res.json()["max_queue_number"] == 1

    res = await client.get("/api/public/tickets/unknown")
    assert res.status_code == 404


async def test_search_patient(client, target):
    clinic, doctor = target
    booked = (await client.post("/api/public/book", json=booking_body(clinic, doctor))).json()

    res = await client.post("/api/public/search-patient", json={"phone": "010 1234 5678"})
    body = res.json()
    assert body["found"] is True
    assert body["patient"] == {
        "ticketId": booked["ticketId"], "clinicId": clinic.id, "queueNumber": 1, "status": "Waiting",
    }

    res = await client.post("/api/public/search-patient", json={"phone": "01112345678"})
    assert res.json() == {"ok": True, "found": False}

    res = await client.post("/api/public/search-patient", json={"phone": "abc"})
    assert res.status_code == 400


async def test_queue_count(client, target, make_doctor):
    clinic, doctor = target
    for phone in ("01012345678", "01112345678"):
        await client.post("/api/public/book", json=booking_body(clinic, doctor, phone=phone))

    res = await client.get("/api/public/queue-count", params={"clinicSlug": clinic.slug, "doctorId": doctor.id})
    assert res.json() == {"ok": True, "peopleAhead": 2}

    res = await client.get("/api/public/queue-count", params={"clinicSlug": clinic.slug})
    assert res.status_code == 400
    assert res.json()["error"] == "Missing required parameters"

    off_duty = await make_doctor(clinic, is_active=False)
    res = await client.get("/api/public/queue-count", params={"clinicSlug": clinic.slug, "doctorId": off_duty.id})
    assert res.status_code == 400


async def test_booking_rate_limit(app, settings, target):
    clinic, doctor = target
    limited = create_app(settings.model_copy(update={"RATE_LIMIT_BOOKING": 2}))

    async with AsyncClient(transport=ASGITransport(app=limited), base_url="http://test") as c:
        headers = {"X-Forwarded-For": "203.0.113.7"}
        for phone in ("01012345678", "01112345678"):
            res = await c.post("/api/public/book", json=booking_body(clinic, doctor, phone=phone), headers=headers)
            assert res.status_code == 200

        res = await c.post("/api/public/book", json=booking_body(clinic, doctor, phone="01212345678"),
                           headers=headers)
        assert res.status_code == 429
        assert res.json()["ok"] is False
        assert int(res.headers["Retry-After"]) >= 1
        assert res.headers["X-RateLimit-Remaining"] == "0"

        # a different client has its own window
        res = await c.post("/api/public/book", json=booking_body(clinic, doctor, phone="01212345678"),
                           headers={"X-Forwarded-For": "198.51.100.4"})
        assert res.status_code == 200

    await limited.state.engine.dispose()
