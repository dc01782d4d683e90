import pytest

from queuewise.models.booking_ticket import BookingTicket
from queuewise.models.clinic import Clinic
from queuewise.models.doctor import Doctor
from queuewise.models.nurse import Nurse
from queuewise.models.user import RoleEnum, User, UserProfile


@pytest.fixture
async def clinic_team(make_clinic, make_doctor, make_nurse, make_staff):
    clinic = await make_clinic()
    owner_doctor = await make_doctor(clinic, name="Dr. Hassan")
    owner = await make_staff(clinic, "owner@nileclinic.com", role=RoleEnum.owner, doctor=owner_doctor)
    doctor = await make_doctor(clinic, name="Dr. Amira")
    doctor_user = await make_staff(clinic, "amira@nileclinic.com", role=RoleEnum.doctor, doctor=doctor)
    nurse = await make_nurse(clinic)
    nurse_user = await make_staff(clinic, "mona@nileclinic.com", role=RoleEnum.nurse, nurse=nurse)
    return {
        "clinic": clinic, "owner": owner, "owner_doctor": owner_doctor,
        "doctor": doctor, "doctor_user": doctor_user, "nurse": nurse, "nurse_user": nurse_user,
    }


# ---------- public directory ----------
async def test_public_clinic_lists_active_doctors(client, clinic_team, make_doctor):
    await make_doctor(clinic_team["clinic"], name="Dr. Zaki", is_active=False)

    res = await client.get("/api/public/clinics/nile-clinic")
    assert res.status_code == 200
    body = res.json()
    assert body["id"] == clinic_team["clinic"].id
    assert [d["name"] for d in body["doctors"]] == ["Dr. Amira", "Dr. Hassan"]
    assert "owner_email" not in body


async def test_public_clinic_hides_inactive_clinics(client, make_clinic):
    await make_clinic(slug="closed-clinic", is_active=False)

    res = await client.get("/api/public/clinics/closed-clinic")
    assert res.status_code == 404
    assert res.json()["error"] == "clinic not found or inactive"


# ---------- settings ----------
async def test_owner_updates_settings(app, client, clinic_team, auth_headers):
    res = await client.patch("/api/clinic/settings", headers=auth_headers(clinic_team["owner"]), json={
        "consultation_time": 20, "consultation_cost": 250, "re_consultation_cost": 100,
        "timezone": "Africa/Cairo", "language": "en",
    })
    assert res.status_code == 200
    assert res.json()["consultation_time"] == 20

    async with app.state.sessionmaker() as s:
        clinic = await s.get(Clinic, clinic_team["clinic"].id)
        assert (clinic.consultation_cost, clinic.re_consultation_cost, clinic.language) == (250, 100, "en")
        # untouched fields keep their value
        assert clinic.name == "Nile Clinic"


async def test_settings_validation_and_permissions(client, clinic_team, auth_headers):
    owner = auth_headers(clinic_team["owner"])

    res = await client.patch("/api/clinic/settings", headers=owner, json={"timezone": "Mars/Olympus"})
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid timezone"

    res = await client.patch("/api/clinic/settings", headers=owner, json={"consultation_time": 0})
    assert res.status_code == 400

    res = await client.patch("/api/clinic/settings", headers=auth_headers(clinic_team["nurse_user"]),
                             json={"language": "en"})
    assert res.status_code == 403

    res = await client.get("/api/clinic/", headers=auth_headers(clinic_team["nurse_user"]))
    assert res.json()["slug"] == "nile-clinic"


# ---------- nurse assignment ----------
async def test_nurse_bookings_follow_assigned_doctor(app, client, clinic_team, auth_headers):
    owner = auth_headers(clinic_team["owner"])
    nurse, doctor = clinic_team["nurse"], clinic_team["doctor"]

    res = await client.patch(f"/api/clinic/nurses/{nurse.id}", headers=owner, json={"doctor_id": doctor.id})
    assert res.status_code == 200
    assert res.json()["doctor_id"] == doctor.id

    # the request names the owner's doctor, the assignment wins
    res = await client.post("/api/public/book", json={
        "source": "nurse", "clinicId": clinic_team["clinic"].id, "nurseId": nurse.id,
        "doctorId": clinic_team["owner_doctor"].id, "name": "Ahmed Ali", "phone": "01012345678",
    })
    assert res.status_code == 200
    async with app.state.sessionmaker() as s:
        ticket = await s.get(BookingTicket, res.json()["ticketId"])
        assert ticket.doctor_id == doctor.id

    res = await client.patch(f"/api/clinic/nurses/{nurse.id}", headers=owner, json={"doctor_id": None})
    assert res.json()["doctor_id"] is None


async def test_nurse_assignment_checks_the_doctor(client, clinic_team, auth_headers, make_clinic, make_doctor):
    owner = auth_headers(clinic_team["owner"])
    nurse = clinic_team["nurse"]
    elsewhere = await make_doctor(await make_clinic(slug="delta"))

    res = await client.patch(f"/api/clinic/nurses/{nurse.id}", headers=owner, json={"doctor_id": elsewhere.id})
    assert res.status_code == 400
    assert res.json()["error"] == "doctor does not belong to this clinic"

    res = await client.patch("/api/clinic/nurses/missing", headers=owner, json={"doctor_id": None})
    assert res.status_code == 404

    res = await client.get("/api/clinic/nurses", headers=owner)
    assert [n["id"] for n in res.json()] == [nurse.id]


# ---------- staff accounts ----------
async def test_disable_and_enable_staff(app, client, clinic_team, auth_headers):
    owner = auth_headers(clinic_team["owner"])
    nurse_user = clinic_team["nurse_user"]

    res = await client.post(f"/api/clinic/staff/{nurse_user.id}/disable", headers=owner)
    assert res.status_code == 200
    assert res.json()["is_active"] is False

    res = await client.get("/auth/me", headers=auth_headers(nurse_user))
    assert res.status_code == 401
    async with app.state.sessionmaker() as s:
        assert (await s.get(Nurse, clinic_team["nurse"].id)).is_active is False

    res = await client.post(f"/api/clinic/staff/{nurse_user.id}/enable", headers=owner)
    assert res.json()["is_active"] is True
    res = await client.get("/auth/me", headers=auth_headers(nurse_user))
    assert res.status_code == 200


async def test_owner_cannot_be_disabled_and_tenants_are_isolated(client, clinic_team, auth_headers,
                                                                make_clinic, make_staff):
    owner = auth_headers(clinic_team["owner"])

    res = await client.post(f"/api/clinic/staff/{clinic_team['owner'].id}/disable", headers=owner)
    assert res.status_code == 400
    assert res.json()["error"] == "Cannot disable clinic owner"

    stranger = await make_staff(await make_clinic(slug="delta"), "sara@deltaclinic.com", role=RoleEnum.nurse)
    res = await client.post(f"/api/clinic/staff/{stranger.id}/disable", headers=owner)
    assert res.status_code == 403
    assert res.json()["error"] == "User does not belong to your clinic"

    res = await client.post(f"/api/clinic/staff/{stranger.id}/disable",
                            headers=auth_headers(clinic_team["doctor_user"]))
    assert res.status_code == 403
    assert res.json()["error"] == "Permission denied"


async def test_delete_doctor_keeps_history(app, client, clinic_team, auth_headers):
    owner = auth_headers(clinic_team["owner"])
    doctor, doctor_user, nurse = clinic_team["doctor"], clinic_team["doctor_user"], clinic_team["nurse"]
    await client.patch(f"/api/clinic/nurses/{nurse.id}", headers=owner, json={"doctor_id": doctor.id})
    res = await client.post("/api/public/book", json={
        "clinicSlug": "nile-clinic", "doctorId": doctor.id, "name": "Ahmed Ali", "phone": "01012345678"})
    ticket_id = res.json()["ticketId"]

    res = await client.delete(f"/api/clinic/staff/{doctor_user.id}", headers=owner)
    assert res.status_code == 200
    assert res.json()["ok"] is True

    async with app.state.sessionmaker() as s:
        assert await s.get(User, doctor_user.id) is None
        assert await s.get(UserProfile, doctor_user.id) is None
        row = await s.get(Doctor, doctor.id)
        assert row.is_active is False and row.user_id is None
        assert (await s.get(Nurse, nurse.id)).doctor_id is None
        assert (await s.get(BookingTicket, ticket_id)).doctor_id == doctor.id

    res = await client.get("/api/public/clinics/nile-clinic")
    assert [d["name"] for d in res.json()["doctors"]] == ["Dr. Hassan"]


async def test_delete_nurse_and_guards(app, client, clinic_team, auth_headers):
    owner = auth_headers(clinic_team["owner"])
    nurse_user = clinic_team["nurse_user"]

    res = await client.delete(f"/api/clinic/staff/{clinic_team['owner'].id}", headers=owner)
    assert res.status_code == 400
    assert res.json()["error"] == "Cannot delete your own account"

    res = await client.delete(f"/api/clinic/staff/{nurse_user.id}", headers=owner)
    assert res.status_code == 200

    async with app.state.sessionmaker() as s:
        assert await s.get(Nurse, clinic_team["nurse"].id) is None
        assert await s.get(User, nurse_user.id) is None

    res = await client.get("/api/clinic/staff", headers=owner)
    assert {p["uid"] for p in res.json()} == {clinic_team["owner"].id, clinic_team["doctor_user"].id}
