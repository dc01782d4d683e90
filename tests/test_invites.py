from datetime import timedelta

import pytest

from queuewise.core.errors import Conflict, NotFound
from queuewise.core.security import b64url_decode, b64url_encode
from queuewise.models.doctor import Doctor
from queuewise.models.invite import Invite, InviteRole, InviteStatus
from queuewise.models.nurse import Nurse
from queuewise.models.user import RoleEnum
from queuewise.services.invites import InviteService, parse_invite_token


@pytest.fixture
async def owner_clinic(make_clinic, make_staff):
    clinic = await make_clinic()
    owner = await make_staff(clinic, "owner@nileclinic.com")
    return clinic, owner


async def test_token_carries_ids_and_only_hash_is_stored(session, settings, owner_clinic):
    clinic, owner = owner_clinic
    invite, token = await InviteService(session, settings).create_invite(
        clinic.id, "Nurse@NileClinic.com", InviteRole.nurse, owner.id
    )

    parsed = parse_invite_token(token)
    assert parsed.clinic_id == clinic.id
    assert parsed.invite_id == invite.id
    assert len(parsed.secret) == 32
    assert invite.email == "nurse@nileclinic.com"
    assert token not in invite.token_hash
    assert len(invite.token_hash) == 64


async def test_one_pending_invite_per_email(session, settings, owner_clinic):
    clinic, owner = owner_clinic
    service = InviteService(session, settings)
    await service.create_invite(clinic.id, "doc@nileclinic.com", InviteRole.doctor, owner.id)

    with pytest.raises(Conflict):
        await service.create_invite(clinic.id, "DOC@nileclinic.com", InviteRole.doctor, owner.id)


async def test_verify_rejects_tampered_and_expired(session, settings, owner_clinic):
    clinic, owner = owner_clinic
    service = InviteService(session, settings)
    invite, token = await service.create_invite(clinic.id, "doc@nileclinic.com", InviteRole.doctor, owner.id)

    assert (await service.verify_token(token)).id == invite.id
    assert await service.verify_token("not-a-token!") is None

    clinic_id, invite_id, _ = b64url_decode(token).split(":")
    forged = b64url_encode(f"{clinic_id}:{invite_id}:{'x' * 32}")
    assert await service.verify_token(forged) is None

    later = invite.expires_at + timedelta(seconds=1)
    assert await service.verify_token(token, now=later) is None
    assert (await session.get(Invite, invite.id)).status is InviteStatus.expired


async def test_accept_creates_account_profile_and_staff_row(session, settings, owner_clinic):
    clinic, owner = owner_clinic
    service = InviteService(session, settings)
    invite, token = await service.create_invite(clinic.id, "doc@nileclinic.com", InviteRole.doctor, owner.id)

    profile = await service.accept_invite(token, "secret123", "Dr. Omar")

    assert profile.role is RoleEnum.doctor
    assert profile.clinic_id == clinic.id
    assert profile.invited_by == owner.id
    doctor = await session.get(Doctor, profile.doctor_id)
    assert doctor.clinic_id == clinic.id
    assert doctor.name == "Dr. Omar"

    invite = await session.get(Invite, invite.id)
    assert invite.status is InviteStatus.accepted
    assert invite.accepted_by_uid == profile.uid

    # a used token cannot be replayed
    with pytest.raises(NotFound):
        await service.accept_invite(token, "secret123")


async def test_accept_nurse_invite(session, settings, owner_clinic):
    clinic, owner = owner_clinic
    service = InviteService(session, settings)
    _, token = await service.create_invite(clinic.id, "mona@nileclinic.com", InviteRole.nurse, owner.id)

    profile = await service.accept_invite(token, "secret123")
    assert profile.role is RoleEnum.nurse
    assert profile.display_name == "mona"
    assert (await session.get(Nurse, profile.nurse_id)).clinic_id == clinic.id


async def test_revoke_and_list(session, settings, owner_clinic, make_clinic):
    clinic, owner = owner_clinic
    service = InviteService(session, settings)
    invite, token = await service.create_invite(clinic.id, "doc@nileclinic.com", InviteRole.doctor, owner.id)

    other = await make_clinic(slug="delta")
    with pytest.raises(NotFound):
        await service.revoke_invite(other.id, invite.id)

    await service.revoke_invite(clinic.id, invite.id)
    assert await service.verify_token(token) is None
    assert [i.status for i in await service.list_invites(clinic.id)] == [InviteStatus.revoked]


async def test_invite_api_flow(client, owner_clinic, auth_headers):
    clinic, owner = owner_clinic

    res = await client.post("/api/invites/", json={"email": "doc@nileclinic.com", "role": "doctor"},
                            headers=auth_headers(owner))
    assert res.status_code == 201
    token = res.json()["token"]

    res = await client.get("/api/invites/verify", params={"token": token})
    assert res.json()["valid"] is True

    res = await client.post("/api/invites/accept",
                            json={"token": token, "password": "secret123", "display_name": "Dr. Omar"})
    assert res.status_code == 200
    body = res.json()
    assert body["profile"]["role"] == "doctor"

    res = await client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert res.json()["clinic_id"] == clinic.id


async def test_staff_cannot_invite(client, make_clinic, make_staff, auth_headers):
    clinic = await make_clinic()
    nurse = await make_staff(clinic, "mona@nileclinic.com", role=RoleEnum.nurse)

    res = await client.post("/api/invites/", json={"email": "x@nileclinic.com", "role": "doctor"},
                            headers=auth_headers(nurse))
    assert res.status_code == 403
    assert res.json() == {"ok": False, "error": "Permission denied"}
