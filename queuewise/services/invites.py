"""
Staff invitations.

An invite token is ``base64url("<clinicId>:<inviteId>:<secret>")``. Only the
sha256 of the decoded payload is stored, so a leaked ``invites`` row cannot
be turned back into a working link.
"""

import binascii
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.auth_provider import LocalAuthProvider
from queuewise.core.config import Settings
from queuewise.core.db import utcnow
from queuewise.core.errors import Conflict, NotFound, Unauthorized
from queuewise.core.security import (
    b64url_decode, b64url_encode, hashes_match, random_secret, sha256_hex, verify_password,
)
from queuewise.models.doctor import Doctor
from queuewise.models.invite import Invite, InviteRole, InviteStatus
from queuewise.models.nurse import Nurse
from queuewise.models.user import RoleEnum, UserProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedToken:
    clinic_id: str
    invite_id: str
    secret: str


def generate_invite_token(clinic_id: str, invite_id: str) -> str:
    return b64url_encode(f"{clinic_id}:{invite_id}:{random_secret(32)}")


def parse_invite_token(token: str) -> ParsedToken | None:
    try:
        decoded = b64url_decode(token)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.warning("Malformed invite token")
        return None
    parts = decoded.split(":")
    if len(parts) != 3 or not all(parts):
        return None
    return ParsedToken(*parts)


class InviteService:
    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings

    async def create_invite(
        self, clinic_id: str, email: str, role: InviteRole, creator_uid: str,
        expiry_days: int | None = None,
    ) -> tuple[Invite, str]:
        email = email.strip().lower()
        q = select(Invite.id).where(
            Invite.clinic_id == clinic_id,
            Invite.email == email,
            Invite.status == InviteStatus.pending,
        ).limit(1)
        if (await self.session.execute(q)).scalar_one_or_none():
            raise Conflict("An active invitation already exists for this email")

        invite = Invite(
            clinic_id=clinic_id,
            email=email,
            role=role,
            created_by_uid=creator_uid,
            status=InviteStatus.pending,
            expires_at=utcnow() + timedelta(days=expiry_days or self.settings.INVITE_EXPIRY_DAYS),
        )
        self.session.add(invite)
        await self.session.flush()

        token = generate_invite_token(clinic_id, invite.id)
        invite.token_hash = sha256_hex(b64url_decode(token))
        await self.session.commit()
        logger.info("Created %s invite %s for clinic %s", role.value, invite.id, clinic_id)
        return invite, token

    async def verify_token(self, token: str, now: datetime | None = None) -> Invite | None:
        """The pending invite behind ``token``, or None. Marks overdue invites expired."""
        parsed = parse_invite_token(token)
        if not parsed:
            return None

        invite = await self.session.get(Invite, parsed.invite_id)
        if not invite or invite.clinic_id != parsed.clinic_id:
            return None

        if not hashes_match(sha256_hex(b64url_decode(token)), invite.token_hash):
            logger.warning("Token hash mismatch for invite %s", invite.id)
            return None

        if (now or utcnow()) > invite.expires_at and invite.status is InviteStatus.pending:
            invite.status = InviteStatus.expired
            await self.session.commit()
            return None

        if invite.status is not InviteStatus.pending:
            return None
        return invite

    async def accept_invite(self, token: str, password: str, display_name: str = "") -> UserProfile:
        invite = await self.verify_token(token)
        if not invite:
            raise NotFound("invite not found or expired")

        auth = LocalAuthProvider(self.session, self.settings)
        user = await auth.get_user_by_email(invite.email)
        if user is None:
            user = await auth.create_user(invite.email, password, display_name)
        else:
            if not verify_password(password, user.hashed_password):
                raise Unauthorized("invalid credentials")
            if await self.session.get(UserProfile, user.id):
                raise Conflict("account already belongs to a clinic")

        name = display_name or user.display_name or invite.email.split("@")[0]
        profile = UserProfile(
            uid=user.id,
            email=invite.email,
            display_name=name,
            clinic_id=invite.clinic_id,
            role=RoleEnum(invite.role.value),
            invited_by=invite.created_by_uid,
        )

        if invite.role is InviteRole.doctor:
            doctor = Doctor(clinic_id=invite.clinic_id, user_id=user.id, name=name, email=invite.email)
            self.session.add(doctor)
            await self.session.flush()
            profile.doctor_id = doctor.id
        else:
            nurse = Nurse(clinic_id=invite.clinic_id, user_id=user.id, name=name, email=invite.email)
            self.session.add(nurse)
            await self.session.flush()
            profile.nurse_id = nurse.id

        self.session.add(profile)
        invite.status = InviteStatus.accepted
        invite.accepted_by_uid = user.id
        invite.accepted_at = utcnow()
        await self.session.commit()
        logger.info("Invite %s accepted by %s", invite.id, user.id)
        return profile

    async def revoke_invite(self, clinic_id: str, invite_id: str) -> Invite:
        invite = await self.session.get(Invite, invite_id)
        if not invite or invite.clinic_id != clinic_id:
            raise NotFound("invite not found")
        invite.status = InviteStatus.revoked
        await self.session.commit()
        return invite

    async def list_invites(self, clinic_id: str) -> list[Invite]:
        q = select(Invite).where(Invite.clinic_id == clinic_id).order_by(Invite.created_at.desc())
        return list((await self.session.execute(q)).scalars().all())
