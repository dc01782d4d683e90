"""
Platform administration: tenant onboarding and lifecycle.

Every lifecycle operation updates the client record and the clinic, then fans
out over the clinic's user profiles. Each account change runs in its own
savepoint; a failing account is logged and skipped so one bad row cannot
leave the rest of the tenant half-suspended.
"""

import logging
import re
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.auth_provider import Identity, LocalAuthProvider
from queuewise.core.config import Settings
from queuewise.core.db import utcnow
from queuewise.core.errors import (
    Conflict, Forbidden, InvalidState, NotFound, Unauthorized, ValidationError,
)
from queuewise.models.booking_ticket import BookingTicket
from queuewise.models.clinic import Clinic
from queuewise.models.doctor import Doctor
from queuewise.models.invite import Invite
from queuewise.models.nurse import Nurse
from queuewise.models.patient import Patient
from queuewise.models.platform import ClientStatus, PlatformAdmin, PlatformClient
from queuewise.models.queue_counter import QueueCounter
from queuewise.models.queue_state import QueueState
from queuewise.models.user import RoleEnum, User, UserProfile

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CLIENT_LIST_LIMIT = 100


def slugify(name: str) -> str:
    slug = name.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


@dataclass
class LifecycleResult:
    client_id: str
    clinic_id: str
    users_affected: int


class PlatformService:
    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings
        self.auth = LocalAuthProvider(session, settings)

    # ---------- auth ----------
    async def verify_platform_admin(self, token: str | None) -> Identity:
        if not token:
            raise Unauthorized("Unauthorized - Missing or invalid authorization header")
        identity = await self.auth.verify_token(token)

        admin = await self.session.get(PlatformAdmin, identity.uid)
        if not admin:
            raise Forbidden("Forbidden - User is not a platform admin")
        if not admin.is_active:
            raise Forbidden("Forbidden - Platform admin account is inactive")
        return Identity(uid=identity.uid, email=identity.email or admin.email)

    # ---------- clients ----------
    async def list_clients(self) -> list[PlatformClient]:
        q = select(PlatformClient).order_by(PlatformClient.created_at.desc()).limit(CLIENT_LIST_LIMIT)
        return list((await self.session.execute(q)).scalars().all())

    async def _slug_taken(self, slug: str) -> bool:
        q = select(Clinic.id).where(Clinic.slug == slug).limit(1)
        return (await self.session.execute(q)).scalar_one_or_none() is not None

    async def unique_slug(self, clinic_name: str, requested: str | None = None) -> str:
        if requested and not await self._slug_taken(requested.lower()):
            return requested.lower()
        base = slugify(clinic_name) or "clinic"
        slug, counter = base, 1
        while await self._slug_taken(slug):
            slug = f"{base}-{counter}"
            counter += 1
        return slug

    async def create_client(
        self,
        admin_uid: str,
        owner_email: str,
        clinic_name: str,
        clinic_slug: str | None = None,
        plan: str = "monthly",
        owner_password: str | None = None,
    ) -> tuple[PlatformClient, Clinic]:
        if not owner_email or not clinic_name:
            raise ValidationError("Missing required fields: ownerEmail, clinicName")
        owner_email = owner_email.strip().lower()
        if not EMAIL_RE.match(owner_email):
            raise ValidationError("Invalid email format")

        slug = await self.unique_slug(clinic_name, clinic_slug)
        owner_name = owner_email.split("@")[0]

        try:
            owner = await self.auth.get_user_by_email(owner_email)
            if owner is None:
                # the new owner logs in with this password
                if not owner_password:
                    raise ValidationError("ownerPassword is required for a new owner account")
                owner = await self.auth.create_user(owner_email, owner_password, owner_name)
            elif await self.session.get(UserProfile, owner.id):
                raise Conflict("owner account already belongs to a clinic")

            clinic = Clinic(
                name=clinic_name,
                slug=slug,
                owner_uid=owner.id,
                owner_name=owner_name,
                owner_email=owner_email,
                consultation_cost=100,
                re_consultation_cost=50,
                is_active=True,
                subscription_status="active",
            )
            self.session.add(clinic)
            await self.session.flush()

            # the owner also sees patients, as the clinic's first doctor
            doctor = Doctor(clinic_id=clinic.id, user_id=owner.id, name=owner_name, email=owner_email)
            self.session.add(doctor)
            await self.session.flush()

            self.session.add(UserProfile(
                uid=owner.id,
                email=owner_email,
                display_name=owner_name,
                clinic_id=clinic.id,
                role=RoleEnum.owner,
                doctor_id=doctor.id,
            ))
            client = PlatformClient(
                clinic_id=clinic.id,
                clinic_name=clinic_name,
                owner_uid=owner.id,
                owner_email=owner_email,
                plan=plan,
                status=ClientStatus.active,
                last_modified_by=admin_uid,
            )
            self.session.add(client)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Platform admin %s created client %s (clinic %s, slug %s)",
                    admin_uid, client.id, clinic.id, slug)
        return client, clinic

    async def _get_client(self, client_id: str) -> PlatformClient:
        client = await self.session.get(PlatformClient, client_id)
        if not client:
            raise NotFound("Client not found")
        if not client.clinic_id:
            raise ValidationError("Clinic ID not found")
        return client

    async def _profiles(self, clinic_id: str) -> list[UserProfile]:
        q = select(UserProfile).where(UserProfile.clinic_id == clinic_id)
        return list((await self.session.execute(q)).scalars().all())

    async def _set_users_disabled(self, clinic_id: str, disabled: bool) -> int:
        profiles = await self._profiles(clinic_id)
        for profile in profiles:
            try:
                async with self.session.begin_nested():
                    await self.auth.set_disabled(profile.uid, disabled)
                    profile.is_active = not disabled
            except Exception:
                logger.error("Failed to %s user %s", "disable" if disabled else "enable",
                             profile.uid, exc_info=True)
        return len(profiles)

    async def _change_status(
        self, admin_uid: str, client_id: str, status: ClientStatus, clinic_active: bool, disable_users: bool,
    ) -> LifecycleResult:
        client = await self._get_client(client_id)
        if status is ClientStatus.active and client.status is ClientStatus.canceled:
            raise InvalidState("Cannot reactivate a canceled client")

        now = utcnow()
        client.status = status
        client.updated_at = now
        client.last_modified_by = admin_uid
        if status is ClientStatus.canceled:
            client.canceled_at = now

        clinic = await self.session.get(Clinic, client.clinic_id)
        if clinic:
            clinic.is_active = clinic_active
            clinic.subscription_status = status.value
        else:
            logger.warning("Client %s points at missing clinic %s", client.id, client.clinic_id)

        users = await self._set_users_disabled(client.clinic_id, disable_users)
        await self.session.commit()
        logger.info("Client %s is now %s (%d users %s) by %s", client.id, status.value, users,
                    "disabled" if disable_users else "enabled", admin_uid)
        return LifecycleResult(client_id=client.id, clinic_id=client.clinic_id, users_affected=users)

    async def suspend_client(self, admin_uid: str, client_id: str) -> LifecycleResult:
        return await self._change_status(admin_uid, client_id, ClientStatus.suspended, False, True)

    async def cancel_client(self, admin_uid: str, client_id: str) -> LifecycleResult:
        return await self._change_status(admin_uid, client_id, ClientStatus.canceled, False, True)

    async def reactivate_client(self, admin_uid: str, client_id: str) -> LifecycleResult:
        return await self._change_status(admin_uid, client_id, ClientStatus.active, True, False)

    async def delete_client(self, admin_uid: str, client_id: str) -> LifecycleResult:
        """Remove the tenant with every account, staff row and queue record it owns."""
        client = await self._get_client(client_id)
        clinic_id = client.clinic_id

        profiles = await self._profiles(clinic_id)
        uids = [p.uid for p in profiles]
        if client.owner_uid and client.owner_uid not in uids:
            uids.append(client.owner_uid)

        # queue data first, then staff rows, then the accounts they point at
        for model in (BookingTicket, Patient, QueueState, QueueCounter, Invite, Nurse, Doctor, UserProfile):
            res = await self.session.execute(delete(model).where(model.clinic_id == clinic_id))
            logger.info("Deleted %d rows from %s", res.rowcount, model.__tablename__)

        for uid in uids:
            try:
                async with self.session.begin_nested():
                    if await self.session.get(User, uid):
                        await self.auth.delete_user(uid)
            except Exception:
                logger.error("Failed to delete user %s", uid, exc_info=True)

        clinic = await self.session.get(Clinic, clinic_id)
        if clinic:
            await self.session.delete(clinic)
        await self.session.delete(client)
        await self.session.commit()
        logger.info("Client %s deleted permanently by %s", client_id, admin_uid)
        return LifecycleResult(client_id=client_id, clinic_id=clinic_id, users_affected=len(uids))
