"""
Owner-side clinic management: settings, doctor/nurse rosters and staff accounts.

Staff rows (doctors, nurses) stay referenced by queue history, so removing a
staff member deletes the account and its profile but only deactivates the
doctor row it was linked to.
"""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.auth_provider import LocalAuthProvider
from queuewise.core.config import Settings
from queuewise.core.errors import Forbidden, InvalidState, NotFound, ValidationError
from queuewise.models.clinic import Clinic
from queuewise.models.doctor import Doctor
from queuewise.models.nurse import Nurse
from queuewise.models.user import RoleEnum, User, UserProfile
from queuewise.services.resolver import TenantResolver

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = frozenset({
    "name", "consultation_time", "consultation_cost", "re_consultation_cost", "timezone", "language",
})


async def get_public_clinic(session: AsyncSession, slug: str) -> tuple[Clinic, list[Doctor]]:
    """Active clinic by slug with its bookable doctors, ordered by name."""
    clinic = await TenantResolver(session).active_clinic_by_slug(slug)
    q = (
        select(Doctor)
        .where(Doctor.clinic_id == clinic.id, Doctor.is_active.is_(True))
        .order_by(Doctor.name, Doctor.id)
    )
    return clinic, list((await session.execute(q)).scalars().all())


class ClinicService:
    def __init__(self, session: AsyncSession, settings: Settings, clinic_id: str):
        self.session = session
        self.settings = settings
        self.clinic_id = clinic_id

    async def get_clinic(self) -> Clinic:
        clinic = await self.session.get(Clinic, self.clinic_id)
        if not clinic:
            raise NotFound("clinic not found")
        return clinic

    async def update_settings(self, **fields) -> Clinic:
        unknown = set(fields) - SETTINGS_FIELDS
        if unknown:
            raise ValidationError(f"unknown clinic settings: {sorted(unknown)}")
        if fields.get("timezone"):
            try:
                ZoneInfo(fields["timezone"])
            except (ZoneInfoNotFoundError, ValueError):
                raise ValidationError("Invalid timezone")

        clinic = await self.get_clinic()
        for k, v in fields.items():
            if v is not None:
                setattr(clinic, k, v)
        await self.session.commit()
        logger.info("Clinic %s settings updated: %s", clinic.id, ", ".join(sorted(fields)))
        return clinic

    # ---------- rosters ----------
    async def list_doctors(self) -> list[Doctor]:
        q = select(Doctor).where(Doctor.clinic_id == self.clinic_id).order_by(Doctor.created_at, Doctor.id)
        return list((await self.session.execute(q)).scalars().all())

    async def list_nurses(self) -> list[Nurse]:
        q = select(Nurse).where(Nurse.clinic_id == self.clinic_id).order_by(Nurse.created_at, Nurse.id)
        return list((await self.session.execute(q)).scalars().all())

    async def assign_nurse_doctor(self, nurse_id: str, doctor_id: str | None) -> Nurse:
        """Point a nurse's walk-in bookings at ``doctor_id``; ``None`` clears the assignment."""
        nurse = await self.session.get(Nurse, nurse_id)
        if not nurse or nurse.clinic_id != self.clinic_id:
            raise NotFound("nurse not found")
        if doctor_id is not None:
            await TenantResolver(self.session).verify_doctor(self.clinic_id, doctor_id)

        nurse.doctor_id = doctor_id
        await self.session.commit()
        logger.info("Nurse %s assigned to doctor %s", nurse.id, doctor_id)
        return nurse

    # ---------- staff accounts ----------
    async def list_staff(self) -> list[UserProfile]:
        q = select(UserProfile).where(UserProfile.clinic_id == self.clinic_id).order_by(UserProfile.created_at)
        return list((await self.session.execute(q)).scalars().all())

    async def _staff_profile(self, uid: str) -> UserProfile:
        profile = await self.session.get(UserProfile, uid)
        if not profile:
            raise NotFound("User profile not found")
        if profile.clinic_id != self.clinic_id:
            raise Forbidden("User does not belong to your clinic")
        return profile

    async def _staff_row(self, profile: UserProfile) -> Doctor | Nurse | None:
        if profile.doctor_id:
            return await self.session.get(Doctor, profile.doctor_id)
        if profile.nurse_id:
            return await self.session.get(Nurse, profile.nurse_id)
        return None

    async def set_staff_disabled(self, actor_uid: str, uid: str, disabled: bool) -> UserProfile:
        profile = await self._staff_profile(uid)
        if profile.role is RoleEnum.owner or uid == actor_uid:
            raise InvalidState("Cannot disable clinic owner")

        await LocalAuthProvider(self.session, self.settings).set_disabled(uid, disabled)
        profile.is_active = not disabled
        row = await self._staff_row(profile)
        if row is not None:
            row.is_active = not disabled
        await self.session.commit()
        logger.info("Owner %s %s user %s", actor_uid, "disabled" if disabled else "enabled", uid)
        return profile

    async def delete_staff(self, actor_uid: str, uid: str) -> None:
        if uid == actor_uid:
            raise ValidationError("Cannot delete your own account")
        profile = await self._staff_profile(uid)
        if profile.role is RoleEnum.owner:
            raise InvalidState("Cannot delete clinic owner")

        try:
            row = await self._staff_row(profile)
            if isinstance(row, Doctor):
                # patients keep pointing at the doctor row
                row.is_active = False
                row.user_id = None
                await self.session.execute(
                    update(Nurse).where(Nurse.doctor_id == row.id).values(doctor_id=None)
                )
            elif isinstance(row, Nurse):
                await self.session.delete(row)

            await self.session.delete(profile)
            await self.session.flush()
            if await self.session.get(User, uid):
                await LocalAuthProvider(self.session, self.settings).delete_user(uid)
            else:
                logger.warning("Account %s already gone while deleting staff", uid)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Owner %s deleted user %s (%s)", actor_uid, uid, profile.role.value)
