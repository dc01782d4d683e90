import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.errors import Inactive, InvalidRelationship, NotFound
from queuewise.models.clinic import Clinic
from queuewise.models.doctor import Doctor
from queuewise.models.nurse import Nurse
from queuewise.models.patient import BookingSource
from queuewise.schemas.booking import AdmissionRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedTarget:
    clinic_id: str
    doctor_id: str


class TenantResolver:
    """Finds the clinic and doctor a booking lands on, enforcing active flags."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def active_clinic_by_slug(self, slug: str) -> Clinic:
        q = select(Clinic).where(Clinic.slug == slug.lower(), Clinic.is_active.is_(True)).limit(1)
        clinic = (await self.session.execute(q)).scalar_one_or_none()
        if not clinic:
            raise NotFound("clinic not found or inactive")
        return clinic

    async def active_clinic_by_id(self, clinic_id: str) -> Clinic:
        clinic = await self.session.get(Clinic, clinic_id)
        if not clinic or not clinic.is_active:
            raise NotFound("clinic not found or inactive")
        return clinic

    async def first_active_doctor(self, clinic_id: str) -> str:
        q = (
            select(Doctor.id)
            .where(Doctor.clinic_id == clinic_id, Doctor.is_active.is_(True))
            .order_by(Doctor.created_at, Doctor.id)
            .limit(1)
        )
        doctor_id = (await self.session.execute(q)).scalar_one_or_none()
        if not doctor_id:
            raise NotFound("no active doctors in this clinic")
        return doctor_id

    async def doctor_for_nurse(self, clinic_id: str, nurse_id: str, requested_doctor_id: str | None) -> str:
        nurse = await self.session.get(Nurse, nurse_id)
        if not nurse:
            raise NotFound("nurse not found")
        if nurse.clinic_id != clinic_id:
            raise InvalidRelationship("nurse does not belong to this clinic")

        if nurse.doctor_id:
            return nurse.doctor_id
        if requested_doctor_id:
            return requested_doctor_id
        return await self.first_active_doctor(clinic_id)

    async def verify_doctor(self, clinic_id: str, doctor_id: str) -> Doctor:
        doctor = await self.session.get(Doctor, doctor_id)
        if not doctor:
            raise NotFound("doctor not found")
        if doctor.clinic_id != clinic_id:
            raise InvalidRelationship("doctor does not belong to this clinic")
        if not doctor.is_active:
            raise Inactive("doctor is not active")
        return doctor

    async def resolve(self, request: AdmissionRequest) -> ResolvedTarget:
        if request.source is BookingSource.nurse:
            clinic = await self.active_clinic_by_id(request.clinic_id or "")
            doctor_id = await self.doctor_for_nurse(clinic.id, request.nurse_id or "", request.doctor_id)
        else:
            clinic = await self.active_clinic_by_slug(request.clinic_slug or "")
            doctor_id = request.doctor_id or ""

        await self.verify_doctor(clinic.id, doctor_id)
        logger.debug("Resolved booking target clinic=%s doctor=%s", clinic.id, doctor_id)
        return ResolvedTarget(clinic_id=clinic.id, doctor_id=doctor_id)
