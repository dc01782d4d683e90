from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.api.deps import get_app_settings, require_roles
from queuewise.core.config import Settings
from queuewise.core.db import get_db
from queuewise.models.user import RoleEnum, UserProfile
from queuewise.schemas.booking import QueueStateOut
from queuewise.schemas.queue import CallNextIn, QueuePatientOut, StatusUpdate
from queuewise.services.booking_day import booking_day
from queuewise.services.queue import QueueService
from queuewise.services.queue_state import QueueStateProjector
from queuewise.services.resolver import TenantResolver

router = APIRouter(prefix="/api/queue", tags=["queue"])

staff = require_roles(RoleEnum.owner, RoleEnum.doctor, RoleEnum.nurse)


# ---------- reads ----------
@router.get("/{doctor_id}", response_model=list[QueuePatientOut])
async def list_queue(
    doctor_id: str,
    day: str | None = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    profile: UserProfile = Depends(staff),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    day = day or booking_day(tz=settings.BOOKING_TIMEZONE)
    return await QueueService(db, profile.clinic_id).list_queue(doctor_id, day)

# ---------- transitions ----------
@router.patch("/patients/{patient_id}/status", response_model=QueuePatientOut)
async def update_status(
    patient_id: str,
    body: StatusUpdate,
    profile: UserProfile = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    return await QueueService(db, profile.clinic_id).update_status(patient_id, body.status, body.prescription)

@router.post("/call-next", response_model=list[QueuePatientOut])
async def call_next(
    body: CallNextIn,
    profile: UserProfile = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    finished, called = await QueueService(db, profile.clinic_id).finish_and_call_next(
        body.current_id, body.next_id, body.prescription
    )
    return [finished, called]

@router.delete("/patients/{patient_id}", status_code=204)
async def remove_patient(
    patient_id: str,
    profile: UserProfile = Depends(staff),
    db: AsyncSession = Depends(get_db),
):
    await QueueService(db, profile.clinic_id).remove_patient(patient_id)

# ---------- open / close ----------
@router.post("/{doctor_id}/open", response_model=QueueStateOut)
async def open_queue(
    doctor_id: str,
    profile: UserProfile = Depends(require_roles(RoleEnum.owner, RoleEnum.doctor)),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    await TenantResolver(db).verify_doctor(profile.clinic_id, doctor_id)
    day = booking_day(tz=settings.BOOKING_TIMEZONE)
    projector = QueueStateProjector(db)
    await projector.open_queue(profile.clinic_id, doctor_id, day)
    return await projector.get(profile.clinic_id, doctor_id, day)

@router.post("/{doctor_id}/close", response_model=QueueStateOut)
async def close_queue(
    doctor_id: str,
    profile: UserProfile = Depends(require_roles(RoleEnum.owner, RoleEnum.doctor)),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    await TenantResolver(db).verify_doctor(profile.clinic_id, doctor_id)
    day = booking_day(tz=settings.BOOKING_TIMEZONE)
    projector = QueueStateProjector(db)
    await projector.close_queue(profile.clinic_id, doctor_id, day)
    return await projector.get(profile.clinic_id, doctor_id, day)
