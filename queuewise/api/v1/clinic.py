from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.api.deps import get_app_settings, require_roles
from queuewise.core.config import Settings
from queuewise.core.db import get_db
from queuewise.models.user import RoleEnum, UserProfile
from queuewise.schemas.auth import ProfileOut
from queuewise.schemas.clinic import ClinicOut, ClinicSettingsUpdate, DoctorOut, NurseAssign, NurseOut
from queuewise.services.clinic import ClinicService

router = APIRouter(prefix="/api/clinic", tags=["clinic"])

staff = require_roles(RoleEnum.owner, RoleEnum.doctor, RoleEnum.nurse)
owner_only = require_roles(RoleEnum.owner)


def _service(profile: UserProfile, db: AsyncSession, settings: Settings) -> ClinicService:
    return ClinicService(db, settings, profile.clinic_id)

# ---------- clinic ----------
@router.get("/", response_model=ClinicOut)
async def get_clinic(
    profile: UserProfile = Depends(staff),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await _service(profile, db, settings).get_clinic()

@router.patch("/settings", response_model=ClinicOut)
async def update_settings(
    payload: ClinicSettingsUpdate,
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await _service(profile, db, settings).update_settings(**payload.model_dump(exclude_unset=True))

# ---------- rosters ----------
@router.get("/doctors", response_model=list[DoctorOut])
async def list_doctors(
    profile: UserProfile = Depends(staff),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await _service(profile, db, settings).list_doctors()

@router.get("/nurses", response_model=list[NurseOut])
async def list_nurses(
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await _service(profile, db, settings).list_nurses()

@router.patch("/nurses/{nurse_id}", response_model=NurseOut)
async def assign_nurse(
    nurse_id: str,
    payload: NurseAssign,
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await _service(profile, db, settings).assign_nurse_doctor(nurse_id, payload.doctor_id)

# ---------- staff accounts ----------
@router.get("/staff", response_model=list[ProfileOut])
async def list_staff(
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await _service(profile, db, settings).list_staff()

@router.post("/staff/{uid}/disable", response_model=ProfileOut)
async def disable_staff(
    uid: str,
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await _service(profile, db, settings).set_staff_disabled(profile.uid, uid, True)

@router.post("/staff/{uid}/enable", response_model=ProfileOut)
async def enable_staff(
    uid: str,
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return await _service(profile, db, settings).set_staff_disabled(profile.uid, uid, False)

@router.delete("/staff/{uid}")
async def delete_staff(
    uid: str,
    profile: UserProfile = Depends(owner_only),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    await _service(profile, db, settings).delete_staff(profile.uid, uid)
    return {"ok": True, "message": f"User {uid} permanently deleted"}
