from pydantic import BaseModel, Field
from typing import Optional


class ClinicOut(BaseModel):
    id: str
    name: str
    slug: str
    owner_uid: Optional[str] = None
    owner_email: Optional[str] = None
    consultation_time: int
    consultation_cost: float
    re_consultation_cost: float
    timezone: str
    language: str
    is_active: bool
    subscription_status: str

    class Config:
        from_attributes = True

class ClinicSettingsUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    consultation_time: Optional[int] = Field(None, ge=1, le=240)
    consultation_cost: Optional[float] = Field(None, ge=0)
    re_consultation_cost: Optional[float] = Field(None, ge=0)
    timezone: Optional[str] = None
    language: Optional[str] = Field(None, min_length=2, max_length=8)

# ---------- staff ----------
class DoctorOut(BaseModel):
    id: str
    clinic_id: str
    user_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    specialty: str
    is_active: bool
    is_available: bool

    class Config:
        from_attributes = True

class NurseOut(BaseModel):
    id: str
    clinic_id: str
    user_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    doctor_id: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True

class NurseAssign(BaseModel):
    doctor_id: Optional[str] = None

# ---------- public ----------
class PublicDoctorOut(BaseModel):
    id: str
    name: str
    specialty: str
    is_available: bool

    class Config:
        from_attributes = True

class PublicClinicOut(BaseModel):
    ok: bool = True
    id: str
    name: str
    slug: str
    consultation_time: int
    consultation_cost: float
    re_consultation_cost: float
    language: str
    doctors: list[PublicDoctorOut]
