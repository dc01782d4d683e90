from datetime import datetime
from pydantic import BaseModel, Field

from queuewise.models.platform import ClientStatus
from queuewise.schemas.clinic import ClinicOut


class PlatformMeOut(BaseModel):
    ok: bool = True
    uid: str
    email: str

class ClientCreate(BaseModel):
    ownerEmail: str = ""
    clinicName: str = ""
    clinicSlug: str | None = None
    plan: str = "monthly"
    ownerPassword: str | None = Field(None, min_length=6)

class ClientOut(BaseModel):
    id: str
    clinic_id: str
    clinic_name: str
    owner_uid: str
    owner_email: str
    plan: str
    status: ClientStatus
    created_at: datetime
    updated_at: datetime
    canceled_at: datetime | None = None
    last_modified_by: str | None = None

    class Config:
        from_attributes = True

class ClientListOut(BaseModel):
    ok: bool = True
    clients: list[ClientOut]

class ClientCreated(BaseModel):
    ok: bool = True
    clientId: str
    clinicId: str
    ownerUid: str
    clinic: ClinicOut
