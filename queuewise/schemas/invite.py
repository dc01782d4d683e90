from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from queuewise.models.invite import InviteRole, InviteStatus
from queuewise.schemas.auth import ProfileOut


class InviteCreate(BaseModel):
    email: EmailStr
    role: InviteRole
    expiry_days: int | None = Field(None, ge=1, le=30)

class InviteOut(BaseModel):
    id: str
    clinic_id: str
    email: str
    role: InviteRole
    status: InviteStatus
    created_by_uid: str
    expires_at: datetime
    created_at: datetime
    accepted_by_uid: str | None = None
    accepted_at: datetime | None = None

    class Config:
        from_attributes = True

class InviteCreated(BaseModel):
    ok: bool = True
    invite: InviteOut
    # only returned once; the server keeps a hash
    token: str

class InviteVerifyOut(BaseModel):
    ok: bool = True
    valid: bool
    invite: InviteOut | None = None

class AcceptInviteIn(BaseModel):
    token: str
    password: str = Field(..., min_length=6)
    display_name: str = ""

class AcceptInviteOut(BaseModel):
    ok: bool = True
    profile: ProfileOut
    access_token: str
    token_type: str = "bearer"
