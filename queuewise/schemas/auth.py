from pydantic import BaseModel, EmailStr, Field

from queuewise.models.user import RoleEnum


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"

class ProfileOut(BaseModel):
    uid: str
    email: str
    display_name: str
    clinic_id: str
    role: RoleEnum
    doctor_id: str | None = None
    nurse_id: str | None = None
    is_active: bool

    class Config:
        from_attributes = True
