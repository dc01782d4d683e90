import enum
import uuid
from datetime import datetime
from sqlalchemy import String, Enum, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from queuewise.core.db import Base, utcnow

class RoleEnum(str, enum.Enum):
    owner = "owner"
    doctor = "doctor"
    nurse = "nurse"

class User(Base):
    """Auth-provider account. ``is_active=False`` is a disabled account."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(255), default="")
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)

class UserProfile(Base):
    """Clinic membership and role of an account."""
    __tablename__ = "user_profiles"

    uid: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), primary_key=True)
    email: Mapped[str] = mapped_column(String(255))
    display_name: Mapped[str] = mapped_column(String(255), default="")

    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id"), index=True)
    role: Mapped[RoleEnum] = mapped_column(Enum(RoleEnum))
    doctor_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    nurse_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    invited_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, onupdate=utcnow)
