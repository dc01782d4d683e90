import enum
import uuid
from datetime import datetime
from sqlalchemy import String, Enum, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from queuewise.core.db import Base, utcnow

class InviteRole(str, enum.Enum):
    doctor = "doctor"
    nurse = "nurse"

class InviteStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    revoked = "revoked"
    expired = "expired"

class Invite(Base):
    __tablename__ = "invites"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id"), index=True)
    email: Mapped[str] = mapped_column(String(255), index=True)
    role: Mapped[InviteRole] = mapped_column(Enum(InviteRole))
    created_by_uid: Mapped[str] = mapped_column(String(36))

    # sha256 of the token payload; the token itself is never stored
    token_hash: Mapped[str] = mapped_column(String(64), default="")
    status: Mapped[InviteStatus] = mapped_column(Enum(InviteStatus), default=InviteStatus.pending, index=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=False))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)
    accepted_by_uid: Mapped[str | None] = mapped_column(String(36), nullable=True)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
