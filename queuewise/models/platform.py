import enum
import uuid
from datetime import datetime
from sqlalchemy import String, Enum, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from queuewise.core.db import Base, utcnow

class PlatformAdmin(Base):
    __tablename__ = "platform_admins"

    uid: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)

class ClientStatus(str, enum.Enum):
    active = "active"
    suspended = "suspended"
    canceled = "canceled"

class PlatformClient(Base):
    """A paying tenant as seen by platform admins; maps to exactly one clinic."""
    __tablename__ = "platform_clients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    clinic_id: Mapped[str] = mapped_column(String(36), index=True)
    clinic_name: Mapped[str] = mapped_column(String(255))
    owner_uid: Mapped[str] = mapped_column(String(36))
    owner_email: Mapped[str] = mapped_column(String(255))
    plan: Mapped[str] = mapped_column(String(20), default="monthly")
    status: Mapped[ClientStatus] = mapped_column(Enum(ClientStatus), default=ClientStatus.active, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, onupdate=utcnow)
    canceled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    last_modified_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
