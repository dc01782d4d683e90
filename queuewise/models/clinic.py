import uuid
from datetime import datetime
from sqlalchemy import String, Boolean, Integer, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from queuewise.core.db import Base, utcnow

class Clinic(Base):
    __tablename__ = "clinics"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), index=True)
    slug: Mapped[str] = mapped_column(String(120), unique=True, index=True)

    owner_uid: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    owner_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    owner_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # settings
    consultation_time: Mapped[int] = mapped_column(Integer, default=15)       # minutes
    consultation_cost: Mapped[float] = mapped_column(Float, default=0)
    re_consultation_cost: Mapped[float] = mapped_column(Float, default=0)
    timezone: Mapped[str] = mapped_column(String(64), default="Africa/Cairo")
    language: Mapped[str] = mapped_column(String(8), default="ar")

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    subscription_status: Mapped[str] = mapped_column(String(20), default="active")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, onupdate=utcnow)

    doctors = relationship("Doctor", back_populates="clinic")
    nurses = relationship("Nurse", back_populates="clinic")
