from datetime import datetime
from sqlalchemy import String, Integer, Float, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from queuewise.core.db import Base, utcnow

class QueueState(Base):
    """Read-optimised summary of one doctor's queue; rebuilt from patients, never authoritative."""
    __tablename__ = "queue_state"

    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id"), primary_key=True)
    doctor_id: Mapped[str] = mapped_column(String(36), ForeignKey("doctors.id"), primary_key=True)

    # day the statistics below belong to
    booking_day: Mapped[str] = mapped_column(String(10))

    current_consulting_queue_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_open: Mapped[bool] = mapped_column(Boolean, default=True)

    max_queue_number: Mapped[int] = mapped_column(Integer, default=0)
    waiting_count: Mapped[int] = mapped_column(Integer, default=0)
    finished_count: Mapped[int] = mapped_column(Integer, default=0)
    avg_wait_minutes: Mapped[float | None] = mapped_column(Float, nullable=True)

    last_called_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    last_finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, onupdate=utcnow)
