from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column
from queuewise.core.db import Base

class QueueCounter(Base):
    """Last queue number issued per (clinic, doctor, day); only ever incremented in place."""
    __tablename__ = "queue_counters"

    clinic_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    doctor_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    booking_day: Mapped[str] = mapped_column(String(10), primary_key=True)
    last_number: Mapped[int] = mapped_column(Integer, default=0)
