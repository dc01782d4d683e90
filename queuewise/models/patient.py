import uuid
import enum
from datetime import datetime
from sqlalchemy import String, Integer, Text, Enum, ForeignKey, DateTime, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from queuewise.core.db import Base, utcnow

class PatientStatus(str, enum.Enum):
    waiting = "Waiting"
    consulting = "Consulting"
    finished = "Finished"

class QueueType(str, enum.Enum):
    consultation = "Consultation"
    re_consultation = "Re-consultation"

class BookingSource(str, enum.Enum):
    patient = "patient"
    nurse = "nurse"

ACTIVE_STATUSES = (PatientStatus.waiting, PatientStatus.consulting)

def _values(e):
    return [m.value for m in e]

class Patient(Base):
    """One admission into a doctor's daily queue."""
    __tablename__ = "patients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id"), index=True)
    doctor_id: Mapped[str] = mapped_column(String(36), ForeignKey("doctors.id"), index=True)

    name: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str] = mapped_column(String(20), index=True)   # digits only, local format
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)

    booking_day: Mapped[str] = mapped_column(String(10))          # YYYY-MM-DD in BOOKING_TIMEZONE
    queue_number: Mapped[int] = mapped_column(Integer)
    status: Mapped[PatientStatus] = mapped_column(
        Enum(PatientStatus, values_callable=_values), default=PatientStatus.waiting, index=True
    )
    queue_type: Mapped[QueueType] = mapped_column(
        Enum(QueueType, values_callable=_values), default=QueueType.consultation
    )
    source: Mapped[BookingSource] = mapped_column(
        Enum(BookingSource, values_callable=_values), default=BookingSource.patient
    )

    consultation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    chronic_diseases: Mapped[str | None] = mapped_column(Text, nullable=True)
    prescription: Mapped[str] = mapped_column(Text, default="")

    nurse_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    nurse_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    ticket_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)
    called_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    __table_args__ = (
        UniqueConstraint("clinic_id", "doctor_id", "booking_day", "queue_number", name="uq_patient_queue_slot"),
        Index("ix_patient_partition", "clinic_id", "doctor_id", "booking_day"),
        Index("ix_patient_phone_doctor", "phone", "doctor_id"),
    )
