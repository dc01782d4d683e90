import uuid
from datetime import datetime
from sqlalchemy import String, Integer, Enum, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from queuewise.core.db import Base, utcnow
from queuewise.models.patient import PatientStatus, _values

class BookingTicket(Base):
    """Public projection of a Patient row: initials and last 4 phone digits only."""
    __tablename__ = "booking_tickets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id"), index=True)
    doctor_id: Mapped[str] = mapped_column(String(36), ForeignKey("doctors.id"), index=True)
    patient_id: Mapped[str] = mapped_column(String(36), ForeignKey("patients.id"), index=True)

    queue_number: Mapped[int] = mapped_column(Integer)
    status: Mapped[PatientStatus] = mapped_column(
        Enum(PatientStatus, values_callable=_values), default=PatientStatus.waiting
    )
    display_name: Mapped[str] = mapped_column(String(255))
    phone_last4: Mapped[str] = mapped_column(String(4))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), index=True)
