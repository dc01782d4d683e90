from datetime import datetime
from pydantic import BaseModel

from queuewise.models.patient import BookingSource, PatientStatus, QueueType


class StatusUpdate(BaseModel):
    status: PatientStatus
    prescription: str | None = None

class CallNextIn(BaseModel):
    current_id: str
    next_id: str
    prescription: str | None = None

class QueuePatientOut(BaseModel):
    """Staff view of a queued patient, medical fields included."""
    id: str
    clinic_id: str
    doctor_id: str
    name: str
    phone: str
    age: int | None = None
    booking_day: str
    queue_number: int
    status: PatientStatus
    queue_type: QueueType
    source: BookingSource
    consultation_reason: str | None = None
    chronic_diseases: str | None = None
    prescription: str | None = None
    nurse_id: str | None = None
    nurse_name: str | None = None
    ticket_id: str | None = None
    created_at: datetime
    called_at: datetime | None = None
    finished_at: datetime | None = None

    class Config:
        from_attributes = True
