from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from queuewise.models.patient import BookingSource, PatientStatus, QueueType


class AdmissionRequest(BaseModel):
    """A booking request after validation and sanitisation."""
    source: BookingSource
    clinic_slug: Optional[str] = None
    clinic_id: Optional[str] = None
    doctor_id: Optional[str] = None
    nurse_id: Optional[str] = None
    nurse_name: Optional[str] = None

    name: str
    phone: str
    age: Optional[int] = None
    queue_type: QueueType = QueueType.consultation
    consultation_reason: Optional[str] = None
    chronic_diseases: Optional[str] = None


class BookingOut(BaseModel):
    ok: bool = True
    ticketId: Optional[str] = None
    queueNumber: Optional[int] = None
    alreadyBooked: bool = False


class SearchPatientIn(BaseModel):
    phone: str = ""


class PatientMatch(BaseModel):
    ticketId: Optional[str]
    clinicId: str
    queueNumber: int
    status: PatientStatus


class SearchPatientOut(BaseModel):
    ok: bool = True
    found: bool
    patient: Optional[PatientMatch] = None


class QueueCountOut(BaseModel):
    ok: bool = True
    peopleAhead: int


class TicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    clinic_id: str
    doctor_id: str
    queue_number: int
    status: PatientStatus
    display_name: str
    phone_last4: str
    created_at: datetime
    expires_at: datetime


class QueueStateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    clinic_id: str
    doctor_id: str
    booking_day: str
    current_consulting_queue_number: Optional[int] = None
    is_open: bool = True
    max_queue_number: int = 0
    waiting_count: int = 0
    finished_count: int = 0
    avg_wait_minutes: Optional[float] = None
