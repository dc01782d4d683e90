"""Unauthenticated lookups. Results carry ids, numbers and status only."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.errors import ValidationError
from queuewise.models.patient import ACTIVE_STATUSES, Patient
from queuewise.schemas.booking import PatientMatch
from queuewise.services.validation import is_valid_phone, sanitize_phone


async def search_active_patient(session: AsyncSession, raw_phone: str) -> PatientMatch | None:
    phone = sanitize_phone(raw_phone or "")
    if not is_valid_phone(phone):
        raise ValidationError("invalid phone number format")

    q = (
        select(Patient.ticket_id, Patient.clinic_id, Patient.queue_number, Patient.status)
        .where(Patient.phone == phone, Patient.status.in_(ACTIVE_STATUSES))
        .order_by(Patient.created_at.desc())
        .limit(1)
    )
    row = (await session.execute(q)).first()
    if row is None:
        return None
    return PatientMatch(ticketId=row.ticket_id, clinicId=row.clinic_id, queueNumber=row.queue_number, status=row.status)


async def count_people_ahead(session: AsyncSession, clinic_id: str, doctor_id: str, day: str) -> int:
    q = select(func.count(Patient.id)).where(
        Patient.clinic_id == clinic_id,
        Patient.doctor_id == doctor_id,
        Patient.booking_day == day,
        Patient.status.in_(ACTIVE_STATUSES),
    )
    return (await session.execute(q)).scalar_one()
