from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.models.patient import ACTIVE_STATUSES, Patient, QueueType


async def find_active_ticket(
    session: AsyncSession, clinic_id: str, doctor_id: str, day: str, phone: str
) -> str | None:
    """Ticket of a still-active booking for this phone in the same partition."""
    q = (
        select(Patient.ticket_id)
        .where(
            Patient.clinic_id == clinic_id,
            Patient.doctor_id == doctor_id,
            Patient.booking_day == day,
            Patient.phone == phone,
            Patient.status.in_(ACTIVE_STATUSES),
            Patient.ticket_id.is_not(None),
        )
        .order_by(Patient.queue_number)
        .limit(1)
    )
    return (await session.execute(q)).scalar_one_or_none()


async def has_history_with_doctor(session: AsyncSession, doctor_id: str, phone: str) -> bool:
    q = select(Patient.id).where(Patient.phone == phone, Patient.doctor_id == doctor_id).limit(1)
    return (await session.execute(q)).scalar_one_or_none() is not None


async def resolve_queue_type(
    session: AsyncSession, doctor_id: str, phone: str, requested: QueueType
) -> QueueType:
    # re-consultation needs a previous visit with this same doctor
    if requested is QueueType.re_consultation and not await has_history_with_doctor(session, doctor_id, phone):
        return QueueType.consultation
    return requested
