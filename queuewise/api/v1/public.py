import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.api.deps import get_app_settings
from queuewise.core.config import Settings
from queuewise.core.db import get_db
from queuewise.core.errors import ValidationError
from queuewise.core.rate_limit import rate_limit
from queuewise.schemas.booking import (
    BookingOut, QueueCountOut, QueueStateOut, SearchPatientIn, SearchPatientOut, TicketOut,
)
from queuewise.schemas.clinic import PublicClinicOut, PublicDoctorOut
from queuewise.services.admission import AdmissionService
from queuewise.services.booking_day import booking_day
from queuewise.services.clinic import get_public_clinic
from queuewise.services.lookups import count_people_ahead, search_active_patient
from queuewise.services.queue_state import QueueStateProjector
from queuewise.services.resolver import TenantResolver
from queuewise.services.tickets import TicketService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/public", tags=["public"])


# ---------- booking ----------
@router.post("/book", response_model=BookingOut, dependencies=[Depends(rate_limit("booking"))])
async def book(
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    result = await AdmissionService(db, settings).admit(payload)
    if result.already_booked:
        return BookingOut(ticketId=result.ticket_id, alreadyBooked=True)
    return BookingOut(ticketId=result.ticket_id, queueNumber=result.queue_number)

# ---------- lookups ----------
@router.post("/search-patient", response_model=SearchPatientOut, response_model_exclude_none=True,
             dependencies=[Depends(rate_limit("search"))])
async def search_patient(payload: SearchPatientIn, db: AsyncSession = Depends(get_db)):
    match = await search_active_patient(db, payload.phone)
    if match is None:
        return SearchPatientOut(found=False)
    return SearchPatientOut(found=True, patient=match)

@router.get("/queue-count", response_model=QueueCountOut, dependencies=[Depends(rate_limit("queue-count"))])
async def queue_count(
    clinic_slug: str | None = Query(None, alias="clinicSlug"),
    doctor_id: str | None = Query(None, alias="doctorId"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    if not clinic_slug or not doctor_id:
        raise ValidationError("Missing required parameters")

    resolver = TenantResolver(db)
    clinic = await resolver.active_clinic_by_slug(clinic_slug)
    await resolver.verify_doctor(clinic.id, doctor_id)

    day = booking_day(tz=settings.BOOKING_TIMEZONE)
    return QueueCountOut(peopleAhead=await count_people_ahead(db, clinic.id, doctor_id, day))

@router.get("/tickets/{ticket_id}", response_model=TicketOut)
async def get_ticket(ticket_id: str, db: AsyncSession = Depends(get_db)):
    return await TicketService(db).get_public(ticket_id)

@router.get("/queue-state/{clinic_id}/{doctor_id}", response_model=QueueStateOut)
async def get_queue_state(
    clinic_id: str,
    doctor_id: str,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    day = booking_day(tz=settings.BOOKING_TIMEZONE)
    state = await QueueStateProjector(db).get(clinic_id, doctor_id, day)
    if state is None:
        return QueueStateOut(clinic_id=clinic_id, doctor_id=doctor_id, booking_day=day)
    return state

# ---------- clinic directory ----------
@router.get("/clinics/{slug}", response_model=PublicClinicOut, dependencies=[Depends(rate_limit("queue-count"))])
async def get_clinic_by_slug(slug: str, db: AsyncSession = Depends(get_db)):
    clinic, doctors = await get_public_clinic(db, slug)
    return PublicClinicOut(
        id=clinic.id,
        name=clinic.name,
        slug=clinic.slug,
        consultation_time=clinic.consultation_time,
        consultation_cost=clinic.consultation_cost,
        re_consultation_cost=clinic.re_consultation_cost,
        language=clinic.language,
        doctors=[PublicDoctorOut.model_validate(d) for d in doctors],
    )
