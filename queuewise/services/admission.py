"""
Booking admission pipeline.

validate -> resolve clinic/doctor -> day key -> duplicate guard -> queue
number -> patient + ticket -> queue state. Everything up to the duplicate
guard is read-only, so a rejected request never writes. The queue number,
patient row, ticket and back-link are committed together; the queue state
bump runs afterwards and is allowed to fail.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.config import Settings
from queuewise.core.db import utcnow
from queuewise.models.booking_ticket import BookingTicket
from queuewise.models.patient import Patient, PatientStatus
from queuewise.schemas.booking import AdmissionRequest
from queuewise.services.booking_day import booking_day, end_of_booking_day
from queuewise.services.duplicates import find_active_ticket, resolve_queue_type
from queuewise.services.queue_state import QueueStateProjector
from queuewise.services.resolver import ResolvedTarget, TenantResolver
from queuewise.services.sequencer import QueueSequencer
from queuewise.services.tickets import phone_last4, sanitize_display_name
from queuewise.services.validation import validate_admission

logger = logging.getLogger(__name__)


@dataclass
class AdmissionResult:
    ticket_id: str
    queue_number: int | None
    already_booked: bool
    patient_id: str | None = None


class AdmissionService:
    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings
        self.resolver = TenantResolver(session)
        self.sequencer = QueueSequencer(session)
        self.projector = QueueStateProjector(session)

    async def admit(self, raw: Mapping[str, Any], now: datetime | None = None) -> AdmissionResult:
        request = validate_admission(raw)
        target = await self.resolver.resolve(request)

        now = now or utcnow()
        day = booking_day(now, self.settings.BOOKING_TIMEZONE)

        existing = await find_active_ticket(self.session, target.clinic_id, target.doctor_id, day, request.phone)
        if existing:
            logger.info("Active booking already exists for doctor %s on %s (ticket=%s)",
                        target.doctor_id, day, existing)
            return AdmissionResult(ticket_id=existing, queue_number=None, already_booked=True)

        queue_type = await resolve_queue_type(self.session, target.doctor_id, request.phone, request.queue_type)

        try:
            queue_number = await self.sequencer.next_number(target.clinic_id, target.doctor_id, day)
            patient, ticket = await self.write_booking(request, target, day, queue_number, queue_type, now)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Admitted patient %s as #%d for doctor %s on %s",
                    patient.id, queue_number, target.doctor_id, day)

        try:
            await self.projector.bump_max(target.clinic_id, target.doctor_id, queue_number, day)
        except Exception:
            await self.session.rollback()
            logger.warning("Queue state update failed for %s/%s", target.clinic_id, target.doctor_id,
                           exc_info=True)

        return AdmissionResult(
            ticket_id=ticket.id, queue_number=queue_number, already_booked=False, patient_id=patient.id,
        )

    async def write_booking(
        self,
        request: AdmissionRequest,
        target: ResolvedTarget,
        day: str,
        queue_number: int,
        queue_type,
        now: datetime,
    ) -> tuple[Patient, BookingTicket]:
        """Stage patient, ticket and back-link in the current transaction. Caller commits."""
        patient = Patient(
            clinic_id=target.clinic_id,
            doctor_id=target.doctor_id,
            name=request.name,
            phone=request.phone,
            age=request.age,
            booking_day=day,
            queue_number=queue_number,
            status=PatientStatus.waiting,
            queue_type=queue_type,
            source=request.source,
            consultation_reason=request.consultation_reason,
            chronic_diseases=request.chronic_diseases,
            prescription="",
            nurse_id=request.nurse_id,
            nurse_name=request.nurse_name,
            created_at=now,
        )
        self.session.add(patient)
        await self.session.flush()

        ticket = BookingTicket(
            clinic_id=target.clinic_id,
            doctor_id=target.doctor_id,
            patient_id=patient.id,
            queue_number=queue_number,
            status=PatientStatus.waiting,
            display_name=sanitize_display_name(request.name),
            phone_last4=phone_last4(request.phone),
            created_at=now,
            expires_at=end_of_booking_day(now, self.settings.BOOKING_TIMEZONE),
        )
        self.session.add(ticket)
        await self.session.flush()

        patient.ticket_id = ticket.id
        await self.session.flush()
        return patient, ticket
