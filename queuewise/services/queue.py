"""Staff-side queue operations: calling, finishing and removing patients."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.db import utcnow
from queuewise.core.errors import NotFound, ValidationError
from queuewise.models.booking_ticket import BookingTicket
from queuewise.models.patient import Patient, PatientStatus
from queuewise.services.queue_state import QueueStateProjector
from queuewise.services.tickets import TicketService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    (PatientStatus.waiting, PatientStatus.consulting),
    (PatientStatus.consulting, PatientStatus.finished),
    # no-show
    (PatientStatus.waiting, PatientStatus.finished),
}


class QueueService:
    """Queue operations scoped to the caller's clinic."""

    def __init__(self, session: AsyncSession, clinic_id: str):
        self.session = session
        self.clinic_id = clinic_id
        self.tickets = TicketService(session)
        self.projector = QueueStateProjector(session)

    async def _get_patient(self, patient_id: str) -> Patient:
        patient = await self.session.get(Patient, patient_id)
        if not patient or patient.clinic_id != self.clinic_id:
            raise NotFound("patient not found")
        return patient

    def _apply(self, patient: Patient, status: PatientStatus, prescription: str | None) -> None:
        if (patient.status, status) not in ALLOWED_TRANSITIONS:
            raise ValidationError(
                f"cannot change status from {patient.status.value} to {status.value}"
            )
        now = utcnow()
        patient.status = status
        if status is PatientStatus.consulting:
            patient.called_at = now
        elif status is PatientStatus.finished:
            patient.finished_at = now
        if prescription is not None:
            patient.prescription = prescription

    async def _project(self, patient: Patient) -> None:
        clinic_id, doctor_id, day = patient.clinic_id, patient.doctor_id, patient.booking_day
        if patient.status is PatientStatus.consulting:
            await self.projector.set_current(clinic_id, doctor_id, patient.queue_number, day)
        elif patient.status is PatientStatus.finished:
            # nobody is in consultation until the next patient is called
            state = await self.projector.get(clinic_id, doctor_id, day)
            if state is not None and state.current_consulting_queue_number == patient.queue_number:
                await self.projector.set_current(clinic_id, doctor_id, None, day)
        await self.projector.recompute(clinic_id, doctor_id, day)

    async def update_status(
        self, patient_id: str, status: PatientStatus, prescription: str | None = None
    ) -> Patient:
        patient = await self._get_patient(patient_id)
        self._apply(patient, status, prescription)
        await self.tickets.mirror_status(patient.ticket_id, status)
        await self.session.commit()
        logger.info("Patient %s is now %s", patient.id, status.value)

        await self._project(patient)
        return patient

    async def finish_and_call_next(
        self, current_id: str, next_id: str, prescription: str | None = None
    ) -> tuple[Patient, Patient]:
        if current_id == next_id:
            raise ValidationError("current and next patient must differ")
        current = await self._get_patient(current_id)
        nxt = await self._get_patient(next_id)
        if (current.doctor_id, current.booking_day) != (nxt.doctor_id, nxt.booking_day):
            raise ValidationError("patients are not in the same queue")

        try:
            self._apply(current, PatientStatus.finished, prescription)
            self._apply(nxt, PatientStatus.consulting, None)
            await self.tickets.mirror_status(current.ticket_id, PatientStatus.finished)
            await self.tickets.mirror_status(nxt.ticket_id, PatientStatus.consulting)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Finished patient %s and called %s (#%d)", current.id, nxt.id, nxt.queue_number)

        await self._project(nxt)
        return current, nxt

    async def remove_patient(self, patient_id: str) -> None:
        patient = await self._get_patient(patient_id)
        clinic_id, doctor_id, day = patient.clinic_id, patient.doctor_id, patient.booking_day

        tickets = await self.session.execute(select(BookingTicket).where(BookingTicket.patient_id == patient.id))
        for ticket in tickets.scalars():
            await self.session.delete(ticket)
        await self.session.flush()
        await self.session.delete(patient)
        await self.session.commit()
        logger.info("Removed patient %s from %s/%s", patient_id, clinic_id, doctor_id)

        await self.projector.recompute(clinic_id, doctor_id, day)

    async def list_queue(self, doctor_id: str, day: str) -> list[Patient]:
        q = (
            select(Patient)
            .where(
                Patient.clinic_id == self.clinic_id,
                Patient.doctor_id == doctor_id,
                Patient.booking_day == day,
            )
            .order_by(Patient.queue_number)
        )
        return list((await self.session.execute(q)).scalars().all())
