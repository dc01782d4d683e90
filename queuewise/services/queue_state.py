"""
Queue state projection.

One ``queue_state`` row per (clinic, doctor) feeds the public status page so
it never has to read the patient list. The row is a cache: writers update it
after their own commit, readers tolerate it lagging behind ``patients``.
Statistics belong to ``booking_day``; the first write on a new day resets
them, and a stale row reads as an empty queue.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.db import utcnow
from queuewise.models.patient import Patient, PatientStatus
from queuewise.models.queue_state import QueueState
from queuewise.schemas.booking import QueueStateOut

logger = logging.getLogger(__name__)

STAT_FIELDS = frozenset({
    "waiting_count", "finished_count", "avg_wait_minutes", "last_called_at", "last_finished_at",
})


def _reset_for_day(state: QueueState, day: str) -> None:
    state.booking_day = day
    state.current_consulting_queue_number = None
    state.max_queue_number = 0
    state.waiting_count = 0
    state.finished_count = 0
    state.avg_wait_minutes = None
    state.last_called_at = None
    state.last_finished_at = None


class QueueStateProjector:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, clinic_id: str, doctor_id: str, day: str) -> QueueState:
        state = await self.session.get(QueueState, (clinic_id, doctor_id))
        if state is None:
            state = QueueState(clinic_id=clinic_id, doctor_id=doctor_id, booking_day=day, is_open=True)
            _reset_for_day(state, day)
            self.session.add(state)
            try:
                await self.session.flush()
            except IntegrityError:
                # created concurrently by another writer
                await self.session.rollback()
                state = await self.session.get(QueueState, (clinic_id, doctor_id))
                if state is None:
                    raise
        if state.booking_day != day:
            logger.info("Resetting queue state %s/%s for new day %s", clinic_id, doctor_id, day)
            _reset_for_day(state, day)
        return state

    async def get(self, clinic_id: str, doctor_id: str, day: str) -> QueueStateOut | None:
        state = await self.session.get(QueueState, (clinic_id, doctor_id))
        if state is None:
            return None
        if state.booking_day != day:
            return QueueStateOut(clinic_id=clinic_id, doctor_id=doctor_id, booking_day=day, is_open=state.is_open)
        return QueueStateOut.model_validate(state)

    async def set_current(self, clinic_id: str, doctor_id: str, queue_number: int | None, day: str) -> None:
        state = await self._load(clinic_id, doctor_id, day)
        state.current_consulting_queue_number = queue_number
        state.is_open = True
        if queue_number is not None:
            state.last_called_at = utcnow()
        await self.session.commit()

    async def open_queue(self, clinic_id: str, doctor_id: str, day: str) -> None:
        state = await self._load(clinic_id, doctor_id, day)
        state.is_open = True
        await self.session.commit()

    async def close_queue(self, clinic_id: str, doctor_id: str, day: str) -> None:
        state = await self._load(clinic_id, doctor_id, day)
        state.is_open = False
        await self.session.commit()

    async def merge_stats(self, clinic_id: str, doctor_id: str, day: str, **fields) -> None:
        unknown = set(fields) - STAT_FIELDS
        if unknown:
            raise ValueError(f"unknown queue statistics: {sorted(unknown)}")
        state = await self._load(clinic_id, doctor_id, day)
        for k, v in fields.items():
            setattr(state, k, v)
        await self.session.commit()

    async def bump_max(self, clinic_id: str, doctor_id: str, queue_number: int, day: str) -> bool:
        """Raise ``max_queue_number`` to ``queue_number`` if it is higher. Returns whether it wrote."""
        await self._load(clinic_id, doctor_id, day)
        await self.session.flush()
        res = await self.session.execute(
            update(QueueState)
            .where(
                QueueState.clinic_id == clinic_id,
                QueueState.doctor_id == doctor_id,
                QueueState.booking_day == day,
                QueueState.max_queue_number < queue_number,
            )
            .values(max_queue_number=queue_number, updated_at=utcnow())
        )
        await self.session.commit()
        return res.rowcount > 0

    async def recompute(self, clinic_id: str, doctor_id: str, day: str) -> None:
        """Rebuild the day's counters and average wait from the patients table."""
        q = select(Patient.status, Patient.created_at, Patient.called_at, Patient.finished_at).where(
            Patient.clinic_id == clinic_id,
            Patient.doctor_id == doctor_id,
            Patient.booking_day == day,
        )
        rows = (await self.session.execute(q)).all()

        waiting = sum(1 for r in rows if r.status == PatientStatus.waiting)
        finished = sum(1 for r in rows if r.status == PatientStatus.finished)
        waits = [
            (r.called_at - r.created_at).total_seconds() / 60
            for r in rows if r.called_at is not None and r.created_at is not None
        ]
        finished_times = [r.finished_at for r in rows if r.finished_at is not None]

        await self.merge_stats(
            clinic_id, doctor_id, day,
            waiting_count=waiting,
            finished_count=finished,
            avg_wait_minutes=round(sum(waits) / len(waits), 1) if waits else None,
            last_finished_at=max(finished_times) if finished_times else None,
        )
