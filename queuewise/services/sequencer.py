"""
Daily queue numbering per (clinic, doctor, booking day).

Numbers come from ``queue_counters`` through a single upsert that increments
the partition's row in place. Concurrent admissions serialise on that row
lock, so two requests can never read the same value. The counter row stays
locked until the caller's transaction commits or rolls back; a rolled back
admission leaves a gap, never a duplicate.
"""

import logging

from sqlalchemy import select
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.models.queue_counter import QueueCounter

logger = logging.getLogger(__name__)


class QueueSequencer:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _increment_stmt(self, dialect: str, clinic_id: str, doctor_id: str, day: str):
        values = dict(clinic_id=clinic_id, doctor_id=doctor_id, booking_day=day, last_number=1)
        bumped = QueueCounter.last_number + 1

        if dialect == "mysql":
            return mysql_insert(QueueCounter).values(**values).on_duplicate_key_update(last_number=bumped)
        if dialect == "postgresql":
            stmt = pg_insert(QueueCounter).values(**values)
        elif dialect == "sqlite":
            stmt = sqlite_insert(QueueCounter).values(**values)
        else:
            raise NotImplementedError(f"no atomic counter upsert for dialect {dialect!r}")
        return stmt.on_conflict_do_update(
            index_elements=[QueueCounter.clinic_id, QueueCounter.doctor_id, QueueCounter.booking_day],
            set_={"last_number": bumped},
        )

    async def next_number(self, clinic_id: str, doctor_id: str, day: str) -> int:
        """Take the next number for the partition. Must run inside the admission transaction."""
        conn = await self.session.connection()
        await self.session.execute(self._increment_stmt(conn.dialect.name, clinic_id, doctor_id, day))

        number = await self.current_max(clinic_id, doctor_id, day)
        logger.debug("Issued queue number %s for %s/%s on %s", number, clinic_id, doctor_id, day)
        return number

    async def current_max(self, clinic_id: str, doctor_id: str, day: str) -> int:
        q = select(QueueCounter.last_number).where(
            QueueCounter.clinic_id == clinic_id,
            QueueCounter.doctor_id == doctor_id,
            QueueCounter.booking_day == day,
        )
        return (await self.session.execute(q)).scalar_one_or_none() or 0
