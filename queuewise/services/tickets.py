"""
Public booking tickets.

A ticket is what an unauthenticated patient sees: queue number, status, the
initials of the name and the last four phone digits. Medical fields and the
full name/phone never leave the ``patients`` table through this module.
"""

import logging
import re
from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from queuewise.core.db import utcnow
from queuewise.core.errors import NotFound
from queuewise.models.booking_ticket import BookingTicket
from queuewise.models.patient import PatientStatus

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


def sanitize_display_name(full_name: str) -> str:
    """Initials joined by dots: ``"Ahmed Mohamed Ali" -> "A.M.A."``."""
    parts = full_name.split()
    if not parts:
        return ""
    return ".".join(part[0] for part in parts) + "."


def phone_last4(phone: str) -> str:
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) < 4:
        return digits
    return digits[-4:]


class TicketService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_public(self, ticket_id: str, now: datetime | None = None) -> BookingTicket:
        ticket = await self.session.get(BookingTicket, ticket_id)
        if not ticket or (now or utcnow()) > ticket.expires_at:
            raise NotFound("ticket not found or expired")
        return ticket

    async def mirror_status(self, ticket_id: str | None, status: PatientStatus) -> None:
        """Copy a patient status onto its ticket. Caller commits."""
        if not ticket_id:
            return
        ticket = await self.session.get(BookingTicket, ticket_id)
        if ticket is None:
            logger.warning("Ticket %s missing while mirroring status %s", ticket_id, status.value)
            return
        ticket.status = status

    async def delete_expired(self, before: datetime) -> int:
        res = await self.session.execute(delete(BookingTicket).where(BookingTicket.expires_at < before))
        await self.session.commit()
        logger.info("Deleted %d expired booking tickets", res.rowcount)
        return res.rowcount
