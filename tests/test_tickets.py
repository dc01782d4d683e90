from datetime import timedelta

import pytest

from queuewise.core.errors import NotFound
from queuewise.models.patient import PatientStatus
from queuewise.services.admission import AdmissionService
from queuewise.services.tickets import TicketService, phone_last4, sanitize_display_name

from conftest import NOW, booking_body


@pytest.mark.parametrize("name, expected", [
    ("Ahmed Mohamed Ali", "A.M.A."),
    ("Ahmed", "A."),
    ("  Sara   Adel ", "S.A."),
    ("", ""),
    ("   ", ""),
])
def test_display_name_is_initials(name, expected):
    assert sanitize_display_name(name) == expected


def test_phone_last4():
    assert phone_last4("01012345678") == "5678"
    assert phone_last4("010-1234-5678") == "5678"
    assert phone_last4("123") == "123"


async def test_public_ticket_hides_identity(session, settings, make_clinic, make_doctor):
    clinic = await make_clinic()
    doctor = await make_doctor(clinic)
    result = await AdmissionService(session, settings).admit(booking_body(clinic, doctor), now=NOW)

    ticket = await TicketService(session).get_public(result.ticket_id, now=NOW)
    assert ticket.display_name == "A.M.A."
    assert ticket.phone_last4 == "5678"
    assert ticket.queue_number == 1
    assert ticket.status is PatientStatus.waiting
    # expires at the end of the Cairo day
    assert ticket.expires_at == NOW.replace(hour=22) - timedelta(milliseconds=1)


async def test_expired_ticket_is_not_found(session, settings, make_clinic, make_doctor):
    clinic = await make_clinic()
    doctor = await make_doctor(clinic)
    result = await AdmissionService(session, settings).admit(booking_body(clinic, doctor), now=NOW)

    with pytest.raises(NotFound, match="ticket not found or expired"):
        await TicketService(session).get_public(result.ticket_id, now=NOW + timedelta(days=1))
    with pytest.raises(NotFound):
        await TicketService(session).get_public("missing")


async def test_delete_expired(session, settings, make_clinic, make_doctor):
    clinic = await make_clinic()
    doctor = await make_doctor(clinic)
    await AdmissionService(session, settings).admit(booking_body(clinic, doctor), now=NOW)

    assert await TicketService(session).delete_expired(NOW) == 0
    assert await TicketService(session).delete_expired(NOW + timedelta(days=1)) == 1
