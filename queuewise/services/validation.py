"""
Admission validation and input sanitisation.

``validate_admission`` checks a raw booking body in a fixed order and raises
``ValidationError`` carrying the first violated constraint; nothing is
touched in the database.
"""

import re
from collections.abc import Mapping
from typing import Any

from queuewise.core.errors import ValidationError
from queuewise.models.patient import BookingSource, QueueType
from queuewise.schemas.booking import AdmissionRequest

# 11 digits: 010 / 011 / 012 / 015 followed by 8 digits
PHONE_RE = re.compile(r"^01[0125][0-9]{8}$")
_NON_DIGITS = re.compile(r"\D")
_NAME_DISALLOWED = re.compile(r"[^\u0600-\u06FF\u0750-\u077Fa-zA-Z\s\-'.]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F<>]")
_WHITESPACE = re.compile(r"\s+")

MAX_NAME_LENGTH = 100
MAX_TEXT_LENGTH = 500
MAX_AGE = 150


def sanitize_phone(phone: str) -> str:
    return _NON_DIGITS.sub("", phone)[:11]


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.match(_NON_DIGITS.sub("", phone)))


def sanitize_name(name: str) -> str:
    cleaned = _NAME_DISALLOWED.sub("", name.strip())
    return _WHITESPACE.sub(" ", cleaned).strip()[:MAX_NAME_LENGTH]


def sanitize_text(text: Any, max_length: int = MAX_TEXT_LENGTH) -> str | None:
    if not text or not isinstance(text, str):
        return None
    cleaned = _CONTROL_CHARS.sub("", text.strip())
    cleaned = _WHITESPACE.sub(" ", cleaned)[:max_length]
    return cleaned or None


def _required_str(raw: Mapping[str, Any], key: str, message: str) -> str:
    value = raw.get(key)
    if not value or not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def _optional_str(raw: Mapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_age(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("age must be a number between 0 and 150")
    if isinstance(value, int):
        age = value
    elif isinstance(value, str) and value.strip().isdigit() and len(value.strip()) <= 3:
        age = int(value.strip())
    else:
        raise ValidationError("age must be a number between 0 and 150")
    if age < 0 or age > MAX_AGE:
        raise ValidationError("age must be a number between 0 and 150")
    return age


def validate_admission(raw: Mapping[str, Any]) -> AdmissionRequest:
    if not isinstance(raw, Mapping):
        raise ValidationError("request body must be a JSON object")

    source_raw = raw.get("source") or BookingSource.patient.value
    try:
        source = BookingSource(source_raw)
    except ValueError:
        raise ValidationError("source must be 'patient' or 'nurse'")

    clinic_slug = clinic_id = nurse_id = None
    doctor_id = _optional_str(raw, "doctorId")

    if source is BookingSource.patient:
        clinic_slug = _required_str(raw, "clinicSlug", "clinicSlug is required for patient bookings").lower()
        doctor_id = _required_str(raw, "doctorId", "doctorId is required for patient bookings")
    else:
        clinic_id = _required_str(raw, "clinicId", "clinicId is required for nurse bookings")
        nurse_id = _required_str(raw, "nurseId", "nurseId is required for nurse bookings")

    name_raw = raw.get("name")
    if not isinstance(name_raw, str) or len(name_raw.strip()) < 2:
        raise ValidationError("name must be at least 2 characters")
    name = sanitize_name(name_raw)
    if len(name) < 2:
        raise ValidationError("name must be at least 2 characters")

    phone_raw = raw.get("phone")
    if not isinstance(phone_raw, str) or not is_valid_phone(phone_raw):
        raise ValidationError("invalid phone number format")

    age = _parse_age(raw.get("age"))

    try:
        queue_type = QueueType(raw.get("queueType") or QueueType.consultation.value)
    except ValueError:
        raise ValidationError("queueType must be 'Consultation' or 'Re-consultation'")

    nurse_name = raw.get("nurseName")
    if isinstance(nurse_name, str):
        nurse_name = sanitize_name(nurse_name) or None
    else:
        nurse_name = None

    return AdmissionRequest(
        source=source,
        clinic_slug=clinic_slug,
        clinic_id=clinic_id,
        doctor_id=doctor_id,
        nurse_id=nurse_id,
        nurse_name=nurse_name,
        name=name,
        phone=sanitize_phone(phone_raw),
        age=age,
        queue_type=queue_type,
        consultation_reason=sanitize_text(raw.get("consultationReason")),
        chronic_diseases=sanitize_text(raw.get("chronicDiseases")),
    )
