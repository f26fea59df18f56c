"""
Shared validation and length limits for request data.
Keeps stored data bounded and prevents abuse.
"""
import re
import uuid
from datetime import date, datetime

from models.help_request import CONTACT_MODES
from scheduling.catalog import is_valid_slot
from scheduling.errors import ValidationError

LIMITS = {
    "name": 200,
    "email": 320,
    "phone": 50,
    "language": 50,
    "category": 100,
    "message": 10_000,
    "internal_notes": 5_000,
    "appointment_preference": 500,
    "zoom_link": 2_000,
    "appointment_time_slot": 20,
    "instagram_handle": 100,
}

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

REQUIRED_TEXT_FIELDS = ("name", "email", "language", "category", "message")


def is_valid_email(value: str) -> bool:
    return len(value) <= LIMITS["email"] and EMAIL_RE.match(value) is not None


def is_valid_uuid(value: str) -> bool:
    try:
        return str(uuid.UUID(value)) == value.lower()
    except (ValueError, AttributeError, TypeError):
        return False


def trim_to_max(value: str, max_len: int) -> str:
    value = value.strip()
    return value[:max_len]


def parse_date(value):
    """YYYY-MM-DD to a date, or None when it is not a real calendar date."""
    if not isinstance(value, str) or not DATE_ONLY_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def today_utc() -> date:
    return datetime.utcnow().date()


def _optional_text(value, max_len=None):
    if not isinstance(value, str) or not value.strip():
        return None
    if max_len is None:
        return value.strip()
    return trim_to_max(value, max_len)


def parse_submission(body):
    """
    Normalize a submit body. Returns None when it is not an object or a
    required text field is missing/blank.
    """
    if not isinstance(body, dict):
        return None
    for field in REQUIRED_TEXT_FIELDS:
        value = body.get(field)
        if not isinstance(value, str) or not value.strip():
            return None

    contact = body.get("preferred_contact")
    if contact not in CONTACT_MODES:
        contact = "zoom"
    wants_appointment = contact == "zoom"

    appointment_date = None
    appointment_time_slot = None
    appointment_preference = None
    if wants_appointment:
        appointment_preference = _optional_text(body.get("appointment_preference"), LIMITS["appointment_preference"])
        raw_date = body.get("appointment_date")
        if isinstance(raw_date, str) and raw_date.strip():
            appointment_date = raw_date.strip()[:10]
        raw_slot = body.get("appointment_time_slot")
        if isinstance(raw_slot, str) and raw_slot.strip():
            appointment_time_slot = raw_slot.strip()[:LIMITS["appointment_time_slot"]]

    instagram_handle = None
    if contact == "instagram":
        instagram_handle = _optional_text(body.get("instagram_handle"), LIMITS["instagram_handle"])

    # Raw values: validate_submission() checks lengths before anything gets truncated
    return {
        "name": body["name"].strip(),
        "email": body["email"].strip().lower(),
        "phone": _optional_text(body.get("phone")),
        "language": body["language"].strip(),
        "category": body["category"].strip(),
        "message": body["message"].strip(),
        "preferred_contact": contact,
        "wants_appointment": wants_appointment,
        "appointment_preference": appointment_preference,
        "appointment_date": appointment_date,
        "appointment_time_slot": appointment_time_slot,
        "instagram_handle": instagram_handle,
    }


def validate_appointment(date_str, slot):
    """Checks a requested (date, slot) pair. Returns (date, slot)."""
    if not date_str:
        raise ValidationError("Please select a date for your appointment.")
    appointment_date = parse_date(date_str)
    if appointment_date is None:
        raise ValidationError("Please enter a valid appointment date.")
    if appointment_date < today_utc():
        raise ValidationError("Appointment date must be today or a future date.")
    if not slot:
        raise ValidationError("Please select a time slot for your appointment.")
    if not is_valid_slot(slot):
        raise ValidationError("Please select a valid time slot.")
    return appointment_date, slot


def validate_submission(data: dict) -> dict:
    if len(data["name"]) > LIMITS["name"]:
        raise ValidationError(f"Name must be {LIMITS['name']} characters or less.")
    if not is_valid_email(data["email"]):
        raise ValidationError("Please enter a valid email address.")
    if data["phone"] and len(data["phone"]) > LIMITS["phone"]:
        raise ValidationError(f"Phone must be {LIMITS['phone']} characters or less.")
    if len(data["language"]) > LIMITS["language"]:
        raise ValidationError(f"Language must be {LIMITS['language']} characters or less.")
    if len(data["category"]) > LIMITS["category"]:
        raise ValidationError(f"Category must be {LIMITS['category']} characters or less.")
    if len(data["message"]) > LIMITS["message"]:
        raise ValidationError(f"Message must be {LIMITS['message']} characters or less.")

    if data["wants_appointment"]:
        appointment_date, slot = validate_appointment(data["appointment_date"], data["appointment_time_slot"])
        data = dict(data, appointment_date=appointment_date, appointment_time_slot=slot)
    return data


def validate_reschedule_target(date_str, slot):
    """Like validate_appointment(), with the reschedule page's wording."""
    appointment_date = parse_date(date_str) if date_str else None
    if appointment_date is None:
        raise ValidationError("Please select a valid date.")
    if appointment_date < today_utc():
        raise ValidationError("Appointment date must be today or a future date.")
    if not slot or not is_valid_slot(slot):
        raise ValidationError("Please select a valid time slot.")
    return appointment_date, slot
