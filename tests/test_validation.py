from datetime import datetime, timedelta

import pytest

from scheduling.errors import ValidationError
from utils.validation import (
    is_valid_email,
    is_valid_uuid,
    parse_date,
    parse_submission,
    validate_submission,
)
from tests.conftest import future_date, submission


def test_parse_rejects_missing_required_fields():
    assert parse_submission(None) is None
    assert parse_submission(["not", "an", "object"]) is None
    assert parse_submission(submission(name="   ")) is None
    assert parse_submission(submission(message=None)) is None


def test_parse_normalizes_email_and_defaults_contact():
    data = parse_submission(submission(preferred_contact="carrier-pigeon"))
    assert data["email"] == "mina@example.com"
    assert data["preferred_contact"] == "zoom"
    assert data["wants_appointment"] is True


def test_scheduling_fields_ignored_unless_zoom():
    data = parse_submission(submission(preferred_contact="email", instagram_handle="@mina"))
    assert data["wants_appointment"] is False
    assert data["appointment_date"] is None
    assert data["appointment_time_slot"] is None
    assert data["instagram_handle"] is None

    data = parse_submission(submission(preferred_contact="instagram", instagram_handle="@mina"))
    assert data["instagram_handle"] == "@mina"
    assert data["appointment_time_slot"] is None


def test_validate_converts_appointment_date():
    data = validate_submission(parse_submission(submission(appointment_date=future_date(3))))
    assert data["appointment_date"] == datetime.utcnow().date() + timedelta(days=3)


@pytest.mark.parametrize("overrides,message", [
    ({"name": "x" * 201}, "Name must be 200 characters or less."),
    ({"email": "not-an-email"}, "Please enter a valid email address."),
    ({"phone": "1" * 51}, "Phone must be 50 characters or less."),
    ({"appointment_date": ""}, "Please select a date for your appointment."),
    ({"appointment_date": "2026-02-30"}, "Please enter a valid appointment date."),
    ({"appointment_date": "2020-01-01"}, "Appointment date must be today or a future date."),
    ({"appointment_time_slot": ""}, "Please select a time slot for your appointment."),
    ({"appointment_time_slot": "12:00-13:00"}, "Please select a valid time slot."),
])
def test_validation_errors(overrides, message):
    with pytest.raises(ValidationError) as exc:
        validate_submission(parse_submission(submission(**overrides)))
    assert exc.value.message == message


def test_today_is_allowed():
    today = datetime.utcnow().date().isoformat()
    data = validate_submission(parse_submission(submission(appointment_date=today)))
    assert data["appointment_date"].isoformat() == today


def test_helpers():
    assert is_valid_email("a@b.co")
    assert not is_valid_email("a @b.co")
    assert parse_date("2026-13-01") is None
    assert parse_date("20260101") is None
    assert is_valid_uuid("3f1c9a52-7d7e-4a44-9a0f-2f9c1c7e5b10")
    assert not is_valid_uuid("not-a-uuid")
