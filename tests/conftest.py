"""
Shared fixtures: a fresh in-memory database per test and helpers for
building requests and faking provider HTTP responses.
"""
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.help_request import HelpRequest
from security import rate_limit

ADMIN_HEADERS = {"x-admin-secret": TestConfig.ADMIN_SECRET}


def future_date(days: int = 7) -> str:
    return (datetime.utcnow().date() + timedelta(days=days)).isoformat()


def submission(**overrides) -> dict:
    body = {
        "name": "Mina Park",
        "email": "Mina@Example.com",
        "phone": "010-1234-5678",
        "language": "English",
        "category": "Housing",
        "message": "I need help reading my lease.",
        "preferred_contact": "zoom",
        "appointment_date": future_date(),
        "appointment_time_slot": "09:00-10:00",
    }
    body.update(overrides)
    return body


def fake_response(status: int = 200, payload=None, text: str = ""):
    res = MagicMock()
    res.status_code = status
    res.ok = 200 <= status < 300
    res.text = text
    res.json.return_value = payload if payload is not None else {}
    return res


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
    rate_limit.reset()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_request(app):
    """Insert a request row directly, bypassing the HTTP layer."""
    def _make(**overrides):
        fields = {
            "name": "Jae Kim",
            "email": "jae@example.com",
            "language": "English",
            "category": "Visa",
            "message": "Visa extension question",
            "status": "new",
            "preferred_contact": "zoom",
            "wants_appointment": True,
            "appointment_date": datetime.utcnow().date() + timedelta(days=7),
            "appointment_time_slot": "10:00-11:00",
        }
        fields.update(overrides)
        if fields["wants_appointment"] and "reschedule_token" not in fields:
            fields["reschedule_token"] = f"token-{fields['appointment_time_slot']}-{fields['appointment_date']}"
        req = HelpRequest(**fields)
        db.session.add(req)
        db.session.commit()
        return req
    return _make
