from datetime import date
from unittest.mock import patch

from models import db
from models.audit_log import AuditLog
from models.help_request import HelpRequest
from tests.conftest import future_date, submission


def test_zoom_submission_books_slot(client):
    day = future_date(10)
    res = client.post("/api/submit", json=submission(appointment_date=day, appointment_time_slot="09:00-10:00"))

    assert res.status_code == 201
    body = res.get_json()
    assert body["ok"] is True

    req = db.session.get(HelpRequest, body["id"])
    assert req.status == "new"
    assert req.wants_appointment is True
    assert req.appointment_date.isoformat() == day
    assert req.reschedule_token
    assert req.zoom_link is None


def test_second_submission_for_same_slot_conflicts(client):
    day = future_date(10)
    first = client.post("/api/submit", json=submission(appointment_date=day))
    second = client.post("/api/submit", json=submission(appointment_date=day, email="other@example.com"))

    assert first.status_code == 201
    assert second.status_code == 409
    assert "no longer available" in second.get_json()["error"]
    assert HelpRequest.query.count() == 1


def test_store_rejects_race_loser_when_precheck_misses(client):
    """Both writers pass the advisory check; the unique index decides."""
    day = future_date(12)
    with patch("scheduling.lifecycle.availability.is_slot_taken", return_value=False):
        responses = [
            client.post("/api/submit", json=submission(appointment_date=day, email=f"user{i}@example.com"))
            for i in range(3)
        ]

    codes = sorted(r.status_code for r in responses)
    assert codes == [201, 409, 409]
    assert all(
        r.get_json()["error"] == "This date and time slot is no longer available. Please choose another date or time."
        for r in responses if r.status_code == 409
    )
    assert HelpRequest.query.count() == 1


def test_closed_request_frees_its_slot(client, make_request):
    day = future_date(5)
    make_request(appointment_date=date.fromisoformat(day), appointment_time_slot="11:00-12:00", status="closed")

    res = client.post("/api/submit", json=submission(appointment_date=day, appointment_time_slot="11:00-12:00"))
    assert res.status_code == 201


def test_non_zoom_contact_has_no_slot_or_token(client):
    res = client.post("/api/submit", json=submission(preferred_contact="email"))
    assert res.status_code == 201

    req = db.session.get(HelpRequest, res.get_json()["id"])
    assert req.wants_appointment is False
    assert req.appointment_date is None
    assert req.reschedule_token is None


def test_non_zoom_requests_never_conflict(client):
    for i in range(2):
        res = client.post("/api/submit", json=submission(preferred_contact="instagram", email=f"ig{i}@example.com"))
        assert res.status_code == 201


def test_rejects_non_json_content_type(client):
    res = client.post("/api/submit", data="name=x", content_type="application/x-www-form-urlencoded")
    assert res.status_code == 400
    assert res.get_json()["error"] == "Content-Type must be application/json."


def test_rejects_unparseable_body(client):
    res = client.post("/api/submit", data="{not json", content_type="application/json")
    assert res.status_code == 400
    assert res.get_json()["error"] == "Invalid request body."


def test_rejects_oversized_body(client):
    res = client.post("/api/submit", json=submission(message="x" * 60_000))
    assert res.status_code == 413


def test_field_validation_is_400(client):
    res = client.post("/api/submit", json=submission(appointment_time_slot="12:00-13:00"))
    assert res.status_code == 400
    assert res.get_json()["error"] == "Please select a valid time slot."


def test_rate_limit_after_five_submissions(client):
    for i in range(5):
        res = client.post("/api/submit", json=submission(preferred_contact="email", email=f"r{i}@example.com"))
        assert res.status_code == 201

    res = client.post("/api/submit", json=submission(preferred_contact="email"))
    assert res.status_code == 429
    assert int(res.headers["Retry-After"]) > 0
    assert "minute(s)" in res.get_json()["error"]


def test_rate_limit_is_per_client(client):
    for i in range(6):
        res = client.post(
            "/api/submit",
            json=submission(preferred_contact="email"),
            headers={"X-Forwarded-For": f"10.0.0.{i}, 172.16.0.1"},
        )
        assert res.status_code == 201


def test_notification_failure_does_not_fail_submit(client):
    with patch("utils.discord.notify_new_request", side_effect=RuntimeError("discord down")), \
            patch("scheduling.lifecycle.send_email", side_effect=OSError("smtp down")):
        res = client.post("/api/submit", json=submission())
    assert res.status_code == 201


def test_confirmation_email_carries_reschedule_link(client):
    with patch("scheduling.lifecycle.send_email", return_value=(True, None)) as send, \
            patch("utils.discord.notify_new_request", return_value=True) as ping:
        res = client.post("/api/submit", json=submission())

    req = db.session.get(HelpRequest, res.get_json()["id"])
    to_email, subject, body = send.call_args.args
    assert to_email == "mina@example.com"
    assert req.id[:8] in subject
    assert f"https://livable.test/reschedule?token={req.reschedule_token}" in body
    ping.assert_called_once()


def test_submit_is_audited(client):
    client.post("/api/submit", json=submission())
    assert AuditLog.query.filter_by(action="REQUEST_SUBMIT").count() == 1
    row = AuditLog.query.filter_by(action="REQUEST_SUBMIT").one()
    assert row.entity == "request"
    assert row.details == {"preferred_contact": "zoom"}
