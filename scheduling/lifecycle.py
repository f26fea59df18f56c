"""
Create / reschedule / meeting / delete transitions for help requests.

Conflicts are checked twice: an advisory pre-check against the availability
index (cheap, gives early feedback) and the store's unique index on commit
(authoritative). Callers see the same ConflictError either way.

Notifications (email, Discord) are dispatched with run_detached and never
affect the outcome returned here.
"""
import logging
import uuid

from flask import current_app

from models import db
from models.help_request import HelpRequest, REQUEST_STATUSES
from scheduling import availability, store
from scheduling.catalog import slot_duration, slot_start_time
from scheduling.errors import ConflictError, PersistenceError, ValidationError
from utils import discord, zoom
from utils.audit import log_event
from utils.background import run_detached
from utils.email_templates import appointment_changed_email, confirmation_email, meeting_link_email
from utils.emailer import send_email
from utils.validation import LIMITS, is_valid_uuid, validate_reschedule_target

logger = logging.getLogger(__name__)

RESCHEDULE_CONFLICT_MESSAGE = "This date and time slot is no longer available. Please choose another."


def new_reschedule_token() -> str:
    return str(uuid.uuid4())


def reschedule_link(token: str, base_url: str) -> str:
    base = (current_app.config.get("APP_URL") or base_url or "").rstrip("/")
    return f"{base}/reschedule?token={token}"


# ---------- notification tasks (run detached) ----------

def _send_confirmation(request_id, link):
    req = db.session.get(HelpRequest, request_id)
    if not req:
        return
    subject, body = confirmation_email(req, reschedule_link=link)
    ok, error = send_email(req.email, subject, body)
    if not ok:
        logger.warning("Confirmation email for %s not sent: %s", request_id, error)
    discord.notify_new_request(req)


def _send_changed(request_id, old_date, old_slot):
    req = db.session.get(HelpRequest, request_id)
    if not req:
        return
    subject, body = appointment_changed_email(req)
    ok, error = send_email(req.email, subject, body)
    if not ok:
        logger.warning("Appointment-changed email for %s not sent: %s", request_id, error)
    discord.notify_reschedule(req, old_date=old_date, old_slot=old_slot)


def _send_meeting_link(request_id, zoom_link, link, meeting_id, passcode):
    req = db.session.get(HelpRequest, request_id)
    if not req:
        return
    subject, body = meeting_link_email(req, zoom_link, reschedule_link=link, meeting_id=meeting_id, passcode=passcode)
    ok, error = send_email(req.email, subject, body)
    if not ok:
        logger.warning("Zoom link email for %s not sent: %s", request_id, error)
    discord.notify_zoom_link(req, zoom_link, kind="created")


def _cancel_stale_meeting(meeting_id):
    ok, error = zoom.delete_meeting(meeting_id)
    if not ok:
        logger.error("Stale Zoom meeting %s could not be cancelled: %s", meeting_id, error)


# ---------- public: submit ----------

def submit_request(data: dict, base_url: str = None) -> HelpRequest:
    """``data`` comes from utils.validation.validate_submission()."""
    wants_appointment = data["wants_appointment"]
    appointment_date = data["appointment_date"] if wants_appointment else None
    slot = data["appointment_time_slot"] if wants_appointment else None

    if wants_appointment and availability.is_slot_taken(appointment_date, slot):
        log_event("REQUEST_SUBMIT_CONFLICT", entity="slot", entity_id=f"{appointment_date} {slot}")
        raise ConflictError()

    req = HelpRequest(
        name=data["name"],
        email=data["email"],
        phone=data["phone"],
        language=data["language"],
        category=data["category"],
        message=data["message"],
        status="new",
        preferred_contact=data["preferred_contact"],
        wants_appointment=wants_appointment,
        appointment_preference=data["appointment_preference"],
        appointment_date=appointment_date,
        appointment_time_slot=slot,
        instagram_handle=data["instagram_handle"],
        reschedule_token=new_reschedule_token() if wants_appointment else None,
    )

    try:
        store.insert(req)
    except ConflictError:
        # Lost the race between the pre-check and the insert
        log_event("REQUEST_SUBMIT_CONFLICT", entity="slot", entity_id=f"{appointment_date} {slot}")
        raise

    log_event("REQUEST_SUBMIT", entity="request", entity_id=req.id, metadata={"preferred_contact": req.preferred_contact})

    link = reschedule_link(req.reschedule_token, base_url) if req.reschedule_token else None
    run_detached(_send_confirmation, req.id, link)
    return req


# ---------- public: reschedule ----------

def appointment_for_token(token: str) -> HelpRequest:
    req = store.find_by_token(token)
    if not req.has_appointment:
        raise ValidationError("This request does not have an appointment to change.")
    return req


def reschedule(token: str, date_str: str, slot: str) -> tuple:
    """
    Move the appointment held by ``token``. Returns (request, changed).

    Asking for the current (date, slot) is a successful no-op: nothing is
    written and nobody is notified.
    """
    appointment_date, slot = validate_reschedule_target(date_str, slot)

    # Row lock where the backend has one (not SQLite); update_schedule() is
    # conditional, so duplicate in-flight moves still change the row once
    req = store.find_by_token(token, for_update=True)
    if not req.wants_appointment:
        raise ValidationError("This request does not have an appointment to change.")

    if req.appointment_date == appointment_date and req.appointment_time_slot == slot:
        db.session.rollback()
        return req, False

    if availability.is_slot_taken(appointment_date, slot, exclude_id=req.id):
        db.session.rollback()
        log_event("APPOINTMENT_RESCHEDULE_CONFLICT", entity="request", entity_id=req.id)
        raise ConflictError(RESCHEDULE_CONFLICT_MESSAGE)

    request_id = req.id
    old_date, old_slot, old_meeting_id = req.appointment_date, req.appointment_time_slot, req.zoom_meeting_id
    try:
        changed = store.update_schedule(request_id, appointment_date, slot)
    except ConflictError:
        log_event("APPOINTMENT_RESCHEDULE_CONFLICT", entity="request", entity_id=request_id)
        raise ConflictError(RESCHEDULE_CONFLICT_MESSAGE)
    except PersistenceError:
        raise PersistenceError("Failed to update appointment.")

    req = store.get(request_id)
    if not changed:
        # An identical reschedule landed between our read and our write
        return req, False

    log_event(
        "APPOINTMENT_RESCHEDULE",
        entity="request",
        entity_id=req.id,
        metadata={"from": [old_date, old_slot], "to": [appointment_date, slot]},
    )

    run_detached(_send_changed, req.id, old_date, old_slot)
    if old_meeting_id:
        run_detached(_cancel_stale_meeting, old_meeting_id)
    return req, True


# ---------- public: admin ----------

def get_request(request_id: str) -> HelpRequest:
    return store.get(request_id)


def list_requests(status: str = None) -> list:
    if status and status not in REQUEST_STATUSES:
        raise ValidationError("Unknown status filter.")
    return store.list_all(status=status)


def update_request(request_id: str, body: dict) -> HelpRequest:
    status = body.get("status") if body.get("status") in REQUEST_STATUSES else None
    notes = body.get("internal_notes")
    notes = notes.strip()[:LIMITS["internal_notes"]] if isinstance(notes, str) else None

    if status is None and notes is None:
        raise ValidationError("No valid updates.")

    req = store.update_status_and_notes(request_id, status=status, notes=notes)
    log_event("REQUEST_UPDATE", entity="request", entity_id=req.id, metadata={"status": status, "notes": notes is not None})
    return req


def create_meeting(request_id: str, base_url: str = None) -> HelpRequest:
    if not is_valid_uuid(request_id):
        raise ValidationError("Invalid request ID.")

    req = store.get(request_id)
    if not req.has_appointment:
        raise ValidationError("This request does not have a date and time slot for an appointment.")
    if (req.zoom_link or "").strip():
        raise ValidationError("This request already has a Zoom link. Edit or clear it first.")

    site = current_app.config.get("SITE_NAME") or "Livable"
    # Raises UpstreamError / ConfigError: nothing has been written yet
    meeting = zoom.create_meeting(
        topic=f"{site} — {req.name}",
        start_time=slot_start_time(req.appointment_date, req.appointment_time_slot),
        duration_minutes=slot_duration(req.appointment_time_slot),
        timezone=current_app.config.get("APP_TIMEZONE") or "Asia/Seoul",
    )
    zoom_link = meeting["join_url"][:LIMITS["zoom_link"]]

    try:
        req = store.set_meeting(req.id, zoom_link, meeting["meeting_id"])
    except PersistenceError:
        logger.error("Saving Zoom meeting %s for request %s failed", meeting["meeting_id"], request_id)
        if meeting["meeting_id"]:
            zoom.delete_meeting(meeting["meeting_id"])
        raise PersistenceError("Zoom meeting was created but saving the link failed.")

    if not req.reschedule_token:
        req = store.set_reschedule_token(req.id, new_reschedule_token())

    log_event("ZOOM_MEETING_CREATE", entity="request", entity_id=req.id, metadata={"meeting_id": meeting["meeting_id"]})

    run_detached(
        _send_meeting_link,
        req.id,
        zoom_link,
        reschedule_link(req.reschedule_token, base_url),
        meeting["meeting_id"],
        meeting["passcode"],
    )
    return req


def delete_request(request_id: str) -> dict:
    """
    Remove a request, cancelling its Zoom meeting first.

    The row is deleted even when Zoom is unavailable; ``zoom_cancelled`` is
    False (with ``zoom_error``) so the meeting can be cleaned up by hand, and
    None when there was no meeting.
    """
    req = store.get(request_id)
    result = {"id": req.id, "zoom_cancelled": None}

    if req.zoom_meeting_id:
        ok, error = zoom.delete_meeting(req.zoom_meeting_id)
        result["zoom_cancelled"] = ok
        if not ok:
            result["zoom_error"] = error

    try:
        store.delete(req.id)
    except PersistenceError:
        if result["zoom_cancelled"]:
            # The row stays but its meeting is gone
            store.set_meeting(result["id"], None, None)
        raise

    log_event("REQUEST_DELETE", entity="request", entity_id=result["id"], metadata=result)
    return result


def cancel_deleted_meeting(meeting_id) -> tuple:
    """For rows deleted outside the app (deletion webhook)."""
    ok, error = zoom.delete_meeting(meeting_id)
    log_event("WEBHOOK_ZOOM_CANCEL", entity="zoom_meeting", entity_id=meeting_id, metadata={"ok": ok, "error": error})
    return ok, error


def regenerate_reschedule_token(request_id: str) -> HelpRequest:
    req = store.get(request_id)
    if not req.wants_appointment:
        raise ValidationError("This request does not have an appointment to change.")
    return store.set_reschedule_token(req.id, new_reschedule_token())

