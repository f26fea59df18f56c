"""Plain-text bodies for the emails a requester receives."""
from flask import current_app

from scheduling.catalog import slot_label


def _site():
    return current_app.config.get("SITE_NAME") or "Livable"


def _format_date(value) -> str:
    # "Wed, Jun 10, 2026"
    return value.strftime("%a, %b ") + str(value.day) + value.strftime(", %Y")


def _appointment_line(appointment_date, slot) -> str:
    return f"{_format_date(appointment_date)}, {slot_label(slot)}"


def _follow_up_lines(req) -> list:
    if req.preferred_contact == "zoom" and req.has_appointment:
        lines = [f"Zoom appointment: {_appointment_line(req.appointment_date, req.appointment_time_slot)}"]
        if req.appointment_preference:
            lines.append(f"Your note: {req.appointment_preference}")
        return lines
    if req.preferred_contact == "instagram":
        handle = (req.instagram_handle or "").lstrip("@")
        return [f"We'll reach out on Instagram (@{handle})." if handle else "We'll reach out by Instagram DM."]
    return ["We'll follow up by email."]


def confirmation_email(req, reschedule_link: str = None):
    site = _site()
    subject = f"{site} — We received your request ({req.id[:8]})"
    lines = [
        f"Hi {req.name},",
        "",
        "We've received your request and will get back to you with next steps.",
        "",
        f"Request reference: {req.id[:8]}…",
        f"Submitted: {req.created_at.strftime('%b %d, %Y')}",
    ]
    lines += _follow_up_lines(req)
    if reschedule_link:
        lines += ["", f"Need a different time? Change your appointment here: {reschedule_link}"]
    lines += ["", "If you have any urgent follow-up, you can reply to this email.", "", f"— {site}"]
    return subject, "\n".join(lines)


def appointment_changed_email(req):
    site = _site()
    subject = f"{site} — Your appointment has been changed"
    body = "\n".join([
        f"Hi {req.name},",
        "",
        "Your appointment has been moved to:",
        _appointment_line(req.appointment_date, req.appointment_time_slot),
        "",
        "We'll send a new Zoom link for this time before your appointment.",
        "",
        f"— {site}",
    ])
    return subject, body


def meeting_link_email(req, zoom_link: str, reschedule_link: str = None, meeting_id=None, passcode=None):
    site = _site()
    subject = f"{site} — Your Zoom link"
    lines = [
        f"Hi {req.name},",
        "",
        f"Your appointment: {_appointment_line(req.appointment_date, req.appointment_time_slot)}",
        "",
        f"Join Zoom: {zoom_link}",
    ]
    if meeting_id:
        lines.append(f"Meeting ID: {meeting_id}")
    if passcode:
        lines.append(f"Passcode: {passcode}")
    if reschedule_link:
        lines += ["", f"Need a different time? {reschedule_link}"]
    lines += ["", f"— {site}"]
    return subject, "\n".join(lines)
