"""Discord channel pings for new requests, reschedules and Zoom links."""
import logging
from datetime import datetime

import requests
from flask import current_app

from scheduling.catalog import slot_label

logger = logging.getLogger(__name__)

MAX_FIELD_VALUE = 1024
EMBED_COLOR = 0x378F79
VALID_WEBHOOK_PREFIXES = (
    "https://discord.com/api/webhooks/",
    "https://discordapp.com/api/webhooks/",
)


def truncate(value: str, max_len: int = MAX_FIELD_VALUE) -> str:
    if len(value) <= max_len:
        return value
    return value[: max_len - 3] + "..."


def _field(name, value, inline=False):
    return {"name": name, "value": truncate(str(value)), "inline": inline}


def _webhook_url():
    url = (current_app.config.get("DISCORD_WEBHOOK_URL") or "").strip()
    if not url:
        logger.warning("DISCORD_WEBHOOK_URL not set, skipping webhook")
        return None
    if not url.startswith(VALID_WEBHOOK_PREFIXES):
        logger.warning("DISCORD_WEBHOOK_URL is not a Discord webhook URL, skipping")
        return None
    return url


def _post(content: str, title: str, fields: list) -> bool:
    url = _webhook_url()
    if not url:
        return False

    res = requests.post(
        url,
        json={
            "content": content,
            "embeds": [{
                "title": title,
                "color": EMBED_COLOR,
                "fields": fields,
                "timestamp": datetime.utcnow().isoformat() + "Z",
            }],
        },
        timeout=current_app.config.get("HTTP_TIMEOUT_SECONDS", 10),
    )
    if not res.ok:
        logger.error("Discord webhook failed: %s %s", res.status_code, res.text)
        return False
    return True


def _when(appointment_date, slot) -> str:
    return f"**{appointment_date.strftime('%a, %b %d, %Y')}**, {slot_label(slot)}"


def notify_new_request(req) -> bool:
    fields = [
        _field("Name", req.name, inline=True),
        _field("Email", req.email, inline=True),
        _field("Category", req.category, inline=True),
    ]
    if req.phone:
        fields.append(_field("Phone", req.phone, inline=True))
    fields.append(_field("Description", req.message))
    fields.append(_field("Request ID", req.id[:8] + "…"))

    if req.preferred_contact == "zoom":
        parts = ["Zoom"]
        if req.has_appointment:
            parts.append(_when(req.appointment_date, req.appointment_time_slot))
        if req.appointment_preference:
            parts.append(f"Note: {req.appointment_preference}")
        fields.append(_field("Follow-up", " · ".join(parts)))
    elif req.preferred_contact == "instagram":
        handle = (req.instagram_handle or "").lstrip("@")
        fields.append(_field("Follow-up", f"Instagram (@{handle})" if handle else "Instagram DM"))
    else:
        fields.append(_field("Follow-up", "Email"))

    site = current_app.config.get("SITE_NAME") or "Livable"
    return _post("**New help request**", f"{site} — New request", fields)


def notify_reschedule(req, old_date=None, old_slot=None) -> bool:
    fields = [
        _field("Name", req.name, inline=True),
        _field("Email", req.email, inline=True),
        _field("Request ID", req.id[:8] + "…"),
    ]
    if old_date and old_slot:
        fields.append(_field("From", _when(old_date, old_slot)))
    fields.append(_field("To", _when(req.appointment_date, req.appointment_time_slot)))

    site = current_app.config.get("SITE_NAME") or "Livable"
    return _post("**Appointment rescheduled**", f"{site} — Appointment changed", fields)


def notify_zoom_link(req, zoom_link: str, kind: str = "created") -> bool:
    fields = [
        _field("Name", req.name, inline=True),
        _field("Email", req.email, inline=True),
        _field("Request ID", req.id[:8] + "…"),
        _field("Zoom link", zoom_link),
    ]
    site = current_app.config.get("SITE_NAME") or "Livable"
    return _post(f"**Zoom meeting {kind}**", f"{site} — Zoom link {kind}", fields)
