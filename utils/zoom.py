"""
Zoom API helpers (Server-to-Server OAuth).

Each public call fetches its own access token; nothing is cached between calls.
"""
import logging
from urllib.parse import quote

import requests
from flask import current_app

from scheduling.errors import ConfigError, UpstreamError

logger = logging.getLogger(__name__)

CREDENTIAL_KEYS = ("ZOOM_ACCOUNT_ID", "ZOOM_CLIENT_ID", "ZOOM_CLIENT_SECRET")


def _timeout():
    return current_app.config.get("HTTP_TIMEOUT_SECONDS", 10)


def get_access_token() -> str:
    cfg = current_app.config
    missing = [key for key in CREDENTIAL_KEYS if not (cfg.get(key) or "").strip()]
    if missing:
        raise ConfigError("Zoom", missing)

    try:
        res = requests.post(
            cfg.get("ZOOM_OAUTH_URL", "https://zoom.us/oauth/token"),
            data={
                "grant_type": "account_credentials",
                "account_id": cfg["ZOOM_ACCOUNT_ID"],
                "client_id": cfg["ZOOM_CLIENT_ID"],
                "client_secret": cfg["ZOOM_CLIENT_SECRET"],
            },
            timeout=_timeout(),
        )
    except requests.RequestException as exc:
        logger.error("Zoom token request failed: %s", exc)
        raise UpstreamError("Failed to get Zoom access token.")

    if not res.ok:
        logger.error("Zoom token error: %s %s", res.status_code, res.text)
        raise UpstreamError("Failed to get Zoom access token.")

    token = _json(res).get("access_token")
    if not token:
        raise UpstreamError("No access_token in Zoom response.")
    return token


def _json(res) -> dict:
    try:
        return res.json() or {}
    except ValueError:
        return {}


def _one_click_url(join_url: str, pwd: str) -> str:
    # Users should not be prompted for a passcode after clicking the link
    if not pwd or "pwd=" in join_url:
        return join_url
    separator = "&" if "?" in join_url else "?"
    return f"{join_url}{separator}pwd={quote(pwd, safe='')}"


def create_meeting(topic: str, start_time: str, duration_minutes: int, timezone: str) -> dict:
    """
    Schedule a meeting. ``start_time`` is local wall-clock time
    (``2025-02-20T09:00:00``) interpreted in ``timezone``.

    Returns ``{"join_url", "meeting_id", "passcode"}``; ``join_url`` always
    carries the passcode so it can be used directly.
    """
    access_token = get_access_token()
    cfg = current_app.config
    url = f"{cfg['ZOOM_API_BASE']}/users/{quote(cfg.get('ZOOM_USER_ID') or 'me', safe='')}/meetings"

    try:
        res = requests.post(
            url,
            headers={"Authorization": f"Bearer {access_token}"},
            json={
                "topic": topic,
                "type": 2,
                "start_time": start_time,
                "duration": duration_minutes,
                "timezone": timezone,
                "settings": {
                    "join_before_host": True,
                    "waiting_room": False,
                },
            },
            timeout=_timeout(),
        )
    except requests.RequestException as exc:
        logger.error("Zoom create meeting request failed: %s", exc)
        raise UpstreamError("Zoom could not create the meeting.")

    if not res.ok:
        logger.error("Zoom create meeting error: %s %s", res.status_code, res.text)
        raise UpstreamError("Zoom could not create the meeting.")

    data = _json(res)
    join_url = data.get("join_url")
    if not join_url:
        raise UpstreamError("Zoom did not return a join URL.")

    meeting_id = data.get("id")
    passcode = data.get("password") or None
    pwd_for_url = data.get("encrypted_password") or data.get("password") or ""

    return {
        "join_url": _one_click_url(join_url, pwd_for_url),
        "meeting_id": str(meeting_id) if meeting_id is not None else None,
        "passcode": passcode,
    }


def delete_meeting(meeting_id) -> tuple:
    """
    Cancel a meeting. Returns (ok, error).

    A 404 from Zoom means the meeting is already gone and counts as success.
    Failures are logged and returned, never raised.
    """
    meeting_id = str(meeting_id or "").strip()
    if not meeting_id:
        return False, "Missing meeting ID"

    try:
        access_token = get_access_token()
        res = requests.delete(
            f"{current_app.config['ZOOM_API_BASE']}/meetings/{quote(meeting_id, safe='')}",
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=_timeout(),
        )
    except (ConfigError, UpstreamError) as exc:
        logger.error("Zoom delete meeting %s failed: %s", meeting_id, exc.message)
        return False, exc.message
    except requests.RequestException as exc:
        logger.error("Zoom delete meeting %s failed: %s", meeting_id, exc)
        return False, str(exc)

    if res.status_code in (204, 404):
        return True, None

    logger.error("Zoom delete meeting error: %s %s", res.status_code, res.text)
    return False, f"Zoom returned {res.status_code}"
