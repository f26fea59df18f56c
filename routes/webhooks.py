import logging

from flask import Blueprint, request, jsonify, current_app

from scheduling.lifecycle import cancel_deleted_meeting
from security.admin_auth import constant_time_equals, webhook_secret_from_request

logger = logging.getLogger(__name__)

webhook_bp = Blueprint("webhook", __name__, url_prefix="/api/webhooks")


@webhook_bp.post("/request-deleted")
def request_deleted():
    """
    Database webhook for rows deleted from ``requests`` outside the app (SQL
    console, dashboard). Cancels the Zoom meeting the row pointed to.
    """
    endpoint_secret = current_app.config.get("WEBHOOK_SECRET")
    if not endpoint_secret:
        return jsonify(error="Webhook secret not configured"), 500

    if not constant_time_equals(endpoint_secret, webhook_secret_from_request()):
        return jsonify(error="Unauthorized"), 401

    event = request.get_json(silent=True)
    if not isinstance(event, dict):
        return jsonify(error="Invalid JSON"), 400

    if (
        event.get("type") != "DELETE"
        or event.get("table") != "requests"
        or event.get("schema") not in (None, "public")
    ):
        return jsonify(ok=True, message="Ignored"), 200

    old_record = event.get("old_record") or {}
    meeting_id = old_record.get("zoom_meeting_id") if isinstance(old_record, dict) else None
    if meeting_id is not None:
        meeting_id = str(meeting_id).strip()
    if not meeting_id:
        return jsonify(ok=True, message="No Zoom meeting to cancel"), 200

    ok, error = cancel_deleted_meeting(meeting_id)
    if not ok:
        logger.error("Zoom cancel failed for meeting %s: %s", meeting_id, error)
        return jsonify(ok=False, error="Zoom meeting could not be cancelled"), 500

    return jsonify(ok=True, message="Zoom meeting cancelled"), 200
