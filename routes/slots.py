from flask import Blueprint, request, jsonify

from scheduling.availability import taken_slots_for_token
from utils.validation import parse_date

slots_bp = Blueprint("slots", __name__, url_prefix="/api")


@slots_bp.get("/appointment-slots")
def appointment_slots():
    """
    Slots already taken on ?date=YYYY-MM-DD by active requests.
    With ?token=, the request holding that reschedule token is left out so
    its current slot stays selectable.
    """
    day = parse_date((request.args.get("date") or "").strip()[:10])
    token = (request.args.get("token") or "").strip() or None

    if day is None:
        return jsonify(error="Valid date (YYYY-MM-DD) is required."), 400

    return jsonify(taken=taken_slots_for_token(day, token)), 200
