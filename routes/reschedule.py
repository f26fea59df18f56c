from flask import Blueprint, request, jsonify

from scheduling.lifecycle import appointment_for_token, reschedule
from utils.validation import LIMITS

reschedule_bp = Blueprint("reschedule", __name__, url_prefix="/api")


def _text(data, key, max_len):
    value = data.get(key)
    return value.strip()[:max_len] if isinstance(value, str) else ""


# ---------- REQUESTER: view current appointment via reschedule link ----------
@reschedule_bp.get("/reschedule")
def current_appointment():
    token = (request.args.get("token") or "").strip()
    if not token:
        return jsonify(error="Invalid or missing link."), 400

    req = appointment_for_token(token)
    return jsonify(
        name=req.name,
        appointment_date=req.appointment_date.isoformat(),
        appointment_time_slot=req.appointment_time_slot,
    ), 200


# ---------- REQUESTER: move appointment (token is the only credential) ----------
@reschedule_bp.post("/reschedule")
def change_appointment():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify(error="Invalid request."), 400

    token = _text(data, "token", 64)
    if not token:
        return jsonify(error="Invalid or missing link."), 400

    _, changed = reschedule(
        token,
        _text(data, "appointment_date", 10),
        _text(data, "appointment_time_slot", LIMITS["appointment_time_slot"]),
    )
    if not changed:
        return jsonify(ok=True, changed=False, message="Your appointment is already set for this date and time."), 200
    return jsonify(
        ok=True,
        changed=True,
        message="Your appointment has been changed. Check your email for confirmation.",
    ), 200
