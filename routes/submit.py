import json

from flask import Blueprint, request, jsonify, current_app

from scheduling.lifecycle import submit_request
from security.rate_limit import enforce_submit_rate
from utils.validation import parse_submission, validate_submission

submit_bp = Blueprint("submit", __name__, url_prefix="/api")


# ---------- PUBLIC: submit a help request (DOUBLE-BOOKING SAFE) ----------
@submit_bp.post("/submit")
def submit():
    if "application/json" not in (request.content_type or ""):
        return jsonify(error="Content-Type must be application/json."), 400

    max_bytes = current_app.config.get("MAX_BODY_BYTES", 50_000)
    if request.content_length is not None and request.content_length > max_bytes:
        return jsonify(error="Request body too large."), 413
    raw = request.get_data(cache=False, as_text=True)
    if len(raw) > max_bytes:
        return jsonify(error="Request body too large."), 413

    try:
        body = json.loads(raw)
    except ValueError:
        body = None
    data = parse_submission(body)
    if data is None:
        return jsonify(error="Invalid request body."), 400

    data = validate_submission(data)
    enforce_submit_rate()

    req = submit_request(data, base_url=request.host_url)
    return jsonify(id=req.id, ok=True), 201
