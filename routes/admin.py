from flask import Blueprint, jsonify, request

from scheduling import lifecycle
from security.admin_auth import require_admin

admin_bp = Blueprint("admin", __name__, url_prefix="/api/requests")


# ---------- ADMIN: list all requests ----------
@admin_bp.get("")
@require_admin
def list_requests():
    status = (request.args.get("status") or "").strip() or None
    rows = lifecycle.list_requests(status=status)
    return jsonify(requests=[r.to_dict() for r in rows]), 200


@admin_bp.get("/<request_id>")
@require_admin
def get_request(request_id: str):
    return jsonify(lifecycle.get_request(request_id).to_dict()), 200


# ---------- ADMIN: status / internal notes ----------
@admin_bp.patch("/<request_id>")
@require_admin
def update_request(request_id: str):
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    req = lifecycle.update_request(request_id, data)
    return jsonify(req.to_dict()), 200


# ---------- ADMIN: delete (cancels the Zoom meeting first) ----------
@admin_bp.delete("/<request_id>")
@require_admin
def delete_request(request_id: str):
    result = lifecycle.delete_request(request_id)
    return jsonify(ok=True, **result), 200


# ---------- ADMIN: create Zoom meeting for the booked slot ----------
@admin_bp.post("/<request_id>/create-zoom-meeting")
@require_admin
def create_zoom_meeting(request_id: str):
    req = lifecycle.create_meeting(request_id, base_url=request.host_url)
    return jsonify(ok=True, zoom_link=req.zoom_link), 200
