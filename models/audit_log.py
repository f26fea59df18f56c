import json
from datetime import datetime

from models.db import db


class AuditLog(db.Model):
    """Append-only trail of submits, reschedules and admin actions."""
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    action = db.Column(db.String(80), nullable=False, index=True)  # REQUEST_SUBMIT, APPOINTMENT_RESCHEDULE, ...
    entity = db.Column(db.String(40), nullable=True)  # request, slot, zoom_meeting
    entity_id = db.Column(db.String(80), nullable=True, index=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    details_json = db.Column(db.Text, nullable=True)

    @property
    def details(self) -> dict:
        return json.loads(self.details_json) if self.details_json else {}
