import uuid
from datetime import datetime
from models.db import db

REQUEST_STATUSES = ("new", "in_progress", "resolved", "closed")
# only these hold a slot
ACTIVE_STATUSES = ("new", "in_progress")
CONTACT_MODES = ("zoom", "email", "instagram")


def _new_id() -> str:
    return str(uuid.uuid4())


class HelpRequest(db.Model):
    __tablename__ = "requests"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(320), nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    language = db.Column(db.String(50), nullable=False)
    category = db.Column(db.String(100), nullable=False)
    message = db.Column(db.Text, nullable=False)

    status = db.Column(db.String(20), nullable=False, default="new", index=True)
    # status values: new, in_progress, resolved, closed
    internal_notes = db.Column(db.Text, nullable=True)

    preferred_contact = db.Column(db.String(20), nullable=False, default="zoom")
    wants_appointment = db.Column(db.Boolean, nullable=False, default=False)
    appointment_preference = db.Column(db.String(500), nullable=True)
    appointment_date = db.Column(db.Date, nullable=True, index=True)
    appointment_time_slot = db.Column(db.String(20), nullable=True)
    instagram_handle = db.Column(db.String(100), nullable=True)

    zoom_link = db.Column(db.String(2000), nullable=True)
    zoom_meeting_id = db.Column(db.String(64), nullable=True)

    reschedule_token = db.Column(db.String(64), nullable=True, unique=True, index=True)

    __table_args__ = (
        # One active request per (date, slot); resolved/closed rows free the slot
        db.Index(
            "uq_requests_active_slot",
            "appointment_date",
            "appointment_time_slot",
            unique=True,
            postgresql_where=db.text("wants_appointment AND status IN ('new', 'in_progress')"),
            sqlite_where=db.text("wants_appointment = 1 AND status IN ('new', 'in_progress')"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def has_appointment(self) -> bool:
        return bool(self.wants_appointment and self.appointment_date and self.appointment_time_slot)

    def to_dict(self):
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "language": self.language,
            "category": self.category,
            "message": self.message,
            "status": self.status,
            "internal_notes": self.internal_notes,
            "preferred_contact": self.preferred_contact,
            "wants_appointment": self.wants_appointment,
            "appointment_preference": self.appointment_preference,
            "appointment_date": self.appointment_date.isoformat() if self.appointment_date else None,
            "appointment_time_slot": self.appointment_time_slot,
            "instagram_handle": self.instagram_handle,
            "zoom_link": self.zoom_link,
            "zoom_meeting_id": self.zoom_meeting_id,
            "reschedule_token": self.reschedule_token,
        }
