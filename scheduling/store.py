"""
Persistence for help requests.

Slot exclusivity is enforced by the ``uq_requests_active_slot`` partial unique
index, not by anything in this module: every write that can claim a slot
commits and lets the database reject the loser, which surfaces here as an
IntegrityError and leaves as a ConflictError.
"""
import logging
from datetime import datetime

from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.help_request import HelpRequest, REQUEST_STATUSES
from scheduling.errors import ConflictError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


def _commit(stmt=None):
    """Commit the session, optionally executing ``stmt`` first. Returns its result."""
    try:
        result = db.session.execute(stmt) if stmt is not None else None
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        # Unique index uq_requests_active_slot triggers here
        logger.info("Slot claim rejected by store: %s", exc.orig)
        raise ConflictError()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Store write failed")
        raise PersistenceError()
    return result


def get(request_id: str, for_update: bool = False) -> HelpRequest:
    q = HelpRequest.query.filter_by(id=request_id)
    if for_update:
        q = q.with_for_update()
    row = q.first()
    if not row:
        raise NotFoundError()
    return row


def find_by_token(token: str, for_update: bool = False) -> HelpRequest:
    if not token:
        raise NotFoundError("Invalid or expired link.")
    q = HelpRequest.query.filter_by(reschedule_token=token)
    if for_update:
        q = q.with_for_update()
    row = q.first()
    if not row:
        raise NotFoundError("Invalid or expired link.")
    return row


def list_all(status: str = None) -> list:
    q = HelpRequest.query
    if status:
        q = q.filter_by(status=status)
    return q.order_by(HelpRequest.created_at.desc()).all()


def insert(req: HelpRequest) -> HelpRequest:
    req.status = req.status or "new"
    db.session.add(req)
    _commit()
    return req


def update_status_and_notes(request_id: str, status: str = None, notes: str = None) -> HelpRequest:
    row = get(request_id)
    if status is not None:
        if status not in REQUEST_STATUSES:
            raise ValueError(f"Unknown status: {status}")
        row.status = status
    if notes is not None:
        row.internal_notes = notes or None
    row.updated_at = datetime.utcnow()
    # Re-activating a resolved request can collide with whoever took its slot
    _commit()
    return row


def update_schedule(request_id: str, new_date, new_slot: str) -> bool:
    """
    Move the appointment unless it already sits at (new_date, new_slot).
    Returns False when nothing was written.

    The "already there" test is part of the UPDATE itself, so two identical
    moves racing each other change the row exactly once, with or without
    row locks.
    """
    stmt = (
        update(HelpRequest)
        .where(HelpRequest.id == request_id)
        .where(or_(
            HelpRequest.appointment_date.is_(None),
            HelpRequest.appointment_time_slot.is_(None),
            ~and_(
                HelpRequest.appointment_date == new_date,
                HelpRequest.appointment_time_slot == new_slot,
            ),
        ))
        .values(
            appointment_date=new_date,
            appointment_time_slot=new_slot,
            # The old meeting was for the old slot
            zoom_link=None,
            zoom_meeting_id=None,
            updated_at=datetime.utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    return _commit(stmt).rowcount > 0


def set_meeting(request_id: str, link: str, meeting_id) -> HelpRequest:
    row = get(request_id)
    row.zoom_link = link
    row.zoom_meeting_id = str(meeting_id) if meeting_id is not None else None
    row.updated_at = datetime.utcnow()
    _commit()
    return row


def set_reschedule_token(request_id: str, token: str) -> HelpRequest:
    row = get(request_id)
    row.reschedule_token = token
    row.updated_at = datetime.utcnow()
    _commit()
    return row


def delete(request_id: str) -> HelpRequest:
    row = get(request_id)
    # Keep the values around after the row is gone
    removed = HelpRequest(**{c.name: getattr(row, c.name) for c in HelpRequest.__table__.columns})
    db.session.delete(row)
    _commit()
    return removed
