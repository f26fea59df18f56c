import json
import logging

from flask import request, has_request_context
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    return (
        forwarded.split(",")[0].strip()
        or request.headers.get("X-Real-IP")
        or request.remote_addr
        or "unknown"
    )


def log_event(action: str, entity=None, entity_id=None, metadata=None):
    if not has_request_context():
        return
    user_agent = request.headers.get("User-Agent", "")

    row = AuditLog(
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=client_ip()[:64],
        user_agent=user_agent[:255] if user_agent else None,
        details_json=json.dumps(metadata, default=str) if metadata else None,
    )
    db.session.add(row)
    try:
        db.session.commit()
    except SQLAlchemyError:
        # The audited action already committed
        db.session.rollback()
        logger.exception("Audit log write failed for %s", action)
