from .db import db
from .help_request import HelpRequest, ACTIVE_STATUSES, REQUEST_STATUSES, CONTACT_MODES
from .audit_log import AuditLog
