from .health import health_bp
from .submit import submit_bp
from .slots import slots_bp
from .reschedule import reschedule_bp
from .admin import admin_bp
from .webhooks import webhook_bp
