"""
Fire-and-forget dispatch for notifications.

Tasks run on a small shared thread pool inside their own app context. A task
that raises is logged and dropped; callers never wait on the result.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from flask import current_app

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="notify")


def _run(app, fn, args, kwargs):
    with app.app_context():
        try:
            fn(*args, **kwargs)
        except Exception:
            logger.exception("Background task %s failed", getattr(fn, "__name__", fn))


def run_detached(fn, *args, **kwargs):
    app = current_app._get_current_object()
    if not app.config.get("BACKGROUND_NOTIFICATIONS", True):
        _run(app, fn, args, kwargs)
        return None
    return _executor.submit(_run, app, fn, args, kwargs)
