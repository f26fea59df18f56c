"""
In-memory fixed-window rate limit for the public submit endpoint.

Counters live in this process only: with several workers or instances each
one keeps its own window, so the limit is best-effort.
"""
import math
import threading
import time

from flask import current_app

from scheduling.errors import RateLimitError
from utils.audit import client_ip

_lock = threading.Lock()
# identifier -> [count, reset_at]
_windows = {}


def _prune(now: float):
    for key in [k for k, (_, reset_at) in _windows.items() if reset_at <= now]:
        del _windows[key]


def check_and_increment(identifier: str, window_seconds: int, max_requests: int, now: float = None) -> tuple[bool, int]:
    """
    Returns (allowed, retry_after_seconds).
    Simple fixed window per identifier.
    """
    now = time.time() if now is None else now
    with _lock:
        _prune(now)
        entry = _windows.get(identifier)
        if entry is None:
            _windows[identifier] = [1, now + window_seconds]
            return True, 0

        entry[0] += 1
        if entry[0] > max_requests:
            retry_after = math.ceil(entry[1] - now)
            return False, max(retry_after, 1)
        return True, 0


def enforce_submit_rate():
    allowed, retry_after = check_and_increment(
        client_ip(),
        current_app.config.get("SUBMIT_RATE_WINDOW_SECONDS", 15 * 60),
        current_app.config.get("SUBMIT_RATE_MAX_REQUESTS", 5),
    )
    if not allowed:
        raise RateLimitError(retry_after)


def reset():
    with _lock:
        _windows.clear()
