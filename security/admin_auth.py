import hmac
from functools import wraps

from flask import current_app, request

from scheduling.errors import AuthError

ADMIN_HEADER = "x-admin-secret"


def constant_time_equals(expected: str, given: str) -> bool:
    if not expected or not given:
        return False
    return hmac.compare_digest(expected.encode(), given.encode())


def is_admin_request() -> bool:
    return constant_time_equals(
        current_app.config.get("ADMIN_SECRET") or "",
        request.headers.get(ADMIN_HEADER) or "",
    )


def require_admin(fn):
    """
    Usage: @require_admin
    There is one operator, so the shared secret is the whole identity.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not is_admin_request():
            raise AuthError()
        return fn(*args, **kwargs)
    return wrapper


def webhook_secret_from_request() -> str:
    bearer = request.headers.get("Authorization", "")
    if bearer.lower().startswith("bearer "):
        bearer = bearer[7:].strip()
    else:
        bearer = ""
    return (
        request.headers.get("x-webhook-secret")
        or bearer
        or request.args.get("secret")
        or ""
    )
