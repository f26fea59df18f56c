"""
Error taxonomy for the request/appointment flows.

Routes never build error responses for these by hand: app.py registers a
single handler for ServiceError that turns any of them into
``{"error": message}`` with the matching status code.
"""


class ServiceError(Exception):
    status_code = 500
    default_message = "Something went wrong."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Invalid request."


class AuthError(ServiceError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Request not found."


class ConflictError(ServiceError):
    status_code = 409
    default_message = "This date and time slot is no longer available. Please choose another date or time."


class RateLimitError(ServiceError):
    status_code = 429

    def __init__(self, retry_after: int):
        self.retry_after = max(int(retry_after), 1)
        minutes = -(-self.retry_after // 60)
        super().__init__(f"Too many requests. Please try again in {minutes} minute(s).")


class UpstreamError(ServiceError):
    status_code = 500
    default_message = "External service request failed."


class ConfigError(ServiceError):
    status_code = 500

    def __init__(self, service: str, missing):
        self.missing = list(missing)
        super().__init__(
            f"{service} credentials not configured. Missing in env: {', '.join(self.missing)}."
        )


class PersistenceError(ServiceError):
    status_code = 500
    default_message = "Failed to save request."
