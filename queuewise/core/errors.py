"""Error taxonomy shared by services and routers.

Services raise these; the handlers registered in ``queuewise.main`` turn them
into ``{"ok": false, "error": ...}`` JSON bodies with the matching status.
"""


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request data"


class InvalidRelationship(AppError):
    status_code = 400
    default_message = "Invalid relationship"


class Inactive(AppError):
    status_code = 400
    default_message = "Resource is not active"


class InvalidState(AppError):
    status_code = 400
    default_message = "Operation not allowed in current state"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Conflict"


class RateLimited(AppError):
    status_code = 429
    default_message = "Too many requests. Please try again later."

    def __init__(self, retry_after: int, reset_at: int, message: str | None = None):
        super().__init__(message)
        self.retry_after = retry_after
        self.reset_at = reset_at


def sanitize_error_message(error: BaseException, debug: bool = False) -> str:
    """Message safe to hand back to an unauthenticated caller."""
    if debug:
        return str(error)
    if isinstance(error, AppError):
        return error.message

    message = str(error).lower()
    if "not found" in message:
        return "Resource not found"
    if "unauthorized" in message or "permission" in message:
        return "Unauthorized access"
    if "invalid" in message:
        return "Invalid request"
    if "timeout" in message or "timed out" in message:
        return "Request timed out"
    return "An unexpected error occurred. Please try again."
