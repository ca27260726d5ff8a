"""
Domain errors raised by the quality and quiz logic.
Handlers translate them into HTTP responses via `status_code`.
"""


class LifecycleError(Exception):
    """Base class for expected, user-facing errors."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LifecycleError):
    """Input failed validation (missing comments, missing scores, bad values)."""
    status_code = 400


class PermissionDeniedError(LifecycleError):
    """The acting user may not perform this operation."""
    status_code = 403


class NotFoundError(LifecycleError):
    """A referenced record does not exist."""
    status_code = 404


class ConflictError(LifecycleError):
    """The record changed underneath the request."""
    status_code = 409


class InvalidTransitionError(ConflictError):
    """The requested action is not allowed from the report's current status."""

    def __init__(self, current_status: str, action: str):
        super().__init__(f"Cannot {action} a report in status '{current_status}'")
        self.current_status = current_status
        self.action = action
