from typing import Optional


class AppError(Exception):
    """Base class for errors the API turns into JSON responses."""

    code = "APP_ERROR"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code


class ValidationError(AppError):
    """Bad or missing input; the caller can fix it and retry."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidTransitionError(ValidationError):
    code = "INVALID_TRANSITION"

    def __init__(self, current: str, requested: str):
        super().__init__(f"Invalid status change from {current} -> {requested}", field="status")
        self.current = current
        self.requested = requested


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ForbiddenError(AppError):
    code = "FORBIDDEN"
    status_code = 403


class ConflictError(AppError):
    code = "CONFLICT"
    status_code = 409


class DatabaseError(AppError):
    """The store rejected an operation."""

    code = "DATABASE_ERROR"
    status_code = 500

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.original_error = original_error


class PayoutConflictError(DatabaseError):
    """
    Another writer already recorded a payout for one of the batch's seller
    orders. Nothing from the batch was written; re-fetch pending payouts.
    """

    code = "PAYOUT_CONFLICT"
    status_code = 409


class RateLimitError(AppError):
    code = "RATE_LIMITED"
    status_code = 429
