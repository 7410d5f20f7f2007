"""Application error types mapped to HTTP status codes."""

class AppError(Exception):
    """Base class for errors that carry a user-facing message."""

    status_code = 500
    default_message = 'Unexpected error'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = 400
    default_message = 'Validation error'

class ForbiddenError(AppError):
    """Caller is not allowed to perform the action."""
    status_code = 403
    default_message = 'Access denied'

class NotFoundError(AppError):
    """Requested resource does not exist."""
    status_code = 404
    default_message = 'Not found'

class ExpiredError(AppError):
    """Resource existed but is no longer valid."""
    status_code = 410
    default_message = 'This QR code has expired'

class InternalError(AppError):
    status_code = 500
    default_message = 'Internal server error'
