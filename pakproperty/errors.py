"""Error taxonomy shared by the API server and the client store.

Server-side errors are rendered as ``{"success": false, "message": ...}``
by the handlers registered in :mod:`pakproperty.main`.
"""

class PropertyError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list | None = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

class ValidationError(PropertyError):
    status_code = 400
    default_message = "Validation failed"

class ConflictError(ValidationError):
    pass

class AuthenticationError(PropertyError):
    status_code = 401
    default_message = "Not authorized to access this route"

class AuthorizationError(PropertyError):
    status_code = 403
    default_message = "You are not allowed to perform this action"

class NotFoundError(PropertyError):
    status_code = 404
    default_message = "Resource not found"

class TransientNetworkError(PropertyError):
    """Raised by the client when a request never produced a response."""
    status_code = 503
    default_message = "Network error, please try again"

class ApiError(PropertyError):
    """A non-2xx response seen by the client."""

    def __init__(self, status_code: int, message: str | None = None, errors: list | None = None):
        self.status_code = status_code
        self.server_message = message
        super().__init__(message, errors)
