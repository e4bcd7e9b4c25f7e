"""Failures raised by the service layer.

Each carries the HTTP status the API answers with, the error handler
middleware turns them into the ``{success: false, message}`` envelope.
"""


class ServiceError(Exception):
    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message=None, details=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details


class InvalidRequestError(ServiceError):
    """A required field is missing or malformed."""
    status_code = 400
    default_message = "Invalid request."


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Resource not found."


class ConflictError(ServiceError):
    """The write would break a uniqueness rule (slot already booked, duplicate table number)."""
    status_code = 409
    default_message = "Resource conflict."


class InvalidTransitionError(ConflictError):
    default_message = "Status transition not allowed."

    def __init__(self, current, requested):
        super().__init__(
            f"Cannot move reservation from '{current}' to '{requested}'.",
            details={"current": current, "requested": requested},
        )
        self.current = current
        self.requested = requested


class StoreError(ServiceError):
    """The underlying database operation failed."""
    status_code = 500
    default_message = "A storage error occurred."
