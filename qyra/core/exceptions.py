"""Domain errors raised by the queue and settings services.

Each error carries the HTTP status code it maps to and a message that is
safe to show to the caller.  The exception handlers in ``qyra.main`` render
them into the standard ``{"success": false, "message": ...}`` envelope.
"""


class QueueError(Exception):
    """Base class for all service-level failures."""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(QueueError):
    """Bad or missing input."""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(QueueError):
    """Unknown queue entry id."""

    status_code = 404
    default_message = "Queue item not found"


class AlreadyCompletedError(QueueError):
    """The entry has already been completed."""

    status_code = 400
    default_message = "This token has already been completed"


class InvalidTransitionError(QueueError):
    """The requested status change is not allowed from the current status."""

    status_code = 400
    default_message = "Invalid status transition"


class DuplicateTokenError(QueueError):
    """The store rejected a token number that is already taken."""

    status_code = 400
    default_message = "Token number conflict. Please try again."


class UnexpectedError(QueueError):
    """Storage or other internal failure."""

    status_code = 500
