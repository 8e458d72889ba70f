import logging

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for service layer errors."""

    def __init__(self, message="An internal service error occurred.", status_code=500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ConversationNotFoundError(ServiceError):
    def __init__(self, message="Conversation not found."):
        super().__init__(message, status_code=404)


class MessageNotFoundError(ServiceError):
    def __init__(self, message="Message not found."):
        super().__init__(message, status_code=404)


class SuperstarNotFoundError(ServiceError):
    def __init__(self, message="Superstar not found."):
        super().__init__(message, status_code=404)


class NotAuthorizedError(ServiceError):
    def __init__(self, message="User not authorized for this action."):
        super().__init__(message, status_code=403)


class ValidationError(ServiceError):
    """Input that violates an enumerated or required-field constraint.

    ``errors`` maps each offending field to its list of messages.
    """

    def __init__(
        self,
        message="Validation failed.",
        errors: dict[str, list[str]] | None = None,
    ):
        self.errors = errors or {}
        super().__init__(message, status_code=422)


class ConflictError(ServiceError):
    """For conflicts like creating a second superstar profile."""

    def __init__(self, message="Operation conflicts with existing state."):
        super().__init__(message, status_code=409)


class StorageError(ServiceError):
    """The blob store failed to persist or remove an attachment."""

    def __init__(self, message="Attachment storage failed."):
        super().__init__(message, status_code=500)


class DatabaseError(ServiceError):
    """For general database errors during service operations."""

    def __init__(self, message="A database error occurred."):
        super().__init__(message, status_code=500)
