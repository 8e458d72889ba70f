import logging
from typing import Any

from fastapi import HTTPException, status

from starchat.services.exceptions import (
    ConflictError,
    ConversationNotFoundError,
    DatabaseError,
    MessageNotFoundError,
    NotAuthorizedError,
    ServiceError,
    StorageError,
    SuperstarNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class APIException(HTTPException):
    """Base class for API specific exceptions."""

    def __init__(
        self, status_code: int, detail: Any = None, headers: dict | None = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class NotFoundError(APIException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ForbiddenError(APIException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ConflictAPIError(APIException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class UnprocessableEntityError(APIException):
    """422 whose detail carries the field-keyed error map."""

    def __init__(
        self,
        message: str = "Validation failed.",
        errors: dict[str, list[str]] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": message, "errors": errors or {}},
        )


class InternalServerError(APIException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
        )


def handle_service_error(e: ServiceError):
    """
    Maps ServiceError subclasses to the matching APIException and raises it.
    Called by the @handle_route_errors decorator.
    """
    logger.warning(
        f"Handling service error: {e.__class__.__name__} - {getattr(e, 'message', str(e))}"
    )

    if isinstance(
        e, (ConversationNotFoundError, MessageNotFoundError, SuperstarNotFoundError)
    ):
        raise NotFoundError(detail=e.message)
    elif isinstance(e, NotAuthorizedError):
        raise ForbiddenError(detail=e.message)
    elif isinstance(e, ValidationError):
        raise UnprocessableEntityError(message=e.message, errors=e.errors)
    elif isinstance(e, ConflictError):
        raise ConflictAPIError(detail=e.message)
    elif isinstance(e, StorageError):
        raise InternalServerError(detail="The attachment could not be processed.")
    elif isinstance(e, DatabaseError):
        raise InternalServerError(detail="A database error occurred.")
    else:
        status_code = getattr(e, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
        raise APIException(
            status_code=status_code,
            detail=getattr(e, "message", "A service error occurred."),
        )
