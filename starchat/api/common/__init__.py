from .base_router import BaseRouter
from .decorators import handle_route_errors, log_route_call
from .exceptions import (
    APIException,
    ConflictAPIError,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
    UnprocessableEntityError,
    handle_service_error,
)
from .responses import APIResponse

__all__ = [
    "APIResponse",
    "log_route_call",
    "handle_route_errors",
    "APIException",
    "NotFoundError",
    "ForbiddenError",
    "ConflictAPIError",
    "UnprocessableEntityError",
    "InternalServerError",
    "handle_service_error",
    "BaseRouter",
]
