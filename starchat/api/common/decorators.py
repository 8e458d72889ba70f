import logging
from functools import wraps

from fastapi import HTTPException, status

from starchat.api.common.exceptions import handle_service_error
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


def log_route_call(func):
    """
    Logs entry into and exit from a route function.
    Arguments are logged by name only; request bodies and uploads can be large.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        route_logger = logging.getLogger(func.__module__)
        route_logger.info(
            f"Entering route: {func.__name__} (params: {sorted(kwargs.keys())})"
        )
        try:
            result = await func(*args, **kwargs)
            route_logger.info(f"Successfully exited route: {func.__name__}")
            return result
        except HTTPException as e:
            log = route_logger.warning if e.status_code < 500 else route_logger.error
            log(f"Route {func.__name__} failed with HTTP {e.status_code}")
            raise
        except Exception as e:
            route_logger.error(
                f"Error during route: {func.__name__}. Exception: {type(e).__name__} - {e}"
            )
            raise

    return wrapper


def handle_route_errors(func):
    """
    Standardizes error handling in API routes.
    Expected service errors are mapped through ``handle_service_error``;
    HTTPExceptions pass through; anything else becomes a 500.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (
            ConflictError,
            ConversationNotFoundError,
            MessageNotFoundError,
            NotAuthorizedError,
            SuperstarNotFoundError,
            ValidationError,
        ) as e:
            logger.warning(f"Service error in {func.__name__} route: {e}")
            handle_service_error(e)
        except (DatabaseError, StorageError) as e:
            logger.error(f"Backend error in {func.__name__} route: {e}", exc_info=True)
            handle_service_error(e)
        except ServiceError as e:
            logger.error(
                f"Generic service error in {func.__name__} route: {e}", exc_info=True
            )
            handle_service_error(e)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(
                f"Unexpected error in {func.__name__} route: {e}", exc_info=True
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An unexpected server error occurred.",
            )

    return wrapper
