import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from starchat.api.common import APIResponse
from starchat.api.routes import conversations, superstars
from starchat.auth_config import auth_backend, fastapi_users
from starchat.core.config import settings
from starchat.db import check_database_health
from starchat.schemas.user import UserCreate, UserRead, UserUpdate
from starchat.services.migration_service import run_migrations

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting application...")
    try:
        await run_migrations()

        await check_database_health()
        logger.info("Database health check passed - application ready")
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        logger.error("Application startup aborted due to database issues")
        raise

    yield

    logger.info("Application shutting down...")


app = FastAPI(title="starchat", lifespan=lifespan)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Renders every HTTP error as ``{"message": ..., "errors"?: {...}}``."""
    return APIResponse.from_http_detail(
        exc.detail, status_code=exc.status_code, headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flattens request validation failures into a field-keyed error map."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        # Drop the location prefix ("body", "query", "path") from the field name
        loc = [str(part) for part in error.get("loc", ())[1:]] or ["request"]
        errors.setdefault(".".join(loc), []).append(error.get("msg", "Invalid value."))
    logger.info(f"Request validation failed for {request.url.path}: {errors}")
    return APIResponse.error(
        "The given data was invalid.",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        errors=jsonable_encoder(errors),
    )


app.include_router(
    fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"]
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["auth"],
)
app.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    prefix="/users",
    tags=["users"],
)
app.include_router(conversations.start_router.api_router)
app.include_router(conversations.user_chat_router)
app.include_router(conversations.superstar_chat_router)
app.include_router(superstars.router.api_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
