import logging

from fastapi import Depends, status

from starchat.api.common import BaseRouter
from starchat.auth_config import current_active_user
from starchat.models import User
from starchat.schemas.superstar import (
    SuperstarCreateRequest,
    SuperstarEnvelope,
    SuperstarResponse,
)
from starchat.services.dependencies import get_superstar_service
from starchat.services.superstar_service import SuperstarService

logger = logging.getLogger(__name__)
router = BaseRouter(tags=["superstars"])


@router.get("/superstars/{superstar_id}", response_model=SuperstarEnvelope)
async def get_superstar(
    superstar_id: int,
    user: User = Depends(current_active_user),
    superstar_service: SuperstarService = Depends(get_superstar_service),
):
    """Public profile card of a superstar."""
    superstar = await superstar_service.get_superstar(superstar_id)
    return SuperstarEnvelope(superstar=SuperstarResponse.model_validate(superstar))


@router.post(
    "/superstar/profile",
    response_model=SuperstarEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def create_superstar_profile(
    payload: SuperstarCreateRequest,
    user: User = Depends(current_active_user),
    superstar_service: SuperstarService = Depends(get_superstar_service),
):
    """Registers the current account as a superstar."""
    superstar = await superstar_service.create_profile(user, payload)
    logger.info(f"User {user.id} became superstar {superstar.id}")
    return SuperstarEnvelope(superstar=SuperstarResponse.model_validate(superstar))
