from fastapi import Depends

from starchat.api.common.exceptions import ForbiddenError
from starchat.auth_config import current_active_user
from starchat.models import User
from starchat.schemas.identity import Identity
from starchat.services.dependencies import get_superstar_service
from starchat.services.exceptions import NotAuthorizedError
from starchat.services.superstar_service import SuperstarService


async def get_user_identity(user: User = Depends(current_active_user)) -> Identity:
    """Identity for the user side of a conversation."""
    return Identity.as_user(user.id)


async def get_superstar_identity(
    user: User = Depends(current_active_user),
    superstar_service: SuperstarService = Depends(get_superstar_service),
) -> Identity:
    """Identity for the superstar side; the account must own a superstar profile."""
    try:
        return await superstar_service.superstar_identity_for(user)
    except NotAuthorizedError as e:
        raise ForbiddenError(detail=e.message)
