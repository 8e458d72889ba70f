import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from starchat.models import Superstar, User
from starchat.repositories.superstar_repository import SuperstarRepository
from starchat.schemas.identity import Identity
from starchat.schemas.superstar import SuperstarCreateRequest

from .exceptions import (
    ConflictError,
    DatabaseError,
    NotAuthorizedError,
    SuperstarNotFoundError,
)

logger = logging.getLogger(__name__)


class SuperstarService:
    def __init__(self, superstar_repository: SuperstarRepository):
        self.superstar_repo = superstar_repository
        self.session = superstar_repository.session

    async def get_superstar(self, superstar_id: int) -> Superstar:
        superstar = await self.superstar_repo.get_superstar_by_id(superstar_id)
        if not superstar:
            raise SuperstarNotFoundError(
                f"Superstar with ID '{superstar_id}' not found."
            )
        return superstar

    async def create_profile(
        self, user: User, request: SuperstarCreateRequest
    ) -> Superstar:
        """Turns an account into a superstar. An account holds at most one profile."""
        existing = await self.superstar_repo.get_superstar_by_user_id(user.id)
        if existing:
            raise ConflictError("This account already has a superstar profile.")

        try:
            superstar = await self.superstar_repo.create_superstar(
                user_id=user.id,
                display_name=request.display_name,
                bio=request.bio,
                profile_image=request.profile_image,
            )
            superstar_id = superstar.id
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("This account already has a superstar profile.")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error creating superstar profile: {e}", exc_info=True)
            raise DatabaseError("Failed to create superstar profile due to a database error.")

        logger.info(f"Superstar profile {superstar_id} created for user {user.id}")
        return await self.superstar_repo.get_superstar_by_id(superstar_id)

    async def superstar_identity_for(self, user: User) -> Identity:
        """Resolves the superstar identity an account acts as on the superstar side."""
        superstar = await self.superstar_repo.get_superstar_by_user_id(user.id)
        if not superstar:
            raise NotAuthorizedError("This account does not have a superstar profile.")
        return Identity.as_superstar(superstar.id)
