from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from starchat.models import Superstar

from .base import BaseRepository


class SuperstarRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_superstar_by_id(self, superstar_id: int) -> Superstar | None:
        """Retrieves a superstar profile with its account loaded."""
        stmt = (
            select(Superstar)
            .filter(Superstar.id == superstar_id)
            .options(selectinload(Superstar.user))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_superstar_by_user_id(self, user_id: int) -> Superstar | None:
        """Retrieves the superstar profile owned by an account, if any."""
        stmt = select(Superstar).filter(Superstar.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_superstar(
        self,
        user_id: int,
        display_name: str,
        bio: str | None = None,
        profile_image: str | None = None,
    ) -> Superstar:
        new_superstar = Superstar(
            user_id=user_id,
            display_name=display_name,
            bio=bio,
            profile_image=profile_image,
        )
        self.session.add(new_superstar)
        await self.session.flush()
        return new_superstar
