from typing import Any, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def paginate(
        self, stmt: Select, page: int, per_page: int, options: Sequence[Any] = ()
    ) -> tuple[Sequence[Any], int]:
        """Runs an ordered select for one page and returns (rows, total).

        Loader ``options`` only apply to the page query, not the count.
        """
        count_stmt = select(func.count()).select_from(
            stmt.order_by(None).subquery()
        )
        total = (await self.session.execute(count_stmt)).scalar_one()

        page_stmt = stmt.options(*options).offset((page - 1) * per_page).limit(per_page)
        result = await self.session.execute(page_stmt)
        return result.scalars().all(), total
