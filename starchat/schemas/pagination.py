import math

from pydantic import BaseModel, ConfigDict, Field


class PageInfo(BaseModel):
    """Pagination block returned next to every paginated collection."""

    current_page: int
    last_page: int
    per_page: int
    total: int
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None
    has_more_pages: bool

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def build(cls, page: int, per_page: int, total: int, item_count: int) -> "PageInfo":
        last_page = max(math.ceil(total / per_page), 1)
        offset = (page - 1) * per_page
        return cls(
            current_page=page,
            last_page=last_page,
            per_page=per_page,
            total=total,
            from_=offset + 1 if item_count else None,
            to=offset + item_count if item_count else None,
            has_more_pages=page < last_page,
        )
