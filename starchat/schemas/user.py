from pydantic import BaseModel, ConfigDict
from fastapi_users import schemas


class UserRead(schemas.BaseUser[int]):
    username: str
    profile_image: str | None = None


class UserCreate(schemas.BaseUserCreate):
    username: str
    profile_image: str | None = None


class UserUpdate(schemas.BaseUserUpdate):
    username: str | None = None
    profile_image: str | None = None


# Counterpart card shown to superstars in their conversation list
class UserSummary(BaseModel):
    id: int
    username: str
    profile_image: str | None = None

    model_config = ConfigDict(from_attributes=True)
