from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SuperstarCreateRequest(BaseModel):
    display_name: str = Field(min_length=1, max_length=255)
    bio: str | None = None
    profile_image: str | None = None


# Profile card embedded in conversation previews
class SuperstarSummary(BaseModel):
    id: int
    display_name: str
    username: str | None = None
    profile_image: str | None = None
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class SuperstarResponse(SuperstarSummary):
    user_id: int
    bio: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class SuperstarEnvelope(BaseModel):
    superstar: SuperstarResponse
