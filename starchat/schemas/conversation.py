import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from starchat.schemas.message import MessageResponse
from starchat.schemas.pagination import PageInfo
from starchat.schemas.superstar import SuperstarSummary
from starchat.schemas.user import UserSummary


class ConversationStatus(str, enum.Enum):
    ACTIVE = "active"
    ENDED = "ended"
    BLOCKED = "blocked"


# Status is validated by the service so its error carries the field name
class ConversationStatusUpdateRequest(BaseModel):
    status: str | None = None


class ConversationResponse(BaseModel):
    id: int
    user_id: int
    superstar_id: int
    status: ConversationStatus
    started_at: datetime | None = None
    ended_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    superstar: SuperstarSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class ConversationListItem(ConversationResponse):
    user: UserSummary | None = None
    latest_message: MessageResponse | None = None

    @classmethod
    def from_preview(cls, conversation, latest_message) -> "ConversationListItem":
        item = cls.model_validate(conversation)
        if latest_message is not None:
            item.latest_message = MessageResponse.model_validate(latest_message)
        return item


class ConversationEnvelope(BaseModel):
    conversation: ConversationResponse


class ConversationListResponse(BaseModel):
    conversations: list[ConversationListItem]
    pagination: PageInfo


class ConversationStatusResponse(BaseModel):
    message: str
    conversation: ConversationResponse
