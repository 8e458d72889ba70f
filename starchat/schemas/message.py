import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, computed_field

from starchat.schemas.identity import SenderType
from starchat.schemas.pagination import PageInfo
from starchat.storage.attachment_handler import public_url


class MessageType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    FILE = "file"


class MessageResponse(BaseModel):
    id: int
    conversation_id: int
    sender_type: SenderType
    sender_id: int
    message_type: MessageType
    body: str | None = None
    file_path: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def file_url(self) -> str | None:
        return public_url(self.file_path) if self.file_path else None


class MessageEnvelope(BaseModel):
    message: MessageResponse


class MessageListResponse(BaseModel):
    messages: list[MessageResponse]
    pagination: PageInfo


class MarkReadResponse(BaseModel):
    message: str
    messages_marked: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class DeleteMessageResponse(BaseModel):
    message: str
