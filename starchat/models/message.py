import sqlalchemy
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SQLAlchemyEnum,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import relationship

from starchat.schemas.identity import SenderType
from starchat.schemas.message import MessageType

from .base import BaseModel


class Message(BaseModel):
    __tablename__ = "messages"

    # id, created_at are inherited from BaseModel
    conversation_id = Column(
        Integer, ForeignKey("conversations.id"), nullable=False
    )
    sender_type = Column(
        SQLAlchemyEnum(
            SenderType,
            name="sender_type",
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
    )
    # Points at users.id or superstars.id depending on sender_type
    sender_id = Column(Integer, nullable=False)
    message_type = Column(
        SQLAlchemyEnum(
            MessageType,
            name="message_type",
            values_callable=lambda types: [t.value for t in types],
        ),
        nullable=False,
    )
    body = Column(Text, nullable=True)

    file_path = Column(Text, nullable=True)
    file_name = Column(Text, nullable=True)
    file_size = Column(Integer, nullable=True)

    is_read = Column(
        Boolean, nullable=False, server_default=sqlalchemy.sql.expression.false()
    )
    read_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        Index("ix_messages_conversation_created", "conversation_id", "created_at"),
        Index("ix_messages_conversation_unread", "conversation_id", "is_read"),
    )

    @property
    def has_attachment(self) -> bool:
        return self.file_path is not None
