from sqlalchemy import Column, DateTime, Enum as SQLAlchemyEnum, ForeignKey, Integer
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship

from starchat.schemas.conversation import ConversationStatus
from starchat.schemas.identity import Identity, SenderType

from .base import BaseModel


class Conversation(BaseModel):
    __tablename__ = "conversations"

    # id, created_at, updated_at are inherited from BaseModel
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    superstar_id = Column(
        Integer, ForeignKey("superstars.id"), nullable=False, index=True
    )
    status = Column(
        SQLAlchemyEnum(
            ConversationStatus,
            name="conversation_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=ConversationStatus.ACTIVE,
    )
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="conversations", foreign_keys=[user_id])
    superstar = relationship(
        "Superstar", back_populates="conversations", foreign_keys=[superstar_id]
    )
    messages = relationship(
        "Message", back_populates="conversation", cascade="all, delete-orphan"
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint(
            "user_id", "superstar_id", name="uq_conversation_user_superstar"
        ),
    )

    # The participant predicate. has_participant and participant_clause must agree.
    def has_participant(self, identity: Identity) -> bool:
        if identity.role is SenderType.USER:
            return self.user_id == identity.id
        return self.superstar_id == identity.id

    @classmethod
    def participant_clause(cls, identity: Identity):
        if identity.role is SenderType.USER:
            return cls.user_id == identity.id
        return cls.superstar_id == identity.id
