import sqlalchemy
from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text

from sqlalchemy.orm import relationship

from .base import BaseModel


class Superstar(BaseModel):
    __tablename__ = "superstars"

    # A creator profile attached to exactly one user account
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    display_name = Column(Text, nullable=False)
    bio = Column(Text, nullable=True)
    profile_image = Column(Text, nullable=True)
    status = Column(Text, nullable=False, server_default="active")
    is_available = Column(
        Boolean, nullable=False, server_default=sqlalchemy.sql.expression.true()
    )

    # Relationships
    user = relationship("User", back_populates="superstar_profile")
    conversations = relationship(
        "Conversation",
        back_populates="superstar",
        foreign_keys="Conversation.superstar_id",
    )

    @property
    def username(self) -> str | None:
        return self.user.username if self.user else None
