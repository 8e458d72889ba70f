import uuid

from fastapi_users.db import SQLAlchemyBaseUserTable
from sqlalchemy import Column, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


# User model inherits from BaseModel and SQLAlchemyBaseUserTable
# Note: the integer id comes from BaseModel; fastapi-users only needs the type.
class User(SQLAlchemyBaseUserTable[int], BaseModel):
    __tablename__ = "users"

    # id, created_at, updated_at are inherited from BaseModel
    # email, hashed_password, is_active, is_superuser, is_verified are from SQLAlchemyBaseUserTable

    username = Column(
        Text,
        unique=True,
        nullable=False,
        default=lambda: f"user_{uuid.uuid4().hex[:12]}",
    )
    profile_image = Column(Text, nullable=True)

    # Relationships
    # Use string forward references for related models to avoid circular imports at module level
    superstar_profile = relationship(
        "Superstar", back_populates="user", uselist=False
    )
    conversations = relationship(
        "Conversation",
        back_populates="user",
        foreign_keys="Conversation.user_id",
    )
