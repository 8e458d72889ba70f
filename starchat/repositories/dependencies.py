from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from starchat.db import get_db_session

from .conversation_repository import ConversationRepository
from .message_repository import MessageRepository
from .superstar_repository import SuperstarRepository


def get_conversation_repository(
    session: AsyncSession = Depends(get_db_session),
) -> ConversationRepository:
    return ConversationRepository(session)


def get_message_repository(
    session: AsyncSession = Depends(get_db_session),
) -> MessageRepository:
    """Dependency provider for MessageRepository."""
    return MessageRepository(session)


def get_superstar_repository(
    session: AsyncSession = Depends(get_db_session),
) -> SuperstarRepository:
    """Dependency provider for SuperstarRepository."""
    return SuperstarRepository(session)
