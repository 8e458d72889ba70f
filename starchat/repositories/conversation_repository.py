from datetime import datetime
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from starchat.models import Conversation, Superstar
from starchat.schemas.conversation import ConversationStatus
from starchat.schemas.identity import Identity

from .base import BaseRepository

# Relations every conversation response embeds
PREVIEW_OPTIONS = (
    selectinload(Conversation.superstar).selectinload(Superstar.user),
    selectinload(Conversation.user),
)


class ConversationRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_conversation_by_id(
        self, conversation_id: int
    ) -> Conversation | None:
        """Retrieves a specific conversation by its ID."""
        stmt = select(Conversation).filter(Conversation.id == conversation_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_conversation_details(
        self, conversation_id: int
    ) -> Conversation | None:
        """Retrieves a conversation with its superstar and user loaded, bypassing stale state."""
        stmt = (
            select(Conversation)
            .filter(Conversation.id == conversation_id)
            .options(*PREVIEW_OPTIONS)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_conversation_by_participants(
        self, user_id: int, superstar_id: int
    ) -> Conversation | None:
        stmt = select(Conversation).filter(
            Conversation.user_id == user_id,
            Conversation.superstar_id == superstar_id,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_conversation(
        self, user_id: int, superstar_id: int, started_at: datetime
    ) -> Conversation:
        """Adds a new active conversation to the session and flushes it."""
        new_conversation = Conversation(
            user_id=user_id,
            superstar_id=superstar_id,
            status=ConversationStatus.ACTIVE,
            started_at=started_at,
        )
        self.session.add(new_conversation)
        await self.session.flush()
        return new_conversation

    async def list_participant_conversations(
        self,
        identity: Identity,
        page: int,
        per_page: int,
        status: ConversationStatus | None = None,
    ) -> tuple[Sequence[Conversation], int]:
        """Lists one page of the identity's conversations, most recently updated first."""
        stmt = select(Conversation).filter(Conversation.participant_clause(identity))
        if status is not None:
            stmt = stmt.filter(Conversation.status == status)
        stmt = stmt.order_by(Conversation.updated_at.desc(), Conversation.id.desc())
        return await self.paginate(stmt, page, per_page, options=PREVIEW_OPTIONS)

    async def update_status(
        self,
        conversation: Conversation,
        status: ConversationStatus,
        now: datetime,
    ) -> Conversation:
        """Applies a status change and its timestamp side effects."""
        conversation.status = status
        if status == ConversationStatus.ACTIVE and conversation.started_at is None:
            conversation.started_at = now
        elif status == ConversationStatus.ENDED:
            conversation.ended_at = now
        conversation.updated_at = now
        self.session.add(conversation)
        await self.session.flush()
        return conversation

    async def touch(self, conversation: Conversation, now: datetime) -> None:
        """Marks the conversation as the most recently active."""
        conversation.updated_at = now
        self.session.add(conversation)
        await self.session.flush()
