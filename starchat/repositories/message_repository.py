from datetime import datetime
from typing import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from starchat.models import Conversation, Message
from starchat.repositories.base import BaseRepository
from starchat.schemas.identity import Identity, SenderType
from starchat.schemas.message import MessageType

# Newest first; id breaks ties between equal timestamps
NEWEST_FIRST = (Message.created_at.desc(), Message.id.desc())


class MessageRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create_message(
        self,
        conversation_id: int,
        sender: Identity,
        message_type: MessageType,
        body: str | None = None,
        file_path: str | None = None,
        file_name: str | None = None,
        file_size: int | None = None,
    ) -> Message:
        """Creates and adds a new unread message to the session."""
        new_message = Message(
            conversation_id=conversation_id,
            sender_type=sender.role,
            sender_id=sender.id,
            message_type=message_type,
            body=body,
            file_path=file_path,
            file_name=file_name,
            file_size=file_size,
            is_read=False,
        )
        self.session.add(new_message)
        await self.session.flush()
        return new_message

    async def get_message_by_id(self, message_id: int) -> Message | None:
        stmt = select(Message).filter(Message.id == message_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_conversation_page(
        self, conversation_id: int, page: int, per_page: int
    ) -> tuple[Sequence[Message], int]:
        """Retrieves one page of a conversation's messages, newest first."""
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(*NEWEST_FIRST)
        )
        return await self.paginate(stmt, page, per_page)

    async def get_latest_messages(
        self, conversation_ids: Sequence[int]
    ) -> dict[int, Message]:
        """Maps each conversation id to its most recent message, if it has one."""
        if not conversation_ids:
            return {}
        ranked = (
            select(
                Message,
                func.row_number()
                .over(partition_by=Message.conversation_id, order_by=NEWEST_FIRST)
                .label("position"),
            )
            .where(Message.conversation_id.in_(conversation_ids))
            .subquery()
        )
        latest = aliased(Message, ranked)
        stmt = select(latest).where(ranked.c.position == 1)
        result = await self.session.execute(stmt)
        return {message.conversation_id: message for message in result.scalars()}

    async def mark_read(
        self, conversation_id: int, sender_type: SenderType, read_at: datetime
    ) -> int:
        """Marks every unread message from ``sender_type`` as read; returns the row count."""
        stmt = (
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.sender_type == sender_type,
                Message.is_read.is_(False),
            )
            .values(is_read=True, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def count_unread(self, identity: Identity) -> int:
        """Counts unread counterpart messages across the identity's conversations."""
        stmt = (
            select(func.count(Message.id))
            .join(Conversation, Message.conversation_id == Conversation.id)
            .where(
                Conversation.participant_clause(identity),
                Message.sender_type == identity.role.counterpart,
                Message.is_read.is_(False),
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def delete_message(self, message: Message) -> None:
        await self.session.delete(message)
        await self.session.flush()
