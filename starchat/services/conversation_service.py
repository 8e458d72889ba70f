import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from starchat.models import Conversation, Message
from starchat.repositories.conversation_repository import ConversationRepository
from starchat.repositories.message_repository import MessageRepository
from starchat.repositories.superstar_repository import SuperstarRepository
from starchat.schemas.conversation import ConversationStatus
from starchat.schemas.identity import Identity, SenderType
from starchat.schemas.pagination import PageInfo

from .authorization import get_participant_conversation
from .exceptions import (
    ConflictError,
    DatabaseError,
    NotAuthorizedError,
    SuperstarNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ALLOWED_STATUSES = ", ".join(s.value for s in ConversationStatus)


def parse_status(value: str | None) -> ConversationStatus:
    """Validates a raw status string against the conversation status enum."""
    if not value:
        raise ValidationError(errors={"status": ["The status field is required."]})
    try:
        return ConversationStatus(value)
    except ValueError:
        raise ValidationError(
            errors={
                "status": [
                    f"The selected status is invalid. Allowed values: {ALLOWED_STATUSES}."
                ]
            }
        )


class ConversationService:
    def __init__(
        self,
        conversation_repository: ConversationRepository,
        message_repository: MessageRepository,
        superstar_repository: SuperstarRepository,
    ):
        self.conv_repo = conversation_repository
        self.msg_repo = message_repository
        self.superstar_repo = superstar_repository
        # The session is implicitly shared via the repositories
        self.session = conversation_repository.session

    async def start_or_get_conversation(
        self, identity: Identity, superstar_id: int
    ) -> Conversation:
        """
        Returns the caller's conversation with a superstar, creating it on first use.
        Repeated calls for the same pair always return the same conversation.
        """
        if identity.role is not SenderType.USER:
            raise NotAuthorizedError("Only users can start a conversation.")

        superstar = await self.superstar_repo.get_superstar_by_id(superstar_id)
        if not superstar:
            raise SuperstarNotFoundError(
                f"Superstar with ID '{superstar_id}' not found."
            )

        existing = await self.conv_repo.get_conversation_by_participants(
            user_id=identity.id, superstar_id=superstar_id
        )
        if existing:
            return await self.conv_repo.get_conversation_details(existing.id)

        try:
            conversation = await self.conv_repo.create_conversation(
                user_id=identity.id,
                superstar_id=superstar_id,
                started_at=datetime.now(timezone.utc),
            )
            conversation_id = conversation.id
            await self.session.commit()
        except IntegrityError:
            # A concurrent start for the same pair won the insert; use its row
            await self.session.rollback()
            logger.info(
                f"Conversation for user {identity.id} and superstar {superstar_id} "
                f"was created concurrently, reusing it."
            )
            existing = await self.conv_repo.get_conversation_by_participants(
                user_id=identity.id, superstar_id=superstar_id
            )
            if not existing:
                raise ConflictError("Could not start the conversation.")
            conversation_id = existing.id
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error starting conversation: {e}", exc_info=True)
            raise DatabaseError("Failed to start conversation due to a database error.")

        logger.info(
            f"Conversation {conversation_id} started between user {identity.id} "
            f"and superstar {superstar_id}"
        )
        return await self.conv_repo.get_conversation_details(conversation_id)

    async def list_conversations(
        self,
        identity: Identity,
        page: int,
        per_page: int,
        status: str | None = None,
    ) -> tuple[list[tuple[Conversation, Message | None]], PageInfo]:
        """
        Lists the identity's conversations, most recently updated first, each paired
        with its latest message so clients can render a preview without another call.
        """
        status_filter = parse_status(status) if status else None
        try:
            conversations, total = await self.conv_repo.list_participant_conversations(
                identity, page=page, per_page=per_page, status=status_filter
            )
            latest = await self.msg_repo.get_latest_messages(
                [conversation.id for conversation in conversations]
            )
        except SQLAlchemyError as e:
            logger.error(f"Database error listing conversations: {e}", exc_info=True)
            raise DatabaseError("Failed to list conversations due to a database error.")

        previews = [
            (conversation, latest.get(conversation.id)) for conversation in conversations
        ]
        return previews, PageInfo.build(page, per_page, total, len(previews))

    async def update_status(
        self, identity: Identity, conversation_id: int, new_status: str | None
    ) -> Conversation:
        """
        Moves a conversation to any of the known statuses.
        Entering 'active' stamps started_at if it was never set; entering 'ended'
        stamps ended_at.
        """
        status = parse_status(new_status)
        conversation = await get_participant_conversation(
            self.conv_repo, conversation_id, identity
        )

        try:
            await self.conv_repo.update_status(
                conversation, status, now=datetime.now(timezone.utc)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Database error updating conversation {conversation_id}: {e}",
                exc_info=True,
            )
            raise DatabaseError(
                "Failed to update conversation status due to a database error."
            )

        logger.info(
            f"Conversation {conversation_id} moved to '{status.value}' by "
            f"{identity.role.value} {identity.id}"
        )
        return await self.conv_repo.get_conversation_details(conversation_id)
