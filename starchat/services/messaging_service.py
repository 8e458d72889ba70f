import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from starchat.core.config import settings
from starchat.models import Message
from starchat.repositories.conversation_repository import ConversationRepository
from starchat.repositories.message_repository import MessageRepository
from starchat.schemas.identity import Identity
from starchat.schemas.message import MessageType
from starchat.schemas.pagination import PageInfo
from starchat.storage.attachment_handler import (
    AttachmentCategory,
    AttachmentHandler,
    IncomingAttachment,
    StoredAttachment,
)

from .authorization import get_participant_conversation
from .exceptions import (
    DatabaseError,
    MessageNotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def validate_message_input(
    message_type: str | None,
    body: str | None,
    attachment: IncomingAttachment | None,
    max_attachment_bytes: int,
) -> MessageType:
    """
    Checks a send request and returns the parsed message type.
    A text message needs a body; any other type needs a body or an attachment.
    """
    errors: dict[str, list[str]] = {}
    has_body = bool(body and body.strip())

    parsed_type = None
    if not message_type:
        errors["message_type"] = ["The message type field is required."]
    else:
        try:
            parsed_type = MessageType(message_type)
        except ValueError:
            allowed = ", ".join(t.value for t in MessageType)
            errors["message_type"] = [
                f"The selected message type is invalid. Allowed values: {allowed}."
            ]

    if parsed_type is MessageType.TEXT and not has_body:
        errors["body"] = ["The body field is required for text messages."]
    elif not has_body and attachment is None:
        errors["body"] = ["The body field is required when no file is attached."]

    if attachment is not None:
        if attachment.size_bytes == 0:
            errors["file"] = ["The file must not be empty."]
        elif attachment.size_bytes > max_attachment_bytes:
            errors["file"] = [
                f"The file may not be greater than {max_attachment_bytes // 1024} kilobytes."
            ]

    if errors:
        raise ValidationError(errors=errors)
    return parsed_type


class MessagingService:
    def __init__(
        self,
        conversation_repository: ConversationRepository,
        message_repository: MessageRepository,
        attachment_handler: AttachmentHandler,
    ):
        self.conv_repo = conversation_repository
        self.msg_repo = message_repository
        self.attachments = attachment_handler
        self.session = message_repository.session

    async def send_message(
        self,
        identity: Identity,
        conversation_id: int,
        message_type: str | None,
        body: str | None = None,
        attachment: IncomingAttachment | None = None,
    ) -> Message:
        """
        Sends a message as the identity. The attachment, if any, is stored first;
        if the message row cannot be written the stored file is removed again, so
        a failure never leaves a message without its file or a file without its
        message.
        """
        parsed_type = validate_message_input(
            message_type, body, attachment, settings.MAX_ATTACHMENT_BYTES
        )
        conversation = await get_participant_conversation(
            self.conv_repo, conversation_id, identity
        )

        stored: StoredAttachment | None = None
        if attachment is not None:
            stored = await self.attachments.store(
                attachment.content, attachment.filename, AttachmentCategory.CHAT
            )

        try:
            message = await self.msg_repo.create_message(
                conversation_id=conversation.id,
                sender=identity,
                message_type=parsed_type,
                body=body if body and body.strip() else None,
                file_path=stored.path if stored else None,
                file_name=stored.original_name if stored else None,
                file_size=stored.size_bytes if stored else None,
            )
            await self.conv_repo.touch(conversation, now=datetime.now(timezone.utc))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Database error sending message to conversation {conversation_id}: {e}",
                exc_info=True,
            )
            if stored is not None:
                await self._discard_attachment(stored.path)
            raise DatabaseError("Failed to send message due to a database error.")

        # The row is committed from here on, so its attachment must stay
        try:
            await self.session.refresh(message)
        except SQLAlchemyError as e:
            logger.error(
                f"Message {message.id} was sent but could not be reloaded: {e}",
                exc_info=True,
            )
            raise DatabaseError("The message was sent but could not be loaded.")

        logger.info(
            f"Message {message.id} sent to conversation {conversation_id} by "
            f"{identity.role.value} {identity.id}"
        )
        return message

    async def list_messages(
        self, identity: Identity, conversation_id: int, page: int, per_page: int
    ) -> tuple[list[Message], PageInfo]:
        """
        Returns one page of messages in reading order (oldest first).
        Pages count backwards from the newest message: page 1 is the most recent
        ``per_page`` messages. Listing does not change read state.
        """
        conversation = await get_participant_conversation(
            self.conv_repo, conversation_id, identity
        )
        try:
            newest_first, total = await self.msg_repo.list_conversation_page(
                conversation.id, page=page, per_page=per_page
            )
        except SQLAlchemyError as e:
            logger.error(f"Database error listing messages: {e}", exc_info=True)
            raise DatabaseError("Failed to list messages due to a database error.")

        messages = list(reversed(newest_first))
        return messages, PageInfo.build(page, per_page, total, len(messages))

    async def mark_conversation_read(
        self, identity: Identity, conversation_id: int
    ) -> int:
        """Marks the other party's unread messages as read and returns how many changed."""
        conversation = await get_participant_conversation(
            self.conv_repo, conversation_id, identity
        )
        try:
            marked = await self.msg_repo.mark_read(
                conversation.id,
                sender_type=identity.role.counterpart,
                read_at=datetime.now(timezone.utc),
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Database error marking conversation {conversation_id} read: {e}",
                exc_info=True,
            )
            raise DatabaseError("Failed to mark messages as read due to a database error.")

        logger.debug(f"Marked {marked} messages read in conversation {conversation_id}")
        return marked

    async def unread_count(self, identity: Identity) -> int:
        try:
            return await self.msg_repo.count_unread(identity)
        except SQLAlchemyError as e:
            logger.error(f"Database error counting unread messages: {e}", exc_info=True)
            raise DatabaseError("Failed to count unread messages due to a database error.")

    async def delete_message(self, identity: Identity, message_id: int) -> None:
        """
        Deletes one of the identity's own messages along with its attachment.
        An attachment that is already gone is ignored; a storage failure aborts
        the delete and keeps the message.
        """
        message = await self.msg_repo.get_message_by_id(message_id)
        if (
            not message
            or message.sender_type != identity.role
            or message.sender_id != identity.id
        ):
            raise MessageNotFoundError("Message not found or unauthorized.")

        if message.file_path:
            removed = await self.attachments.delete(message.file_path)
            if not removed:
                logger.warning(
                    f"Attachment '{message.file_path}' of message {message_id} "
                    f"was already missing from storage."
                )

        try:
            await self.msg_repo.delete_message(message)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error deleting message {message_id}: {e}", exc_info=True)
            raise DatabaseError("Failed to delete message due to a database error.")

        logger.info(f"Message {message_id} deleted by {identity.role.value} {identity.id}")

    async def _discard_attachment(self, path: str) -> None:
        try:
            await self.attachments.delete(path)
        except StorageError:
            logger.error(f"Could not remove orphaned attachment '{path}'", exc_info=True)
