import logging

# Logic for conversation actions, decoupled from the API routes so it can be
# called the same way from the user and the superstar side.
from starchat.schemas.conversation import (
    ConversationEnvelope,
    ConversationListItem,
    ConversationListResponse,
    ConversationResponse,
    ConversationStatusResponse,
)
from starchat.schemas.identity import Identity
from starchat.services.conversation_service import ConversationService
from starchat.services.exceptions import ServiceError

logger = logging.getLogger(__name__)


async def handle_start_conversation(
    identity: Identity,
    superstar_id: int,
    conv_service: ConversationService,
) -> ConversationEnvelope:
    """Starts, or returns the existing, conversation with a superstar."""
    try:
        conversation = await conv_service.start_or_get_conversation(
            identity=identity, superstar_id=superstar_id
        )
        return ConversationEnvelope(
            conversation=ConversationResponse.model_validate(conversation)
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(
            f"Handler: Unexpected error starting conversation with superstar "
            f"{superstar_id}: {e}",
            exc_info=True,
        )
        raise ServiceError("An unexpected error occurred while starting the conversation.")


async def handle_list_conversations(
    identity: Identity,
    page: int,
    per_page: int,
    status: str | None,
    conv_service: ConversationService,
) -> ConversationListResponse:
    """
    Lists the caller's conversations with a preview of each one's latest message.

    Args:
        identity: The caller.
        page: 1-based page number.
        per_page: Page size.
        status: Optional status filter, validated by the service.
        conv_service: The conversation service dependency.

    Raises:
        ValidationError: If ``status`` is not a known conversation status.
        DatabaseError: If the conversations cannot be read.
    """
    try:
        previews, page_info = await conv_service.list_conversations(
            identity=identity, page=page, per_page=per_page, status=status
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in handle_list_conversations: {e}", exc_info=True)
        raise ServiceError("An unexpected error occurred while listing conversations.")

    return ConversationListResponse(
        conversations=[
            ConversationListItem.from_preview(conversation, latest)
            for conversation, latest in previews
        ],
        pagination=page_info,
    )


async def handle_update_status(
    identity: Identity,
    conversation_id: int,
    new_status: str | None,
    conv_service: ConversationService,
) -> ConversationStatusResponse:
    logger.debug(
        f"Handler: Updating status of conversation {conversation_id} to '{new_status}'"
    )
    try:
        conversation = await conv_service.update_status(
            identity=identity,
            conversation_id=conversation_id,
            new_status=new_status,
        )
    except ServiceError as e:
        logger.info(f"Handler: Service error updating conversation {conversation_id}: {e}")
        raise
    except Exception as e:
        logger.error(
            f"Handler: Unexpected error updating conversation {conversation_id}: {e}",
            exc_info=True,
        )
        raise ServiceError(
            f"An unexpected error occurred while updating conversation {conversation_id}."
        )

    return ConversationStatusResponse(
        message="Conversation status updated successfully.",
        conversation=ConversationResponse.model_validate(conversation),
    )
