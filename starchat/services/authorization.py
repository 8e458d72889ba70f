from starchat.models import Conversation
from starchat.repositories.conversation_repository import ConversationRepository
from starchat.schemas.identity import Identity

from .exceptions import ConversationNotFoundError, NotAuthorizedError


async def get_participant_conversation(
    conv_repo: ConversationRepository, conversation_id: int, identity: Identity
) -> Conversation:
    """Loads a conversation the identity takes part in.

    Existence is checked before ownership, so a missing conversation is always
    a 404 and someone else's conversation is always a 403.
    """
    conversation = await conv_repo.get_conversation_by_id(conversation_id)
    if not conversation:
        raise ConversationNotFoundError(
            f"Conversation with ID '{conversation_id}' not found."
        )
    if not conversation.has_participant(identity):
        raise NotAuthorizedError("You are not a participant in this conversation.")
    return conversation
