from fastapi import Depends

from starchat.repositories.conversation_repository import ConversationRepository
from starchat.repositories.dependencies import (
    get_conversation_repository,
    get_message_repository,
    get_superstar_repository,
)
from starchat.repositories.message_repository import MessageRepository
from starchat.repositories.superstar_repository import SuperstarRepository
from starchat.storage.attachment_handler import (
    AttachmentHandler,
    get_attachment_handler,
)

from .conversation_service import ConversationService
from .messaging_service import MessagingService
from .superstar_service import SuperstarService

# Services are built per request: each one holds the request's database session.


def get_conversation_service(
    conv_repo: ConversationRepository = Depends(get_conversation_repository),
    msg_repo: MessageRepository = Depends(get_message_repository),
    superstar_repo: SuperstarRepository = Depends(get_superstar_repository),
) -> ConversationService:
    """Provides an instance of the ConversationService with its dependencies."""
    return ConversationService(
        conversation_repository=conv_repo,
        message_repository=msg_repo,
        superstar_repository=superstar_repo,
    )


def get_messaging_service(
    conv_repo: ConversationRepository = Depends(get_conversation_repository),
    msg_repo: MessageRepository = Depends(get_message_repository),
    attachment_handler: AttachmentHandler = Depends(get_attachment_handler),
) -> MessagingService:
    """Provides an instance of the MessagingService."""
    return MessagingService(
        conversation_repository=conv_repo,
        message_repository=msg_repo,
        attachment_handler=attachment_handler,
    )


def get_superstar_service(
    superstar_repo: SuperstarRepository = Depends(get_superstar_repository),
) -> SuperstarService:
    """Provides an instance of the SuperstarService."""
    return SuperstarService(superstar_repository=superstar_repo)
