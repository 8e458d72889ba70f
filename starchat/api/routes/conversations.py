import logging
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, Query, Request

from starchat.api.common import BaseRouter
from starchat.api.dependencies import get_superstar_identity, get_user_identity
from starchat.core.config import settings
from starchat.logic.conversation_processing import (
    handle_list_conversations,
    handle_start_conversation,
    handle_update_status,
)
from starchat.logic.message_processing import (
    handle_delete_message,
    handle_list_messages,
    handle_mark_read,
    handle_send_message,
    handle_unread_count,
)
from starchat.schemas.conversation import (
    ConversationEnvelope,
    ConversationListResponse,
    ConversationStatusResponse,
    ConversationStatusUpdateRequest,
)
from starchat.schemas.identity import Identity
from starchat.schemas.message import (
    DeleteMessageResponse,
    MarkReadResponse,
    MessageEnvelope,
    MessageListResponse,
    UnreadCountResponse,
)
from starchat.services.conversation_service import ConversationService
from starchat.services.dependencies import (
    get_conversation_service,
    get_messaging_service,
)
from starchat.services.messaging_service import MessagingService

logger = logging.getLogger(__name__)

# Request body documentation for the send endpoint, which reads the body itself
SEND_MESSAGE_BODY = {
    "required": True,
    "content": {
        "application/json": {
            "schema": {
                "type": "object",
                "properties": {
                    "message_type": {
                        "type": "string",
                        "enum": ["text", "image", "video", "file"],
                    },
                    "body": {"type": "string"},
                },
                "required": ["message_type"],
            }
        },
        "multipart/form-data": {
            "schema": {
                "type": "object",
                "properties": {
                    "message_type": {"type": "string"},
                    "body": {"type": "string"},
                    "file": {"type": "string", "format": "binary"},
                },
                "required": ["message_type"],
            }
        },
    },
}


def build_chat_router(
    resolve_identity: Callable[..., Any],
    prefix: str = "",
    tags: Optional[list[str]] = None,
) -> APIRouter:
    """
    Builds the chat endpoints for one side of a conversation.
    ``resolve_identity`` is the dependency that turns the authenticated account
    into the Identity every operation runs as.
    """
    router = BaseRouter(prefix=prefix, tags=tags or ["conversations"])

    @router.get("/conversations", response_model=ConversationListResponse)
    async def list_conversations(
        page: int = Query(1, ge=1),
        per_page: int = Query(
            settings.CONVERSATIONS_PER_PAGE, ge=1, le=settings.MAX_PER_PAGE
        ),
        status: Optional[str] = Query(None),
        identity: Identity = Depends(resolve_identity),
        conv_service: ConversationService = Depends(get_conversation_service),
    ):
        return await handle_list_conversations(
            identity=identity,
            page=page,
            per_page=per_page,
            status=status,
            conv_service=conv_service,
        )

    @router.get(
        "/conversations/{conversation_id}/messages",
        response_model=MessageListResponse,
    )
    async def list_messages(
        conversation_id: int,
        page: int = Query(1, ge=1),
        per_page: int = Query(settings.MESSAGES_PER_PAGE, ge=1, le=settings.MAX_PER_PAGE),
        identity: Identity = Depends(resolve_identity),
        msg_service: MessagingService = Depends(get_messaging_service),
    ):
        """Messages in reading order; page 1 holds the most recent ones."""
        return await handle_list_messages(
            identity=identity,
            conversation_id=conversation_id,
            page=page,
            per_page=per_page,
            msg_service=msg_service,
        )

    @router.post(
        "/conversations/{conversation_id}/messages",
        response_model=MessageEnvelope,
        openapi_extra={"requestBody": SEND_MESSAGE_BODY},
    )
    async def send_message(
        conversation_id: int,
        request: Request,
        identity: Identity = Depends(resolve_identity),
        msg_service: MessagingService = Depends(get_messaging_service),
    ):
        """Accepts JSON, or multipart when a file is attached."""
        return await handle_send_message(
            identity=identity,
            conversation_id=conversation_id,
            request=request,
            msg_service=msg_service,
        )

    @router.post(
        "/conversations/{conversation_id}/read", response_model=MarkReadResponse
    )
    async def mark_conversation_read(
        conversation_id: int,
        identity: Identity = Depends(resolve_identity),
        msg_service: MessagingService = Depends(get_messaging_service),
    ):
        return await handle_mark_read(
            identity=identity, conversation_id=conversation_id, msg_service=msg_service
        )

    @router.put(
        "/conversations/{conversation_id}/status",
        response_model=ConversationStatusResponse,
    )
    async def update_conversation_status(
        conversation_id: int,
        payload: Optional[ConversationStatusUpdateRequest] = None,
        identity: Identity = Depends(resolve_identity),
        conv_service: ConversationService = Depends(get_conversation_service),
    ):
        return await handle_update_status(
            identity=identity,
            conversation_id=conversation_id,
            new_status=payload.status if payload else None,
            conv_service=conv_service,
        )

    @router.delete("/messages/{message_id}", response_model=DeleteMessageResponse)
    async def delete_message(
        message_id: int,
        identity: Identity = Depends(resolve_identity),
        msg_service: MessagingService = Depends(get_messaging_service),
    ):
        return await handle_delete_message(
            identity=identity, message_id=message_id, msg_service=msg_service
        )

    @router.get("/unread-count", response_model=UnreadCountResponse)
    async def unread_count(
        identity: Identity = Depends(resolve_identity),
        msg_service: MessagingService = Depends(get_messaging_service),
    ):
        return await handle_unread_count(identity=identity, msg_service=msg_service)

    return router.api_router


user_chat_router = build_chat_router(get_user_identity, tags=["conversations"])
superstar_chat_router = build_chat_router(
    get_superstar_identity, prefix="/superstar", tags=["superstar"]
)

# Starting a conversation is only possible from the user side
start_router = BaseRouter(tags=["conversations"])


@start_router.post(
    "/conversations/start/{superstar_id}", response_model=ConversationEnvelope
)
async def start_conversation(
    superstar_id: int,
    identity: Identity = Depends(get_user_identity),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Starts a conversation with a superstar, or returns the existing one."""
    return await handle_start_conversation(
        identity=identity, superstar_id=superstar_id, conv_service=conv_service
    )
