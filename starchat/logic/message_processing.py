import json
import logging

from fastapi import Request
from starlette.datastructures import UploadFile

from starchat.core.config import settings
from starchat.schemas.identity import Identity
from starchat.schemas.message import (
    DeleteMessageResponse,
    MarkReadResponse,
    MessageEnvelope,
    MessageListResponse,
    MessageResponse,
    UnreadCountResponse,
)
from starchat.services.exceptions import ServiceError, ValidationError
from starchat.services.messaging_service import MessagingService
from starchat.storage.attachment_handler import IncomingAttachment

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_message_input(
    request: Request,
) -> tuple[str | None, str | None, IncomingAttachment | None]:
    """
    Pulls ``message_type``, ``body`` and the optional ``file`` out of a send
    request. Multipart and urlencoded forms are read as forms; anything else
    is read as a JSON object, which cannot carry a file.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        attachment = None
        upload = form.get("file")
        if isinstance(upload, UploadFile):
            try:
                # Reads at most one byte past the limit
                content = await upload.read(settings.MAX_ATTACHMENT_BYTES + 1)
            finally:
                await upload.close()
            attachment = IncomingAttachment(
                content=content, filename=upload.filename or "unnamed_file"
            )
        elif upload:
            raise ValidationError(errors={"file": ["The file must be a file upload."]})
        return (
            _form_text(form.get("message_type")),
            _form_text(form.get("body")),
            attachment,
        )

    raw = await request.body()
    if not raw:
        return None, None, None
    try:
        payload = json.loads(raw)
    except ValueError:
        raise ValidationError("The request body must be valid JSON.")
    if not isinstance(payload, dict):
        raise ValidationError("The request body must be a JSON object.")

    errors = {}
    for field in ("message_type", "body"):
        value = payload.get(field)
        if value is not None and not isinstance(value, str):
            errors[field] = [f"The {field.replace('_', ' ')} must be a string."]
    if errors:
        raise ValidationError(errors=errors)
    return payload.get("message_type"), payload.get("body"), None


def _form_text(value) -> str | None:
    # Text fields arrive as str; an upload under a text name is ignored
    return value if isinstance(value, str) else None


async def handle_send_message(
    identity: Identity,
    conversation_id: int,
    request: Request,
    msg_service: MessagingService,
) -> MessageEnvelope:
    """Reads the send request and delivers the message into the conversation."""
    message_type, body, attachment = await read_message_input(request)
    try:
        message = await msg_service.send_message(
            identity=identity,
            conversation_id=conversation_id,
            message_type=message_type,
            body=body,
            attachment=attachment,
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(
            f"Handler: Unexpected error sending message to conversation "
            f"{conversation_id}: {e}",
            exc_info=True,
        )
        raise ServiceError("An unexpected error occurred while sending the message.")
    return MessageEnvelope(message=MessageResponse.model_validate(message))


async def handle_list_messages(
    identity: Identity,
    conversation_id: int,
    page: int,
    per_page: int,
    msg_service: MessagingService,
) -> MessageListResponse:
    try:
        messages, page_info = await msg_service.list_messages(
            identity=identity,
            conversation_id=conversation_id,
            page=page,
            per_page=per_page,
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(
            f"Handler: Unexpected error listing messages of conversation "
            f"{conversation_id}: {e}",
            exc_info=True,
        )
        raise ServiceError("An unexpected error occurred while listing messages.")
    return MessageListResponse(
        messages=[MessageResponse.model_validate(m) for m in messages],
        pagination=page_info,
    )


async def handle_mark_read(
    identity: Identity, conversation_id: int, msg_service: MessagingService
) -> MarkReadResponse:
    try:
        marked = await msg_service.mark_conversation_read(
            identity=identity, conversation_id=conversation_id
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(
            f"Handler: Unexpected error marking conversation {conversation_id} "
            f"as read: {e}",
            exc_info=True,
        )
        raise ServiceError("An unexpected error occurred while marking messages read.")
    return MarkReadResponse(message="Messages marked as read.", messages_marked=marked)


async def handle_unread_count(
    identity: Identity, msg_service: MessagingService
) -> UnreadCountResponse:
    try:
        count = await msg_service.unread_count(identity)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Handler: Unexpected error counting unread messages: {e}", exc_info=True)
        raise ServiceError("An unexpected error occurred while counting unread messages.")
    return UnreadCountResponse(unread_count=count)


async def handle_delete_message(
    identity: Identity, message_id: int, msg_service: MessagingService
) -> DeleteMessageResponse:
    try:
        await msg_service.delete_message(identity=identity, message_id=message_id)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(
            f"Handler: Unexpected error deleting message {message_id}: {e}",
            exc_info=True,
        )
        raise ServiceError("An unexpected error occurred while deleting the message.")
    return DeleteMessageResponse(message="Message deleted successfully.")
