# Tests for DELETE /messages/{id} and DELETE /superstar/messages/{id}
from pathlib import Path

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from test_helpers import create_test_message

from starchat.main import app
from starchat.models import Conversation, Message, Superstar, User
from starchat.schemas.identity import SenderType
from starchat.schemas.message import MessageType
from starchat.storage.attachment_handler import (
    AttachmentHandler,
    LocalDiskStorage,
    get_attachment_handler,
)

pytestmark = pytest.mark.asyncio

NOT_FOUND = {"message": "Message not found or unauthorized."}


async def _message_exists(session_maker, message_id: int) -> bool:
    async with session_maker() as session:
        found = await session.execute(select(Message).filter(Message.id == message_id))
        return found.scalars().first() is not None


async def _insert_message(session_maker, **kwargs) -> int:
    async with session_maker() as session:
        async with session.begin():
            message = create_test_message(**kwargs)
            session.add(message)
            await session.flush()
            return message.id


async def test_sender_deletes_own_message(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    fan: User,
    fan_headers: dict,
    conversation: Conversation,
):
    message_id = await _insert_message(
        db_test_session_manager,
        conversation_id=conversation.id,
        sender_type=SenderType.USER,
        sender_id=fan.id,
    )

    response = await test_client.delete(f"/messages/{message_id}", headers=fan_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Message deleted successfully."}
    assert not await _message_exists(db_test_session_manager, message_id)


async def test_delete_removes_attachment(
    test_client: AsyncClient,
    fan_headers: dict,
    conversation: Conversation,
    storage_root: Path,
):
    sent = await test_client.post(
        f"/conversations/{conversation.id}/messages",
        data={"message_type": "video"},
        files={"file": ("clip.mp4", b"not really a video", "video/mp4")},
        headers=fan_headers,
    )
    file_path = sent.json()["message"]["file_path"]
    assert (storage_root / file_path).exists()

    response = await test_client.delete(
        f"/messages/{sent.json()['message']['id']}", headers=fan_headers
    )

    assert response.status_code == 200
    assert not (storage_root / file_path).exists()


async def test_delete_tolerates_missing_attachment(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    fan: User,
    fan_headers: dict,
    conversation: Conversation,
):
    """A blob that is already gone does not block deleting the message."""
    message_id = await _insert_message(
        db_test_session_manager,
        conversation_id=conversation.id,
        sender_type=SenderType.USER,
        sender_id=fan.id,
        body=None,
        message_type=MessageType.FILE,
        file_path="chat_files/1700000000_deadbeef_gone.txt",
    )

    response = await test_client.delete(f"/messages/{message_id}", headers=fan_headers)

    assert response.status_code == 200
    assert not await _message_exists(db_test_session_manager, message_id)


async def test_delete_keeps_message_when_storage_fails(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    fan: User,
    fan_headers: dict,
    conversation: Conversation,
    tmp_path: Path,
):
    class LockedDisk(LocalDiskStorage):
        def delete(self, relative_path: str) -> bool:
            raise PermissionError("read-only file system")

    app.dependency_overrides[get_attachment_handler] = lambda: AttachmentHandler(
        LockedDisk(tmp_path)
    )
    message_id = await _insert_message(
        db_test_session_manager,
        conversation_id=conversation.id,
        sender_type=SenderType.USER,
        sender_id=fan.id,
        body=None,
        message_type=MessageType.FILE,
        file_path="chat_files/1700000000_deadbeef_locked.txt",
    )

    response = await test_client.delete(f"/messages/{message_id}", headers=fan_headers)

    assert response.status_code == 500
    assert await _message_exists(db_test_session_manager, message_id)


async def test_recipient_cannot_delete_message(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    fan: User,
    star_headers: dict,
    conversation: Conversation,
):
    """The superstar can read the user's message but not delete it."""
    message_id = await _insert_message(
        db_test_session_manager,
        conversation_id=conversation.id,
        sender_type=SenderType.USER,
        sender_id=fan.id,
    )

    response = await test_client.delete(
        f"/superstar/messages/{message_id}", headers=star_headers
    )

    assert response.status_code == 404
    assert response.json() == NOT_FOUND
    assert await _message_exists(db_test_session_manager, message_id)


async def test_same_id_other_role_cannot_delete(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    fan: User,
    fan_headers: dict,
    superstar: Superstar,
    conversation: Conversation,
):
    """A superstar message whose sender_id equals the user's id is still not theirs."""
    message_id = await _insert_message(
        db_test_session_manager,
        conversation_id=conversation.id,
        sender_type=SenderType.SUPERSTAR,
        sender_id=fan.id,
    )

    response = await test_client.delete(f"/messages/{message_id}", headers=fan_headers)

    assert response.status_code == 404
    assert await _message_exists(db_test_session_manager, message_id)


async def test_superstar_deletes_own_message(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    star_headers: dict,
    superstar: Superstar,
    conversation: Conversation,
):
    message_id = await _insert_message(
        db_test_session_manager,
        conversation_id=conversation.id,
        sender_type=SenderType.SUPERSTAR,
        sender_id=superstar.id,
    )

    response = await test_client.delete(
        f"/superstar/messages/{message_id}", headers=star_headers
    )

    assert response.status_code == 200
    assert not await _message_exists(db_test_session_manager, message_id)


async def test_delete_unknown_message(test_client: AsyncClient, fan_headers: dict):
    response = await test_client.delete("/messages/9999", headers=fan_headers)

    assert response.status_code == 404
    assert response.json() == NOT_FOUND
