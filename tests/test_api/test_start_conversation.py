# Tests for POST /conversations/start/{superstar_id}
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from starchat.models import Conversation, Superstar, User

pytestmark = pytest.mark.asyncio


async def test_start_conversation_creates_active_conversation(
    test_client: AsyncClient,
    fan: User,
    fan_headers: dict,
    superstar: Superstar,
):
    """Starting a conversation returns it with the superstar card embedded."""
    response = await test_client.post(
        f"/conversations/start/{superstar.id}", headers=fan_headers
    )

    assert response.status_code == 200, response.text
    conversation = response.json()["conversation"]
    assert conversation["user_id"] == fan.id
    assert conversation["superstar_id"] == superstar.id
    assert conversation["status"] == "active"
    assert conversation["started_at"] is not None
    assert conversation["ended_at"] is None
    assert conversation["superstar"]["display_name"] == "Nova"
    assert conversation["superstar"]["username"] == "star"


async def test_start_conversation_is_idempotent(
    test_client: AsyncClient,
    db_test_session_manager: async_sessionmaker[AsyncSession],
    fan_headers: dict,
    superstar: Superstar,
):
    """Starting twice returns the same conversation and stores only one row."""
    first = await test_client.post(
        f"/conversations/start/{superstar.id}", headers=fan_headers
    )
    second = await test_client.post(
        f"/conversations/start/{superstar.id}", headers=fan_headers
    )

    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["conversation"]["id"] == second.json()["conversation"]["id"]

    async with db_test_session_manager() as session:
        count = (
            await session.execute(select(func.count()).select_from(Conversation))
        ).scalar_one()
    assert count == 1


async def test_start_conversation_returns_existing_one(
    test_client: AsyncClient,
    fan_headers: dict,
    superstar: Superstar,
    conversation: Conversation,
):
    response = await test_client.post(
        f"/conversations/start/{superstar.id}", headers=fan_headers
    )

    assert response.status_code == 200
    assert response.json()["conversation"]["id"] == conversation.id


async def test_start_conversation_unknown_superstar(
    test_client: AsyncClient, fan_headers: dict
):
    """An unknown superstar id is a 404 with the standard error body."""
    response = await test_client.post("/conversations/start/9999", headers=fan_headers)

    assert response.status_code == 404
    assert response.json() == {"message": "Superstar with ID '9999' not found."}


async def test_start_conversation_requires_authentication(
    test_client: AsyncClient, superstar: Superstar
):
    response = await test_client.post(f"/conversations/start/{superstar.id}")

    assert response.status_code == 401
    assert "message" in response.json()
