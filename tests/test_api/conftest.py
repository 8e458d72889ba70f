import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from test_helpers import (
    DEFAULT_PASSWORD,
    create_test_conversation,
    create_test_superstar,
    login_headers,
    register_test_user,
)

from starchat.models import Conversation, Superstar, User
from starchat.schemas.user import UserCreate

FAN_EMAIL = "fan@example.com"
STAR_EMAIL = "star@example.com"


@pytest.fixture(scope="function")
async def fan(db_test_session_manager: async_sessionmaker[AsyncSession]) -> User:
    """A plain user account; acts on the user side of conversations."""
    return await register_test_user(
        db_test_session_manager,
        UserCreate(email=FAN_EMAIL, password=DEFAULT_PASSWORD, username="fan"),
    )


@pytest.fixture(scope="function")
async def fan_headers(test_client: AsyncClient, fan: User) -> dict[str, str]:
    return await login_headers(test_client, FAN_EMAIL)


@pytest.fixture(scope="function")
async def star_account(db_test_session_manager: async_sessionmaker[AsyncSession]) -> User:
    return await register_test_user(
        db_test_session_manager,
        UserCreate(email=STAR_EMAIL, password=DEFAULT_PASSWORD, username="star"),
    )


@pytest.fixture(scope="function")
async def superstar(
    db_test_session_manager: async_sessionmaker[AsyncSession], star_account: User
) -> Superstar:
    """The superstar profile owned by ``star_account``."""
    async with db_test_session_manager() as session:
        async with session.begin():
            profile = create_test_superstar(star_account.id, display_name="Nova")
            session.add(profile)
        await session.refresh(profile)
        return profile


@pytest.fixture(scope="function")
async def star_headers(
    test_client: AsyncClient, superstar: Superstar
) -> dict[str, str]:
    return await login_headers(test_client, STAR_EMAIL)


@pytest.fixture(scope="function")
async def conversation(
    db_test_session_manager: async_sessionmaker[AsyncSession],
    fan: User,
    superstar: Superstar,
) -> Conversation:
    """An active conversation between ``fan`` and ``superstar``."""
    async with db_test_session_manager() as session:
        async with session.begin():
            convo = create_test_conversation(fan.id, superstar.id)
            session.add(convo)
        await session.refresh(convo)
        return convo
