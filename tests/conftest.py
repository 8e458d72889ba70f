import os
from pathlib import Path
from typing import Any, AsyncGenerator

# Settings are read at import time, so the test environment must exist first
os.environ.setdefault("SECRET", "test-secret-key-for-jwt-signing-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi import Depends, FastAPI  # noqa: E402
from fastapi_users.db import SQLAlchemyUserDatabase  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from starchat.db import get_db_session, get_user_db  # noqa: E402
from starchat.main import app  # noqa: E402
from starchat.models import User, metadata  # noqa: E402
from starchat.storage.attachment_handler import (  # noqa: E402
    AttachmentHandler,
    LocalDiskStorage,
    get_attachment_handler,
)

# Use an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Master fixture to manage table creation/dropping and provide session maker
@pytest.fixture(scope="function")
async def db_test_session_manager() -> (
    AsyncGenerator[async_sessionmaker[AsyncSession], None]
):
    # One connection shared by every session, so the in-memory database persists
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def storage_root(tmp_path: Path) -> Path:
    """Root directory the attachment handler writes into during a test."""
    root = tmp_path / "storage"
    root.mkdir()
    return root


@pytest.fixture(scope="function")
def attachment_handler(storage_root: Path) -> AttachmentHandler:
    return AttachmentHandler(LocalDiskStorage(storage_root))


# Fixture for the FastAPI app with overridden dependencies
@pytest.fixture(scope="function")
def test_app(
    db_test_session_manager: async_sessionmaker[AsyncSession],
    attachment_handler: AttachmentHandler,
) -> FastAPI:
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with db_test_session_manager() as session:
            yield session

    # Depends on the original dependency name; FastAPI supplies the override
    async def override_get_user_db(
        session: AsyncSession = Depends(get_db_session),
    ) -> SQLAlchemyUserDatabase[User, Any]:
        yield SQLAlchemyUserDatabase(session, User)

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_user_db] = override_get_user_db
    app.dependency_overrides[get_attachment_handler] = lambda: attachment_handler
    yield app
    app.dependency_overrides.clear()


# Fixture for the async test client
@pytest.fixture(scope="function")
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client
