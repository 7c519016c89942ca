import os
from typing import AsyncGenerator

# Test defaults must be in place before anything reads settings
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault(
    "APP_PROPERTIES_FILE",
    os.path.join(os.path.dirname(__file__), "no-such-application.properties"),
)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.common.config import Settings, get_settings
from libs.db.base import Base
from libs.db.gateway import Database
from services.shop_service import models as _shop_models  # noqa: F401
from services.shop_service.app.main import create_app
from services.shop_service.domain import User
from services.shop_service.models import UserType
from services.shop_service.services import user_service
from tests.factories import UserFactory

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "p"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DB_URL=TEST_DATABASE_URL,
        JWT_SECRET="test-jwt-secret",
        JWT_EXPIRE_MINUTES=60,
    )


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Fresh in-memory database per test; one shared connection keeps the
    schema alive for the engine's lifetime.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db(test_engine) -> Database:
    return Database(test_engine)


@pytest.fixture
def app(settings, db):
    return create_app(settings=settings, database=db)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the app over ASGI.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Accounts and tokens
# ---------------------------------------------------------------------------


async def register(db: Database, password: str = DEFAULT_PASSWORD, **overrides) -> User:
    """Register a user through the service and return the stored entity."""
    user = UserFactory.create(**overrides)
    user_id = await user_service.register_user(db, user, password=password)
    return await user_service.get_user_by_id(db, user_id)


@pytest_asyncio.fixture
async def alice(db) -> User:
    return await register(
        db, username="alice", email="alice@example.com", first_name="Alice"
    )


@pytest_asyncio.fixture
async def admin_user(db) -> User:
    return await register(
        db,
        username="admin",
        email="admin@example.com",
        first_name="Ada",
        user_type=UserType.ADMIN,
    )


def bearer(app, username: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {app.state.token_service.issue(username)}"}


@pytest.fixture
def auth_headers(app, alice) -> dict[str, str]:
    """Headers carrying a valid token for alice."""
    return bearer(app, alice.username)


@pytest.fixture
def admin_headers(app, admin_user) -> dict[str, str]:
    return bearer(app, admin_user.username)
