"""
Test Configuration and Fixtures

Provides a file-backed SQLite database, session factories, the async test
client and identity headers for each role.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from backend.db.session import get_db
from backend.main import app
from backend.middleware.rbac import Role
from backend.models.base import Base
from backend.routers.v1.deps import get_notifier
from backend.services.notifications import Notification
from tests.factories import identity_headers


class RecordingNotifier:
    """Collects notifications instead of queueing them."""

    def __init__(self):
        self.sent: list[Notification] = []

    def send(self, notification: Notification) -> None:
        self.sent.append(notification)

    def events(self) -> list[str]:
        return [n.event.value for n in self.sent]


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """
    Fresh database per test.

    Every transaction starts with BEGIN IMMEDIATE so that concurrent writers
    queue on the database lock instead of failing on lock upgrade.
    """
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    @event.listens_for(test_engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(test_engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, notifier: RecordingNotifier) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async test client with dependency overrides."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return identity_headers(Role.ADMIN, "admin-1", "Office Admin")


@pytest.fixture
def client_headers() -> dict[str, str]:
    return identity_headers(Role.CLIENT, "client-1", "Margaret Chen")


@pytest.fixture
def psw_headers() -> dict[str, str]:
    return identity_headers(Role.PSW, "psw-1", "Alice Martin")
