"""Shared pytest fixtures for the Shelfmap test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits and rollbacks
  never reach the outer transaction)
- client: AsyncClient with get_async_session overridden to the test session
- seeded profiles/workspaces and bearer headers for API tests
"""

from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from uuid_extensions import uuid7

from shelfmap.config.settings import get_settings
from shelfmap.db.session import Base, get_async_session
import shelfmap.db.tables  # noqa: F401  (registers ORM models on Base.metadata)
from shelfmap.identity.tokens import issue_token
from shelfmap.models.common import WorkspaceRole
from shelfmap.repositories.workspace import (
    ProfileRepository,
    WorkspaceMemberRepository,
    WorkspaceRepository,
)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed; it rolls back at teardown.
    With join_transaction_mode="create_savepoint" the session's own
    commit()/rollback() only touch a SAVEPOINT inside it.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(
            bind=conn,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )

        yield session

        await session.close()
        await trans.rollback()


@pytest.fixture
async def client(db_session):
    """AsyncClient with get_async_session overridden to use the test session."""
    from shelfmap.api.main import app

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_async_session] = _override_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


async def _make_profile(session: AsyncSession, email: str) -> UUID:
    profile_id = uuid7()
    await ProfileRepository(session).create(profile_id=profile_id, email=email)
    return profile_id


async def _make_workspace(session: AsyncSession, owner_id: UUID,
                          name: str = "Home") -> UUID:
    workspace_id = uuid7()
    await WorkspaceRepository(session).create(
        workspace_id=workspace_id, owner_id=owner_id, name=name,
    )
    await WorkspaceMemberRepository(session).add(
        workspace_id=workspace_id, user_id=owner_id, role=WorkspaceRole.OWNER.value,
    )
    return workspace_id


async def _add_member(session: AsyncSession, workspace_id: UUID, user_id: UUID,
                      role: WorkspaceRole = WorkspaceRole.MEMBER) -> None:
    await WorkspaceMemberRepository(session).add(
        workspace_id=workspace_id, user_id=user_id, role=role.value,
    )


@pytest.fixture
def make_profile(db_session: AsyncSession):
    """Async factory: ``await make_profile("a@b.c")`` → profile id."""
    async def _factory(email: str) -> UUID:
        return await _make_profile(db_session, email)
    return _factory


@pytest.fixture
def make_workspace(db_session: AsyncSession):
    """Async factory: workspace owned by ``owner_id`` with its owner membership."""
    async def _factory(owner_id: UUID, name: str = "Home") -> UUID:
        return await _make_workspace(db_session, owner_id, name)
    return _factory


@pytest.fixture
def add_member(db_session: AsyncSession):
    async def _factory(workspace_id: UUID, user_id: UUID,
                       role: WorkspaceRole = WorkspaceRole.MEMBER) -> None:
        await _add_member(db_session, workspace_id, user_id, role)
    return _factory


@pytest.fixture
async def owner_id(db_session: AsyncSession) -> UUID:
    return await _make_profile(db_session, "owner@example.com")


@pytest.fixture
async def outsider_id(db_session: AsyncSession) -> UUID:
    """A profile that belongs to no workspace."""
    return await _make_profile(db_session, "outsider@example.com")


@pytest.fixture
async def workspace_id(db_session: AsyncSession, owner_id: UUID) -> UUID:
    return await _make_workspace(db_session, owner_id)


@pytest.fixture
def auth_headers():
    """``auth_headers(user_id)`` → Authorization header signed with the configured secret."""
    def _headers(user_id: UUID) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(user_id, get_settings())}"}
    return _headers
