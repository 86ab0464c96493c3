"""Tests for DatabaseMembershipGate."""

from uuid import UUID

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from shelfmap.access.membership import DatabaseMembershipGate
from shelfmap.models.common import WorkspaceRole


class TestDatabaseMembershipGate:

    @pytest.mark.anyio
    async def test_owner(self, db_session: AsyncSession, owner_id: UUID,
                         workspace_id: UUID) -> None:
        gate = DatabaseMembershipGate(db_session)
        assert await gate.role_of(workspace_id, owner_id) is WorkspaceRole.OWNER

    @pytest.mark.anyio
    async def test_read_only_member(self, db_session: AsyncSession, outsider_id: UUID,
                                    workspace_id: UUID, add_member) -> None:
        await add_member(workspace_id, outsider_id, WorkspaceRole.READ_ONLY)
        gate = DatabaseMembershipGate(db_session)
        assert await gate.role_of(workspace_id, outsider_id) is WorkspaceRole.READ_ONLY

    @pytest.mark.anyio
    async def test_non_member(self, db_session: AsyncSession, outsider_id: UUID,
                              workspace_id: UUID) -> None:
        gate = DatabaseMembershipGate(db_session)
        assert await gate.role_of(workspace_id, outsider_id) is None

    @pytest.mark.anyio
    async def test_unknown_workspace(self, db_session: AsyncSession, owner_id: UUID) -> None:
        gate = DatabaseMembershipGate(db_session)
        assert await gate.role_of(uuid7(), owner_id) is None
