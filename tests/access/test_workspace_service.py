"""Tests for WorkspaceService — creation with owner membership, listing."""

from uuid import UUID

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from shelfmap.access.membership import DatabaseMembershipGate
from shelfmap.access.workspaces import WorkspaceService
from shelfmap.models.common import WorkspaceRole
from shelfmap.models.results import ErrorKind, Failure, Ok


class TestCreateWorkspace:

    @pytest.mark.anyio
    async def test_creator_becomes_owner(self, db_session: AsyncSession,
                                         owner_id: UUID) -> None:
        result = await WorkspaceService(db_session).create(owner_id, "  Home  ")
        assert isinstance(result, Ok)
        membership = result.value
        assert membership.role is WorkspaceRole.OWNER
        assert membership.workspace.name == "Home"
        assert membership.workspace.owner_id == owner_id

        gate = DatabaseMembershipGate(db_session)
        assert await gate.role_of(membership.workspace.id, owner_id) is WorkspaceRole.OWNER

    @pytest.mark.anyio
    @pytest.mark.parametrize("name", ["", "   ", "x" * 65])
    async def test_invalid_name(self, db_session: AsyncSession, owner_id: UUID,
                                name: str) -> None:
        result = await WorkspaceService(db_session).create(owner_id, name)
        assert isinstance(result, Failure)
        assert result.kind == ErrorKind.VALIDATION

    @pytest.mark.anyio
    async def test_unknown_profile(self, db_session: AsyncSession) -> None:
        result = await WorkspaceService(db_session).create(uuid7(), "Home")
        assert isinstance(result, Failure)
        assert result.kind == ErrorKind.NOT_FOUND


class TestListWorkspaces:

    @pytest.mark.anyio
    async def test_lists_memberships_with_roles(self, db_session: AsyncSession,
                                                owner_id: UUID, outsider_id: UUID,
                                                workspace_id: UUID, add_member) -> None:
        await add_member(workspace_id, outsider_id, WorkspaceRole.MEMBER)
        memberships = await WorkspaceService(db_session).list_for_user(outsider_id)
        assert [(m.workspace.id, m.role) for m in memberships] == [
            (workspace_id, WorkspaceRole.MEMBER),
        ]

    @pytest.mark.anyio
    async def test_empty_for_non_member(self, db_session: AsyncSession,
                                        outsider_id: UUID) -> None:
        assert await WorkspaceService(db_session).list_for_user(outsider_id) == []
