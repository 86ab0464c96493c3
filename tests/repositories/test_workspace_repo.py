"""Tests for Profile, Workspace and WorkspaceMember repositories."""

from uuid import UUID

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from shelfmap.models.common import WorkspaceRole
from shelfmap.repositories.workspace import (
    ProfileRepository,
    WorkspaceMemberRepository,
    WorkspaceRepository,
)


class TestProfileRepository:

    @pytest.mark.anyio
    async def test_create_get_delete(self, db_session: AsyncSession) -> None:
        repo = ProfileRepository(db_session)
        pid = uuid7()
        await repo.create(profile_id=pid, email="a@example.com", full_name="Ada")
        assert (await repo.get(pid)).full_name == "Ada"

        assert await repo.delete(pid) == 1
        assert await repo.get(pid) is None
        assert await repo.delete(pid) == 0


class TestWorkspaceRepository:

    @pytest.mark.anyio
    async def test_list_owned_ids(self, db_session: AsyncSession, owner_id: UUID,
                                  outsider_id: UUID, make_workspace) -> None:
        first = await make_workspace(owner_id, "Home")
        second = await make_workspace(owner_id, "Office")
        await make_workspace(outsider_id, "Theirs")

        owned = await WorkspaceRepository(db_session).list_owned_ids(owner_id)
        assert set(owned) == {first, second}


class TestWorkspaceMemberRepository:

    @pytest.mark.anyio
    async def test_get_role(self, db_session: AsyncSession, owner_id: UUID,
                            outsider_id: UUID, workspace_id: UUID) -> None:
        repo = WorkspaceMemberRepository(db_session)
        assert await repo.get_role(workspace_id, owner_id) == WorkspaceRole.OWNER.value
        assert await repo.get_role(workspace_id, outsider_id) is None

    @pytest.mark.anyio
    async def test_list_for_user(self, db_session: AsyncSession, owner_id: UUID,
                                 outsider_id: UUID, workspace_id: UUID,
                                 make_workspace, add_member) -> None:
        theirs = await make_workspace(outsider_id, "Theirs")
        await add_member(theirs, owner_id, WorkspaceRole.READ_ONLY)

        pairs = await WorkspaceMemberRepository(db_session).list_for_user(owner_id)
        roles = {ws.id: role for ws, role in pairs}
        assert roles == {
            workspace_id: WorkspaceRole.OWNER.value,
            theirs: WorkspaceRole.READ_ONLY.value,
        }

    @pytest.mark.anyio
    async def test_delete_by_workspace_and_for_user(
        self, db_session: AsyncSession, owner_id: UUID, outsider_id: UUID,
        workspace_id: UUID, make_workspace, add_member,
    ) -> None:
        theirs = await make_workspace(outsider_id, "Theirs")
        await add_member(theirs, owner_id)
        await add_member(workspace_id, outsider_id)
        repo = WorkspaceMemberRepository(db_session)

        assert await repo.delete_by_workspace(workspace_id) == 2
        assert await repo.list_by_workspace(workspace_id) == []

        assert await repo.delete_for_user(owner_id) == 1
        assert await repo.get_role(theirs, outsider_id) == WorkspaceRole.OWNER.value
