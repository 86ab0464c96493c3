"""Profile, workspace, and workspace membership repositories."""

from uuid import UUID

from sqlalchemy import delete, select

from shelfmap.db.tables import ProfileRow, WorkspaceMemberRow, WorkspaceRow
from shelfmap.models.common import utc_now
from shelfmap.repositories.base import BULK, SessionRepository


class ProfileRepository(SessionRepository):

    async def create(self, *, profile_id: UUID, email: str,
                     full_name: str | None = None) -> ProfileRow:
        now = utc_now()
        row = ProfileRow(
            id=profile_id, email=email, full_name=full_name,
            created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, profile_id: UUID) -> ProfileRow | None:
        return await self._session.get(ProfileRow, profile_id, populate_existing=True)

    async def delete(self, profile_id: UUID) -> int:
        result = await self._session.execute(
            delete(ProfileRow).where(ProfileRow.id == profile_id).execution_options(**BULK)
        )
        return result.rowcount


class WorkspaceRepository(SessionRepository):

    async def create(self, *, workspace_id: UUID, owner_id: UUID,
                     name: str) -> WorkspaceRow:
        now = utc_now()
        row = WorkspaceRow(
            id=workspace_id, owner_id=owner_id, name=name,
            created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, workspace_id: UUID) -> WorkspaceRow | None:
        return await self._session.get(WorkspaceRow, workspace_id, populate_existing=True)

    async def list_owned_ids(self, owner_id: UUID) -> list[UUID]:
        result = await self._session.execute(
            select(WorkspaceRow.id)
            .where(WorkspaceRow.owner_id == owner_id)
            .order_by(WorkspaceRow.created_at)
        )
        return list(result.scalars().all())

    async def delete(self, workspace_id: UUID) -> int:
        result = await self._session.execute(
            delete(WorkspaceRow)
            .where(WorkspaceRow.id == workspace_id)
            .execution_options(**BULK)
        )
        return result.rowcount


class WorkspaceMemberRepository(SessionRepository):

    async def add(self, *, workspace_id: UUID, user_id: UUID,
                  role: str) -> WorkspaceMemberRow:
        row = WorkspaceMemberRow(
            workspace_id=workspace_id, user_id=user_id, role=role,
            joined_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, workspace_id: UUID, user_id: UUID) -> WorkspaceMemberRow | None:
        return await self._session.get(
            WorkspaceMemberRow, (workspace_id, user_id), populate_existing=True,
        )

    async def list_with_profiles(
        self, workspace_id: UUID,
    ) -> list[tuple[WorkspaceMemberRow, ProfileRow]]:
        result = await self._session.execute(
            select(WorkspaceMemberRow, ProfileRow)
            .join(ProfileRow, ProfileRow.id == WorkspaceMemberRow.user_id)
            .where(WorkspaceMemberRow.workspace_id == workspace_id)
            .order_by(WorkspaceMemberRow.joined_at, ProfileRow.email)
            .execution_options(populate_existing=True)
        )
        return [(member, profile) for member, profile in result.all()]

    async def remove(self, workspace_id: UUID, user_id: UUID) -> int:
        result = await self._session.execute(
            delete(WorkspaceMemberRow)
            .where(
                WorkspaceMemberRow.workspace_id == workspace_id,
                WorkspaceMemberRow.user_id == user_id,
            )
            .execution_options(**BULK)
        )
        return result.rowcount

    async def get_role(self, workspace_id: UUID, user_id: UUID) -> str | None:
        result = await self._session.execute(
            select(WorkspaceMemberRow.role).where(
                WorkspaceMemberRow.workspace_id == workspace_id,
                WorkspaceMemberRow.user_id == user_id,
            )
        )
        return result.scalars().first()

    async def list_for_user(self, user_id: UUID) -> list[tuple[WorkspaceRow, str]]:
        result = await self._session.execute(
            select(WorkspaceRow, WorkspaceMemberRow.role)
            .join(WorkspaceMemberRow, WorkspaceMemberRow.workspace_id == WorkspaceRow.id)
            .where(WorkspaceMemberRow.user_id == user_id)
            .order_by(WorkspaceRow.created_at)
            .execution_options(populate_existing=True)
        )
        return [(ws, role) for ws, role in result.all()]

    async def list_by_workspace(self, workspace_id: UUID) -> list[WorkspaceMemberRow]:
        result = await self._session.execute(
            select(WorkspaceMemberRow)
            .where(WorkspaceMemberRow.workspace_id == workspace_id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def delete_by_workspace(self, workspace_id: UUID) -> int:
        result = await self._session.execute(
            delete(WorkspaceMemberRow)
            .where(WorkspaceMemberRow.workspace_id == workspace_id)
            .execution_options(**BULK)
        )
        return result.rowcount

    async def delete_for_user(self, user_id: UUID) -> int:
        result = await self._session.execute(
            delete(WorkspaceMemberRow)
            .where(WorkspaceMemberRow.user_id == user_id)
            .execution_options(**BULK)
        )
        return result.rowcount
