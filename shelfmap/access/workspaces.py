"""Workspace creation and listing.

A new workspace always starts with its creator as the single owner
member; both rows are written in the same transaction.
"""

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.db.tables import WorkspaceRow
from shelfmap.models.common import WorkspaceRole, new_uuid7
from shelfmap.models.results import Ok, Result, not_found, validation_error
from shelfmap.models.workspace import Workspace, WorkspaceMembership
from shelfmap.repositories.workspace import (
    ProfileRepository,
    WorkspaceMemberRepository,
    WorkspaceRepository,
)

logger = structlog.get_logger(__name__)

WORKSPACE_NAME_MAX_LENGTH = 64


def to_workspace(row: WorkspaceRow) -> Workspace:
    return Workspace(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class WorkspaceService:

    def __init__(self, session: AsyncSession) -> None:
        self._profiles = ProfileRepository(session)
        self._workspaces = WorkspaceRepository(session)
        self._members = WorkspaceMemberRepository(session)

    async def create(self, user_id: UUID, name: str) -> Result[WorkspaceMembership]:
        name = name.strip()
        if not name or len(name) > WORKSPACE_NAME_MAX_LENGTH:
            return validation_error(
                f"Workspace name must be 1-{WORKSPACE_NAME_MAX_LENGTH} characters."
            )
        if await self._profiles.get(user_id) is None:
            return not_found("User profile not found.")

        row = await self._workspaces.create(
            workspace_id=new_uuid7(), owner_id=user_id, name=name,
        )
        await self._members.add(
            workspace_id=row.id, user_id=user_id, role=WorkspaceRole.OWNER.value,
        )
        logger.info("workspace_created", workspace_id=str(row.id), user_id=str(user_id))
        return Ok(WorkspaceMembership(workspace=to_workspace(row), role=WorkspaceRole.OWNER))

    async def list_for_user(self, user_id: UUID) -> list[WorkspaceMembership]:
        return [
            WorkspaceMembership(workspace=to_workspace(ws), role=WorkspaceRole(role))
            for ws, role in await self._members.list_for_user(user_id)
        ]
