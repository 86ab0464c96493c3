"""Workspace membership gate: the single authorization lookup for core services.

The gate only answers "what role does this user hold here?". Each
service decides how a missing role is reported: location operations
answer NOT_FOUND (existence is never revealed to non-members), workspace
deletion answers FORBIDDEN.
"""

from typing import Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.models.common import WorkspaceRole
from shelfmap.repositories.workspace import WorkspaceMemberRepository


class MembershipGate(Protocol):
    async def role_of(self, workspace_id: UUID, user_id: UUID) -> WorkspaceRole | None:
        ...


class DatabaseMembershipGate:
    """MembershipGate backed by the workspace_members table."""

    def __init__(self, session: AsyncSession) -> None:
        self._members = WorkspaceMemberRepository(session)

    async def role_of(self, workspace_id: UUID, user_id: UUID) -> WorkspaceRole | None:
        role = await self._members.get_role(workspace_id, user_id)
        return WorkspaceRole(role) if role is not None else None
