"""Workspace member management.

Any member may list the members. Only owners add members, change roles,
or remove other members; anyone may remove themselves. The profile
recorded as the workspace owner always stays an owner member, so a
workspace never loses its last owner and account deletion still finds it.
"""

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.access.membership import MembershipGate
from shelfmap.db.tables import ProfileRow, WorkspaceMemberRow
from shelfmap.models.common import WorkspaceRole
from shelfmap.models.results import ErrorKind, Failure, Ok, Result, not_found
from shelfmap.models.workspace import Member, MemberAdd
from shelfmap.repositories.workspace import (
    ProfileRepository,
    WorkspaceMemberRepository,
    WorkspaceRepository,
)

logger = structlog.get_logger(__name__)

WORKSPACE_NOT_FOUND = "Workspace not found."
MEMBER_NOT_FOUND = "Member not found."
OWNER_ONLY = "Only workspace owners can manage members."
OWNER_PINNED = "The workspace owner must remain an owner."


def to_member(member: WorkspaceMemberRow, profile: ProfileRow) -> Member:
    return Member(
        user_id=member.user_id,
        email=profile.email,
        full_name=profile.full_name,
        role=WorkspaceRole(member.role),
        joined_at=member.joined_at,
    )


class MemberService:

    def __init__(self, session: AsyncSession, gate: MembershipGate) -> None:
        self._session = session
        self._gate = gate
        self._profiles = ProfileRepository(session)
        self._workspaces = WorkspaceRepository(session)
        self._members = WorkspaceMemberRepository(session)

    async def list_members(self, workspace_id: UUID,
                           user_id: UUID) -> Result[list[Member]]:
        if await self._gate.role_of(workspace_id, user_id) is None:
            return not_found(WORKSPACE_NOT_FOUND)
        rows = await self._members.list_with_profiles(workspace_id)
        return Ok([to_member(m, p) for m, p in rows])

    async def add(self, workspace_id: UUID, user_id: UUID,
                  data: MemberAdd) -> Result[Member]:
        denied = await self._require_owner(workspace_id, user_id)
        if denied:
            return denied

        profile = await self._profiles.get(data.user_id)
        if profile is None:
            return not_found("User not found.")
        if await self._members.get(workspace_id, data.user_id) is not None:
            return Failure(ErrorKind.CONFLICT, "User is already a member of this workspace.")

        member = await self._members.add(
            workspace_id=workspace_id, user_id=data.user_id, role=data.role.value,
        )
        logger.info(
            "member_added",
            workspace_id=str(workspace_id), member_id=str(data.user_id),
            role=data.role.value, user_id=str(user_id),
        )
        return Ok(to_member(member, profile))

    async def change_role(self, workspace_id: UUID, user_id: UUID, member_id: UUID,
                          role: WorkspaceRole) -> Result[Member]:
        denied = await self._require_owner(workspace_id, user_id)
        if denied:
            return denied

        member = await self._members.get(workspace_id, member_id)
        if member is None:
            return not_found(MEMBER_NOT_FOUND)
        if role != WorkspaceRole.OWNER and await self._is_recorded_owner(workspace_id, member_id):
            return Failure(ErrorKind.FORBIDDEN, OWNER_PINNED)

        previous = member.role
        member.role = role.value
        await self._session.flush()
        logger.info(
            "member_role_changed",
            workspace_id=str(workspace_id), member_id=str(member_id),
            old_role=previous, new_role=role.value, user_id=str(user_id),
        )
        profile = await self._profiles.get(member_id)
        return Ok(to_member(member, profile))

    async def remove(self, workspace_id: UUID, user_id: UUID,
                     member_id: UUID) -> Result[None]:
        role = await self._gate.role_of(workspace_id, user_id)
        if role is None:
            return not_found(WORKSPACE_NOT_FOUND)
        if member_id != user_id and role != WorkspaceRole.OWNER:
            return Failure(ErrorKind.FORBIDDEN, OWNER_ONLY)
        if await self._members.get(workspace_id, member_id) is None:
            return not_found(MEMBER_NOT_FOUND)
        if await self._is_recorded_owner(workspace_id, member_id):
            return Failure(ErrorKind.FORBIDDEN, OWNER_PINNED)

        await self._members.remove(workspace_id, member_id)
        logger.info(
            "member_removed",
            workspace_id=str(workspace_id), member_id=str(member_id), user_id=str(user_id),
        )
        return Ok(None)

    async def _require_owner(self, workspace_id: UUID, user_id: UUID) -> Failure | None:
        role = await self._gate.role_of(workspace_id, user_id)
        if role is None:
            return not_found(WORKSPACE_NOT_FOUND)
        if role != WorkspaceRole.OWNER:
            logger.warning(
                "member_management_forbidden",
                workspace_id=str(workspace_id), user_id=str(user_id), role=role.value,
            )
            return Failure(ErrorKind.FORBIDDEN, OWNER_ONLY)
        return None

    async def _is_recorded_owner(self, workspace_id: UUID, member_id: UUID) -> bool:
        workspace = await self._workspaces.get(workspace_id)
        return workspace is not None and workspace.owner_id == member_id
