"""Workspace model — the multi-tenancy boundary for locations, boxes and QR codes."""

from uuid import UUID

from pydantic import Field

from shelfmap.models.common import ShelfmapBase, UTCTimestamp, UUIDv7, WorkspaceRole


class Workspace(ShelfmapBase):
    """Workspace owned by one profile; members join with a role."""

    id: UUIDv7
    owner_id: UUID
    name: str = Field(..., min_length=1, max_length=64)
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


class WorkspaceMembership(ShelfmapBase):
    """A workspace as seen by one of its members."""

    workspace: Workspace
    role: WorkspaceRole


class Profile(ShelfmapBase):
    id: UUID
    email: str
    full_name: str | None = None
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


class Member(ShelfmapBase):
    """One member of a workspace, with profile details."""

    user_id: UUID
    email: str
    full_name: str | None = None
    role: WorkspaceRole
    joined_at: UTCTimestamp


class MemberAdd(ShelfmapBase):
    user_id: UUID
    role: WorkspaceRole = WorkspaceRole.MEMBER


class MemberRoleUpdate(ShelfmapBase):
    role: WorkspaceRole
