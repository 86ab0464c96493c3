"""Cascade deletion — tear down a workspace or a whole account.

Deletion order inside one workspace (dependents first):
1. Detach QR codes from the workspace's boxes (status → generated)
2. Boxes
3. QR codes
4. Locations (hard delete, soft-deleted rows included)
5. Memberships
6. The workspace row

Account deletion runs the same purge for every owned workspace, then
drops the user's remaining memberships and the profile. All steps share
the request transaction; every step is a bulk statement keyed by id, so
a step with nothing to delete is a no-op and a retried call converges.
Identity revocation is separate and best-effort (see revoke_identity).
"""

from dataclasses import dataclass, field
from uuid import UUID

import httpx
import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.access.membership import MembershipGate
from shelfmap.identity.revocation import IdentityRevoker
from shelfmap.models.common import WorkspaceRole
from shelfmap.models.results import ErrorKind, Failure, Ok, Result, not_found
from shelfmap.repositories.inventory import BoxRepository, QRCodeRepository
from shelfmap.repositories.locations import LocationRepository
from shelfmap.repositories.workspace import (
    ProfileRepository,
    WorkspaceMemberRepository,
    WorkspaceRepository,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WorkspacePurge:
    """Row counts removed (or reset) while purging one workspace."""

    workspace_id: UUID
    qr_codes_reset: int
    boxes: int
    qr_codes: int
    locations: int
    members: int


@dataclass
class AccountDeletion:
    user_id: UUID
    workspaces: list[WorkspacePurge] = field(default_factory=list)
    memberships_removed: int = 0


class CascadeDeletionOrchestrator:
    """Ordered, idempotent deletion of workspaces and accounts."""

    def __init__(
        self,
        session: AsyncSession,
        gate: MembershipGate,
        revoker: IdentityRevoker | None = None,
    ) -> None:
        self._session = session
        self._gate = gate
        self._revoker = revoker
        self._profiles = ProfileRepository(session)
        self._workspaces = WorkspaceRepository(session)
        self._members = WorkspaceMemberRepository(session)
        self._locations = LocationRepository(session)
        self._boxes = BoxRepository(session)
        self._qr_codes = QRCodeRepository(session)

    async def delete_workspace(self, workspace_id: UUID,
                               user_id: UUID) -> Result[WorkspacePurge]:
        """Owner-only. Missing workspace → NOT_FOUND, non-owner → FORBIDDEN."""
        if await self._workspaces.get(workspace_id) is None:
            return not_found("Workspace not found.")

        role = await self._gate.role_of(workspace_id, user_id)
        if role != WorkspaceRole.OWNER:
            logger.warning(
                "workspace_delete_forbidden",
                workspace_id=str(workspace_id), user_id=str(user_id),
                role=role.value if role else None,
            )
            return Failure(
                ErrorKind.FORBIDDEN,
                "Only the workspace owner can delete this workspace.",
            )

        try:
            purge = await self._purge_workspace(workspace_id)
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.error(
                "workspace_delete_failed",
                workspace_id=str(workspace_id), user_id=str(user_id), error=str(exc),
            )
            return Failure(ErrorKind.INTERNAL, "Failed to delete workspace.")

        logger.info("workspace_deleted", user_id=str(user_id), **_purge_context(purge))
        return Ok(purge)

    async def delete_account(self, user_id: UUID) -> Result[AccountDeletion]:
        """Remove every workspace the user owns, their memberships, and the profile.

        Self-only: ``user_id`` always comes from the caller's own credentials.
        """
        if await self._profiles.get(user_id) is None:
            return not_found("User account not found.")

        owned = await self._workspaces.list_owned_ids(user_id)
        logger.info(
            "account_deletion_started", user_id=str(user_id), workspace_count=len(owned),
        )

        deletion = AccountDeletion(user_id=user_id)
        try:
            for workspace_id in owned:
                purge = await self._purge_workspace(workspace_id)
                deletion.workspaces.append(purge)
                logger.info("workspace_deleted", user_id=str(user_id), **_purge_context(purge))
            deletion.memberships_removed = await self._members.delete_for_user(user_id)
            await self._profiles.delete(user_id)
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.error("account_deletion_failed", user_id=str(user_id), error=str(exc))
            return Failure(ErrorKind.INTERNAL, "Failed to delete account.")

        logger.info(
            "account_deleted",
            user_id=str(user_id),
            workspaces_deleted=len(deletion.workspaces),
            memberships_removed=deletion.memberships_removed,
        )
        return Ok(deletion)

    async def revoke_identity(self, user_id: UUID) -> bool:
        """Best-effort removal of the auth identity after data deletion committed.

        Never raises for provider errors; returns True only when revoked.
        """
        if self._revoker is None:
            logger.info("identity_revocation_deferred", user_id=str(user_id))
            return False
        try:
            return await self._revoker.revoke(user_id)
        except httpx.HTTPError as exc:
            logger.error("identity_revocation_failed", user_id=str(user_id), error=str(exc))
            return False

    async def _purge_workspace(self, workspace_id: UUID) -> WorkspacePurge:
        qr_codes_reset = await self._qr_codes.reset_for_workspace_boxes(workspace_id)
        boxes = await self._boxes.delete_by_workspace(workspace_id)
        qr_codes = await self._qr_codes.delete_by_workspace(workspace_id)
        locations = await self._locations.delete_by_workspace(workspace_id)
        members = await self._members.delete_by_workspace(workspace_id)
        await self._workspaces.delete(workspace_id)
        return WorkspacePurge(
            workspace_id=workspace_id,
            qr_codes_reset=qr_codes_reset,
            boxes=boxes,
            qr_codes=qr_codes,
            locations=locations,
            members=members,
        )


def _purge_context(purge: WorkspacePurge) -> dict:
    return {
        "workspace_id": str(purge.workspace_id),
        "boxes_deleted": purge.boxes,
        "qr_codes_reset": purge.qr_codes_reset,
        "qr_codes_deleted": purge.qr_codes,
        "locations_deleted": purge.locations,
        "members_deleted": purge.members,
    }
