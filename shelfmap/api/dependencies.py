"""FastAPI dependency injection factories.

Service factories take AsyncSession via Depends(get_async_session) so a
whole request shares one Unit-of-Work transaction. get_current_user_id
resolves the caller from the bearer token; handlers never accept a user
id from the request body.
"""

from uuid import UUID

import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.access.members import MemberService
from shelfmap.access.membership import DatabaseMembershipGate
from shelfmap.access.workspaces import WorkspaceService
from shelfmap.api.errors import ApiError
from shelfmap.cascade.orchestrator import CascadeDeletionOrchestrator
from shelfmap.config.settings import Settings, get_settings
from shelfmap.db.session import get_async_session
from shelfmap.hierarchy.service import LocationMutationService
from shelfmap.identity.revocation import IdentityRevoker
from shelfmap.identity.tokens import InvalidTokenError, decode_user_id
from shelfmap.inventory.boxes import BoxService
from shelfmap.inventory.qr_codes import QRCodeService
from shelfmap.repositories.workspace import ProfileRepository

logger = structlog.get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)

# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> UUID:
    if credentials is None:
        raise HTTPException(
            status_code=401, detail="Not authenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_user_id(credentials.credentials, settings)
    except InvalidTokenError as exc:
        logger.info("token_rejected", reason=str(exc))
        raise HTTPException(
            status_code=401, detail="Invalid or expired token.",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


# ---------------------------------------------------------------------------
# Unit of Work
# ---------------------------------------------------------------------------


async def commit_unit_of_work(session: AsyncSession) -> None:
    """Commit the request transaction before the route answers.

    A failed commit is rolled back and reported as 500, so a 2xx response
    (and any background task queued after this call) only follows
    durable writes.
    """
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("commit_failed", error=str(exc))
        raise ApiError(500, "Failed to save changes.") from exc


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


async def get_location_service(
    session: AsyncSession = Depends(get_async_session),
) -> LocationMutationService:
    return LocationMutationService(session, DatabaseMembershipGate(session))


async def get_workspace_service(
    session: AsyncSession = Depends(get_async_session),
) -> WorkspaceService:
    return WorkspaceService(session)


async def get_member_service(
    session: AsyncSession = Depends(get_async_session),
) -> MemberService:
    return MemberService(session, DatabaseMembershipGate(session))


async def get_box_service(
    session: AsyncSession = Depends(get_async_session),
) -> BoxService:
    return BoxService(session, DatabaseMembershipGate(session))


async def get_qr_code_service(
    session: AsyncSession = Depends(get_async_session),
) -> QRCodeService:
    return QRCodeService(session, DatabaseMembershipGate(session))


async def get_identity_revoker(
    settings: Settings = Depends(get_settings),
) -> IdentityRevoker:
    return IdentityRevoker.from_settings(settings)


async def get_cascade_orchestrator(
    session: AsyncSession = Depends(get_async_session),
    revoker: IdentityRevoker = Depends(get_identity_revoker),
) -> CascadeDeletionOrchestrator:
    return CascadeDeletionOrchestrator(
        session, DatabaseMembershipGate(session), revoker=revoker,
    )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


async def get_profile_repo(
    session: AsyncSession = Depends(get_async_session),
) -> ProfileRepository:
    return ProfileRepository(session)
