"""FastAPI account endpoint.

DELETE /v1/account — delete the caller's account and everything they own.

The deletion is committed before the response is built, and identity
revocation is only queued after that commit succeeded.
"""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.api.dependencies import (
    commit_unit_of_work,
    get_cascade_orchestrator,
    get_current_user_id,
)
from shelfmap.api.errors import unwrap
from shelfmap.cascade.orchestrator import CascadeDeletionOrchestrator
from shelfmap.db.session import get_async_session

router = APIRouter(prefix="/v1/account", tags=["account"])


class DeleteAccountResponse(BaseModel):
    message: str
    workspaces_deleted: int


@router.delete("", response_model=DeleteAccountResponse)
async def delete_account(
    background_tasks: BackgroundTasks,
    user_id: UUID = Depends(get_current_user_id),
    orchestrator: CascadeDeletionOrchestrator = Depends(get_cascade_orchestrator),
    session: AsyncSession = Depends(get_async_session),
) -> DeleteAccountResponse:
    deletion = unwrap(await orchestrator.delete_account(user_id))
    await commit_unit_of_work(session)
    background_tasks.add_task(orchestrator.revoke_identity, user_id)
    return DeleteAccountResponse(
        message="Account successfully deleted",
        workspaces_deleted=len(deletion.workspaces),
    )
