"""FastAPI workspace endpoints.

POST   /v1/workspaces                  — create (caller becomes owner)
GET    /v1/workspaces                  — workspaces the caller belongs to
DELETE /v1/workspaces/{workspace_id}   — owner-only cascade delete
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.access.workspaces import WorkspaceService
from shelfmap.api.dependencies import (
    commit_unit_of_work,
    get_cascade_orchestrator,
    get_current_user_id,
    get_workspace_service,
)
from shelfmap.api.errors import unwrap
from shelfmap.cascade.orchestrator import CascadeDeletionOrchestrator
from shelfmap.db.session import get_async_session
from shelfmap.models.workspace import WorkspaceMembership

router = APIRouter(prefix="/v1/workspaces", tags=["workspaces"])


class CreateWorkspaceRequest(BaseModel):
    name: str


@router.post("", status_code=201, response_model=WorkspaceMembership)
async def create_workspace(
    body: CreateWorkspaceRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: WorkspaceService = Depends(get_workspace_service),
    session: AsyncSession = Depends(get_async_session),
) -> WorkspaceMembership:
    membership = unwrap(await service.create(user_id, body.name))
    await commit_unit_of_work(session)
    return membership


@router.get("", response_model=list[WorkspaceMembership])
async def list_workspaces(
    user_id: UUID = Depends(get_current_user_id),
    service: WorkspaceService = Depends(get_workspace_service),
) -> list[WorkspaceMembership]:
    return await service.list_for_user(user_id)


@router.delete("/{workspace_id}", status_code=204)
async def delete_workspace(
    workspace_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    orchestrator: CascadeDeletionOrchestrator = Depends(get_cascade_orchestrator),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await orchestrator.delete_workspace(workspace_id, user_id))
    await commit_unit_of_work(session)
    return Response(status_code=204)
