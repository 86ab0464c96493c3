"""FastAPI workspace member endpoints.

GET    /v1/workspaces/{workspace_id}/members              — list members
POST   /v1/workspaces/{workspace_id}/members              — add a member (owners)
PATCH  /v1/workspaces/{workspace_id}/members/{user_id}    — change role (owners)
DELETE /v1/workspaces/{workspace_id}/members/{user_id}    — remove member or leave
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.access.members import MemberService
from shelfmap.api.dependencies import (
    commit_unit_of_work,
    get_current_user_id,
    get_member_service,
)
from shelfmap.api.errors import unwrap
from shelfmap.db.session import get_async_session
from shelfmap.models.workspace import Member, MemberAdd, MemberRoleUpdate

router = APIRouter(prefix="/v1/workspaces/{workspace_id}/members", tags=["members"])


@router.get("", response_model=list[Member])
async def list_members(
    workspace_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service),
) -> list[Member]:
    return unwrap(await service.list_members(workspace_id, user_id))


@router.post("", status_code=201, response_model=Member)
async def add_member(
    workspace_id: UUID,
    body: MemberAdd,
    user_id: UUID = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service),
    session: AsyncSession = Depends(get_async_session),
) -> Member:
    member = unwrap(await service.add(workspace_id, user_id, body))
    await commit_unit_of_work(session)
    return member


@router.patch("/{member_id}", response_model=Member)
async def change_member_role(
    workspace_id: UUID,
    member_id: UUID,
    body: MemberRoleUpdate,
    user_id: UUID = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service),
    session: AsyncSession = Depends(get_async_session),
) -> Member:
    member = unwrap(await service.change_role(workspace_id, user_id, member_id, body.role))
    await commit_unit_of_work(session)
    return member


@router.delete("/{member_id}", status_code=204)
async def remove_member(
    workspace_id: UUID,
    member_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await service.remove(workspace_id, user_id, member_id))
    await commit_unit_of_work(session)
    return Response(status_code=204)
