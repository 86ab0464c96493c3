"""FastAPI location endpoints.

POST   /v1/locations                                    — create
GET    /v1/locations?workspace_id=...&parent_id=...     — list children
PATCH  /v1/locations/{location_id}                      — rename / describe
DELETE /v1/locations/{location_id}                      — soft delete subtree
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.api.dependencies import (
    commit_unit_of_work,
    get_current_user_id,
    get_location_service,
)
from shelfmap.api.errors import unwrap
from shelfmap.db.session import get_async_session
from shelfmap.hierarchy.service import LocationMutationService
from shelfmap.models.location import Location, LocationCreate, LocationUpdate

router = APIRouter(prefix="/v1/locations", tags=["locations"])


@router.post("", status_code=201, response_model=Location)
async def create_location(
    body: LocationCreate,
    user_id: UUID = Depends(get_current_user_id),
    service: LocationMutationService = Depends(get_location_service),
    session: AsyncSession = Depends(get_async_session),
) -> Location:
    location = unwrap(await service.create(user_id, body))
    await commit_unit_of_work(session)
    return location


@router.get("", response_model=list[Location])
async def list_locations(
    workspace_id: UUID,
    parent_id: UUID | None = None,
    user_id: UUID = Depends(get_current_user_id),
    service: LocationMutationService = Depends(get_location_service),
) -> list[Location]:
    """Direct children of ``parent_id``; root-level locations when omitted."""
    return unwrap(await service.list_children(workspace_id, user_id, parent_id))


@router.patch("/{location_id}", response_model=Location)
async def update_location(
    location_id: UUID,
    body: LocationUpdate,
    user_id: UUID = Depends(get_current_user_id),
    service: LocationMutationService = Depends(get_location_service),
    session: AsyncSession = Depends(get_async_session),
) -> Location:
    location = unwrap(await service.update(location_id, user_id, body))
    await commit_unit_of_work(session)
    return location


@router.delete("/{location_id}", status_code=204)
async def delete_location(
    location_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: LocationMutationService = Depends(get_location_service),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await service.soft_delete(location_id, user_id))
    await commit_unit_of_work(session)
    return Response(status_code=204)
