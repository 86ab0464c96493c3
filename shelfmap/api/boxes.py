"""FastAPI box endpoints.

POST   /v1/boxes                                   — create (optional location and QR code)
GET    /v1/boxes?workspace_id=...&location_id=...  — search / list
POST   /v1/boxes/check-duplicate                   — advisory name clash check
GET    /v1/boxes/{box_id}                          — fetch one
PATCH  /v1/boxes/{box_id}                          — partial update / move
DELETE /v1/boxes/{box_id}                          — delete, releasing its QR code
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.api.dependencies import (
    commit_unit_of_work,
    get_box_service,
    get_current_user_id,
)
from shelfmap.api.errors import unwrap
from shelfmap.db.session import get_async_session
from shelfmap.inventory.boxes import BoxService
from shelfmap.models.inventory import (
    Box,
    BoxCreate,
    BoxUpdate,
    DuplicateNameCheck,
    DuplicateNameResult,
)

router = APIRouter(prefix="/v1/boxes", tags=["boxes"])


@router.post("", status_code=201, response_model=Box)
async def create_box(
    body: BoxCreate,
    user_id: UUID = Depends(get_current_user_id),
    service: BoxService = Depends(get_box_service),
    session: AsyncSession = Depends(get_async_session),
) -> Box:
    box = unwrap(await service.create(user_id, body))
    await commit_unit_of_work(session)
    return box


@router.get("", response_model=list[Box])
async def search_boxes(
    workspace_id: UUID,
    location_id: UUID | None = None,
    unassigned: bool = False,
    q: str | None = None,
    limit: int = 50,
    offset: int = 0,
    user_id: UUID = Depends(get_current_user_id),
    service: BoxService = Depends(get_box_service),
) -> list[Box]:
    return unwrap(await service.search(
        workspace_id, user_id, location_id=location_id, unassigned=unassigned,
        query=q, limit=limit, offset=offset,
    ))


@router.post("/check-duplicate", response_model=DuplicateNameResult)
async def check_duplicate_name(
    body: DuplicateNameCheck,
    user_id: UUID = Depends(get_current_user_id),
    service: BoxService = Depends(get_box_service),
) -> DuplicateNameResult:
    return unwrap(await service.check_duplicate(user_id, body))


@router.get("/{box_id}", response_model=Box)
async def get_box(
    box_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: BoxService = Depends(get_box_service),
) -> Box:
    return unwrap(await service.get(box_id, user_id))


@router.patch("/{box_id}", response_model=Box)
async def update_box(
    box_id: UUID,
    body: BoxUpdate,
    user_id: UUID = Depends(get_current_user_id),
    service: BoxService = Depends(get_box_service),
    session: AsyncSession = Depends(get_async_session),
) -> Box:
    box = unwrap(await service.update(box_id, user_id, body))
    await commit_unit_of_work(session)
    return box


@router.delete("/{box_id}", status_code=204)
async def delete_box(
    box_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: BoxService = Depends(get_box_service),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await service.delete(box_id, user_id))
    await commit_unit_of_work(session)
    return Response(status_code=204)
