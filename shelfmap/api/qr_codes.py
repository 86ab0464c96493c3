"""FastAPI QR code endpoints.

POST   /v1/qr-codes/batch                       — generate 1-100 stickers
GET    /v1/qr-codes?workspace_id=...&status=... — list a workspace's stickers
GET    /v1/qr-codes/{short_id}                  — resolve a scanned sticker
PUT    /v1/qr-codes/{short_id}/box              — label a box with the sticker
DELETE /v1/qr-codes/{short_id}/box              — take the sticker off its box
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.api.dependencies import (
    commit_unit_of_work,
    get_current_user_id,
    get_qr_code_service,
)
from shelfmap.api.errors import unwrap
from shelfmap.db.session import get_async_session
from shelfmap.inventory.qr_codes import QRCodeService
from shelfmap.models.common import QRStatus
from shelfmap.models.inventory import QRCode, QRCodeAssignment, QRCodeBatchCreate

router = APIRouter(prefix="/v1/qr-codes", tags=["qr-codes"])


@router.post("/batch", status_code=201, response_model=list[QRCode])
async def generate_qr_codes(
    body: QRCodeBatchCreate,
    user_id: UUID = Depends(get_current_user_id),
    service: QRCodeService = Depends(get_qr_code_service),
    session: AsyncSession = Depends(get_async_session),
) -> list[QRCode]:
    codes = unwrap(await service.generate_batch(user_id, body))
    await commit_unit_of_work(session)
    return codes


@router.get("", response_model=list[QRCode])
async def list_qr_codes(
    workspace_id: UUID,
    status: QRStatus | None = None,
    user_id: UUID = Depends(get_current_user_id),
    service: QRCodeService = Depends(get_qr_code_service),
) -> list[QRCode]:
    return unwrap(await service.list_for_workspace(workspace_id, user_id, status))


@router.get("/{short_id}", response_model=QRCode)
async def get_qr_code(
    short_id: str,
    user_id: UUID = Depends(get_current_user_id),
    service: QRCodeService = Depends(get_qr_code_service),
) -> QRCode:
    return unwrap(await service.get_by_short_id(short_id, user_id))


@router.put("/{short_id}/box", response_model=QRCode)
async def assign_qr_code(
    short_id: str,
    body: QRCodeAssignment,
    user_id: UUID = Depends(get_current_user_id),
    service: QRCodeService = Depends(get_qr_code_service),
    session: AsyncSession = Depends(get_async_session),
) -> QRCode:
    code = unwrap(await service.assign(short_id, body.box_id, user_id))
    await commit_unit_of_work(session)
    return code


@router.delete("/{short_id}/box", response_model=QRCode)
async def unassign_qr_code(
    short_id: str,
    user_id: UUID = Depends(get_current_user_id),
    service: QRCodeService = Depends(get_qr_code_service),
    session: AsyncSession = Depends(get_async_session),
) -> QRCode:
    code = unwrap(await service.unassign(short_id, user_id))
    await commit_unit_of_work(session)
    return code
