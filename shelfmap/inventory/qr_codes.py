"""QR code registry — batch generation, scan lookup, and box assignment.

Status transitions are always made through QRCodeRepository.link, so a
code is ``assigned`` exactly while it points at a box. A code can only
label a box of its own workspace, and a box carries at most one code.
"""

from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.access.membership import MembershipGate
from shelfmap.db.tables import QRCodeRow
from shelfmap.inventory.short_ids import is_qr_short_id, qr_short_id, unique_short_id
from shelfmap.models.common import QRStatus, new_uuid7
from shelfmap.models.inventory import QRCode, QRCodeBatchCreate
from shelfmap.models.results import (
    ErrorKind,
    Failure,
    Ok,
    Result,
    not_found,
    validation_error,
)
from shelfmap.repositories.inventory import BoxRepository, QRCodeRepository

logger = structlog.get_logger(__name__)

QR_CODE_NOT_FOUND = "QR code not found."
BOX_NOT_FOUND = "Box not found."
WORKSPACE_NOT_FOUND = "Workspace not found."
INVALID_SHORT_ID = "Invalid QR code id. Expected format: QR-XXXXXX."


def to_qr_code(row: QRCodeRow) -> QRCode:
    return QRCode(
        id=row.id,
        workspace_id=row.workspace_id,
        short_id=row.short_id,
        box_id=row.box_id,
        status=QRStatus(row.status),
        created_at=row.created_at,
    )


class QRCodeService:

    def __init__(self, session: AsyncSession, gate: MembershipGate) -> None:
        self._session = session
        self._gate = gate
        self._qr_codes = QRCodeRepository(session)
        self._boxes = BoxRepository(session)

    async def generate_batch(self, user_id: UUID,
                             data: QRCodeBatchCreate) -> Result[list[QRCode]]:
        if await self._gate.role_of(data.workspace_id, user_id) is None:
            return not_found(WORKSPACE_NOT_FOUND)

        issued: set[str] = set()
        rows: list[QRCodeRow] = []
        try:
            for _ in range(data.quantity):
                short_id = await unique_short_id(
                    qr_short_id, self._qr_codes.short_id_exists, reserved=issued,
                )
                if short_id is None:
                    await self._session.rollback()
                    return Failure(ErrorKind.INTERNAL, "Could not allocate QR code ids.")
                issued.add(short_id)
                rows.append(await self._qr_codes.create(
                    qr_code_id=new_uuid7(), workspace_id=data.workspace_id,
                    short_id=short_id,
                ))
        except SQLAlchemyError as exc:
            return await self._abort(exc, operation="generate_batch")

        logger.info(
            "qr_codes_generated",
            workspace_id=str(data.workspace_id), quantity=len(rows), user_id=str(user_id),
        )
        return Ok([to_qr_code(r) for r in rows])

    async def get_by_short_id(self, short_id: str, user_id: UUID) -> Result[QRCode]:
        """Resolve a scanned sticker. Non-members see NOT_FOUND."""
        loaded = await self._load_for_member(short_id, user_id)
        if isinstance(loaded, Failure):
            return loaded
        return Ok(to_qr_code(loaded.value))

    async def list_for_workspace(self, workspace_id: UUID, user_id: UUID,
                                 status: QRStatus | None = None) -> Result[list[QRCode]]:
        if await self._gate.role_of(workspace_id, user_id) is None:
            return not_found(WORKSPACE_NOT_FOUND)
        rows = await self._qr_codes.list_by_workspace(workspace_id, status)
        return Ok([to_qr_code(r) for r in rows])

    async def assign(self, short_id: str, box_id: UUID, user_id: UUID) -> Result[QRCode]:
        loaded = await self._load_for_member(short_id, user_id)
        if isinstance(loaded, Failure):
            return loaded
        row = loaded.value

        box = await self._boxes.get(box_id)
        if box is None or box.workspace_id != row.workspace_id:
            return not_found(BOX_NOT_FOUND)
        if row.box_id == box_id:
            return Ok(to_qr_code(row))
        if row.box_id is not None:
            return Failure(ErrorKind.CONFLICT, "QR code is already assigned to another box.")
        if await self._qr_codes.get_by_box(box_id) is not None:
            return Failure(ErrorKind.CONFLICT, "Box already has a QR code.")

        try:
            await self._qr_codes.link(row, box_id)
        except SQLAlchemyError as exc:
            return await self._abort(exc, operation="assign", short_id=short_id)

        logger.info(
            "qr_code_assigned",
            qr_code_id=str(row.id), box_id=str(box_id), user_id=str(user_id),
        )
        return Ok(to_qr_code(row))

    async def unassign(self, short_id: str, user_id: UUID) -> Result[QRCode]:
        """Detach the sticker from its box; detaching a free code is a no-op."""
        loaded = await self._load_for_member(short_id, user_id)
        if isinstance(loaded, Failure):
            return loaded
        row = loaded.value
        if row.box_id is None:
            return Ok(to_qr_code(row))

        previous_box_id = row.box_id
        try:
            await self._qr_codes.link(row, None)
        except SQLAlchemyError as exc:
            return await self._abort(exc, operation="unassign", short_id=short_id)

        logger.info(
            "qr_code_unassigned",
            qr_code_id=str(row.id), box_id=str(previous_box_id), user_id=str(user_id),
        )
        return Ok(to_qr_code(row))

    async def _load_for_member(self, short_id: str,
                               user_id: UUID) -> Result[QRCodeRow]:
        if not is_qr_short_id(short_id):
            return validation_error(INVALID_SHORT_ID)
        row = await self._qr_codes.get_by_short_id(short_id)
        if row is None:
            return not_found(QR_CODE_NOT_FOUND)
        if await self._gate.role_of(row.workspace_id, user_id) is None:
            logger.warning("qr_code_access_denied", short_id=short_id, user_id=str(user_id))
            return not_found(QR_CODE_NOT_FOUND)
        return Ok(row)

    async def _abort(self, exc: SQLAlchemyError, *, operation: str, **context) -> Failure:
        await self._session.rollback()
        ctx = {k: str(v) for k, v in context.items()}
        if isinstance(exc, IntegrityError):
            logger.warning("qr_code_write_conflict", operation=operation, **ctx)
            return Failure(ErrorKind.CONFLICT, "The QR code was changed concurrently.")
        logger.error("qr_code_write_failed", operation=operation, error=str(exc), **ctx)
        return Failure(ErrorKind.INTERNAL, "Failed to save QR codes.")
