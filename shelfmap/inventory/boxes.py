"""Box service — create, read, update, delete and search boxes.

A box may sit at one live location of its own workspace and may carry
one QR code of its own workspace. Both references are checked here,
the same way location creation checks its parent. Non-members get the
same NOT_FOUND as a missing box.
"""

from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.access.membership import MembershipGate
from shelfmap.db.tables import BoxRow
from shelfmap.inventory.short_ids import box_short_id, unique_short_id
from shelfmap.models.common import new_uuid7, utc_now
from shelfmap.models.inventory import (
    Box,
    BoxCreate,
    BoxUpdate,
    DuplicateNameCheck,
    DuplicateNameResult,
    validate_box_create,
    validate_box_update,
)
from shelfmap.models.results import (
    ErrorKind,
    Failure,
    Ok,
    Result,
    not_found,
    validation_error,
)
from shelfmap.repositories.inventory import BoxRepository, QRCodeRepository
from shelfmap.repositories.locations import LocationRepository

logger = structlog.get_logger(__name__)

BOX_NOT_FOUND = "Box not found."
LOCATION_NOT_FOUND = "Location not found."
QR_CODE_NOT_FOUND = "QR code not found."
QR_CODE_TAKEN = "QR code is already assigned to another box."
WORKSPACE_NOT_FOUND = "Workspace not found."

SEARCH_LIMIT_MAX = 100


def to_box(row: BoxRow, qr_code_id: UUID | None) -> Box:
    return Box(
        id=row.id,
        workspace_id=row.workspace_id,
        short_id=row.short_id,
        name=row.name,
        description=row.description,
        tags=list(row.tags or []),
        location_id=row.location_id,
        qr_code_id=qr_code_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class BoxService:

    def __init__(self, session: AsyncSession, gate: MembershipGate) -> None:
        self._session = session
        self._gate = gate
        self._boxes = BoxRepository(session)
        self._qr_codes = QRCodeRepository(session)
        self._locations = LocationRepository(session)

    async def create(self, user_id: UUID, data: BoxCreate) -> Result[Box]:
        checked = validate_box_create(data)
        if isinstance(checked, Failure):
            return checked
        data = checked.value

        if await self._gate.role_of(data.workspace_id, user_id) is None:
            return not_found(WORKSPACE_NOT_FOUND)

        if data.location_id is not None:
            problem = await self._check_location(data.workspace_id, data.location_id)
            if problem:
                return problem

        qr_code = None
        if data.qr_code_id is not None:
            qr_code = await self._qr_codes.get(data.qr_code_id)
            if qr_code is None or qr_code.workspace_id != data.workspace_id:
                return not_found(QR_CODE_NOT_FOUND)
            if qr_code.box_id is not None:
                return Failure(ErrorKind.CONFLICT, QR_CODE_TAKEN)

        short_id = await unique_short_id(box_short_id, self._boxes.short_id_exists)
        if short_id is None:
            return Failure(ErrorKind.INTERNAL, "Could not allocate a box id.")

        try:
            row = await self._boxes.create(
                box_id=new_uuid7(),
                workspace_id=data.workspace_id,
                short_id=short_id,
                name=data.name,
                description=data.description,
                tags=data.tags,
                location_id=data.location_id,
            )
            if qr_code is not None:
                await self._qr_codes.link(qr_code, row.id)
        except SQLAlchemyError as exc:
            return await self._abort(exc, operation="create", workspace_id=data.workspace_id)

        logger.info(
            "box_created",
            box_id=str(row.id), workspace_id=str(row.workspace_id),
            location_id=str(row.location_id) if row.location_id else None,
            qr_code_id=str(qr_code.id) if qr_code else None, user_id=str(user_id),
        )
        return Ok(to_box(row, qr_code.id if qr_code else None))

    async def get(self, box_id: UUID, user_id: UUID) -> Result[Box]:
        loaded = await self._load_for_member(box_id, user_id)
        if isinstance(loaded, Failure):
            return loaded
        row = loaded.value
        qr_code = await self._qr_codes.get_by_box(row.id)
        return Ok(to_box(row, qr_code.id if qr_code else None))

    async def search(self, workspace_id: UUID, user_id: UUID, *,
                     location_id: UUID | None = None, unassigned: bool = False,
                     query: str | None = None, limit: int = 50,
                     offset: int = 0) -> Result[list[Box]]:
        if await self._gate.role_of(workspace_id, user_id) is None:
            return not_found(WORKSPACE_NOT_FOUND)
        if not 1 <= limit <= SEARCH_LIMIT_MAX or offset < 0:
            return validation_error(
                f"limit must be 1-{SEARCH_LIMIT_MAX} and offset must not be negative."
            )

        rows = await self._boxes.search(
            workspace_id, location_id=location_id, unassigned=unassigned,
            query=query.strip() if query else None, limit=limit, offset=offset,
        )
        labels = await self._qr_codes.ids_by_box([r.id for r in rows])
        return Ok([to_box(r, labels.get(r.id)) for r in rows])

    async def check_duplicate(self, user_id: UUID,
                              data: DuplicateNameCheck) -> Result[DuplicateNameResult]:
        """Advisory only: box names are not unique, the UI just warns."""
        if await self._gate.role_of(data.workspace_id, user_id) is None:
            return not_found(WORKSPACE_NOT_FOUND)
        name = data.name.strip()
        if not name:
            return validation_error("Box name must not be empty.")
        count = await self._boxes.count_by_name(data.workspace_id, name, data.exclude_box_id)
        return Ok(DuplicateNameResult(is_duplicate=count > 0, count=count))

    async def update(self, box_id: UUID, user_id: UUID, data: BoxUpdate) -> Result[Box]:
        checked = validate_box_update(data)
        if isinstance(checked, Failure):
            return checked
        data = checked.value
        fields = data.model_fields_set

        loaded = await self._load_for_member(box_id, user_id)
        if isinstance(loaded, Failure):
            return loaded
        row = loaded.value

        if "location_id" in fields and data.location_id is not None:
            problem = await self._check_location(row.workspace_id, data.location_id)
            if problem:
                return problem

        try:
            if "name" in fields:
                row.name = data.name
            if "description" in fields:
                row.description = data.description
            if "tags" in fields:
                row.tags = data.tags
            if "location_id" in fields:
                row.location_id = data.location_id
            row.updated_at = utc_now()
            await self._session.flush()
        except SQLAlchemyError as exc:
            return await self._abort(exc, operation="update", box_id=box_id)

        logger.info(
            "box_updated",
            box_id=str(box_id), fields=sorted(fields),
            location_changed="location_id" in fields, user_id=str(user_id),
        )
        qr_code = await self._qr_codes.get_by_box(row.id)
        return Ok(to_box(row, qr_code.id if qr_code else None))

    async def delete(self, box_id: UUID, user_id: UUID) -> Result[None]:
        """Hard delete; a QR code labelling the box goes back to ``generated``."""
        loaded = await self._load_for_member(box_id, user_id)
        if isinstance(loaded, Failure):
            return loaded

        try:
            released = await self._qr_codes.reset_for_box(box_id)
            await self._boxes.delete(box_id)
        except SQLAlchemyError as exc:
            return await self._abort(exc, operation="delete", box_id=box_id)

        logger.info(
            "box_deleted", box_id=str(box_id), qr_codes_reset=released, user_id=str(user_id),
        )
        return Ok(None)

    async def _load_for_member(self, box_id: UUID, user_id: UUID) -> Result[BoxRow]:
        row = await self._boxes.get(box_id)
        if row is None:
            return not_found(BOX_NOT_FOUND)
        if await self._gate.role_of(row.workspace_id, user_id) is None:
            logger.warning("box_access_denied", box_id=str(box_id), user_id=str(user_id))
            return not_found(BOX_NOT_FOUND)
        return Ok(row)

    async def _check_location(self, workspace_id: UUID,
                              location_id: UUID) -> Failure | None:
        location = await self._locations.get(location_id)
        if location is None or location.is_deleted or location.workspace_id != workspace_id:
            return not_found(LOCATION_NOT_FOUND)
        return None

    async def _abort(self, exc: SQLAlchemyError, *, operation: str, **context) -> Failure:
        await self._session.rollback()
        ctx = {k: str(v) for k, v in context.items()}
        if isinstance(exc, IntegrityError):
            logger.warning("box_write_conflict", operation=operation, **ctx)
            return Failure(ErrorKind.CONFLICT, "The box was changed concurrently.")
        logger.error("box_write_failed", operation=operation, error=str(exc), **ctx)
        return Failure(ErrorKind.INTERNAL, "Failed to save the box.")
