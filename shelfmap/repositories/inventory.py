"""Box and QR code repositories."""

from uuid import UUID

from sqlalchemy import delete, func, select, update

from shelfmap.db.tables import BoxRow, QRCodeRow
from shelfmap.models.common import QRStatus, utc_now
from shelfmap.repositories.base import BULK, SessionRepository


class BoxRepository(SessionRepository):

    async def create(self, *, box_id: UUID, workspace_id: UUID, short_id: str,
                     name: str, location_id: UUID | None = None,
                     description: str | None = None,
                     tags: list[str] | None = None) -> BoxRow:
        now = utc_now()
        row = BoxRow(
            id=box_id, workspace_id=workspace_id, location_id=location_id,
            short_id=short_id, name=name, description=description,
            tags=tags or [], created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, box_id: UUID) -> BoxRow | None:
        return await self._session.get(BoxRow, box_id, populate_existing=True)

    async def short_id_exists(self, short_id: str) -> bool:
        result = await self._session.execute(
            select(BoxRow.id).where(BoxRow.short_id == short_id)
        )
        return result.first() is not None

    async def list_by_workspace(self, workspace_id: UUID) -> list[BoxRow]:
        result = await self._session.execute(
            select(BoxRow)
            .where(BoxRow.workspace_id == workspace_id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def search(self, workspace_id: UUID, *, location_id: UUID | None = None,
                     unassigned: bool = False, query: str | None = None,
                     limit: int = 50, offset: int = 0) -> list[BoxRow]:
        """Boxes of a workspace, newest first, optionally narrowed.

        ``query`` matches name or description case-insensitively.
        ``unassigned`` keeps only boxes without a location and wins over
        ``location_id``.
        """
        stmt = select(BoxRow).where(BoxRow.workspace_id == workspace_id)
        if unassigned:
            stmt = stmt.where(BoxRow.location_id.is_(None))
        elif location_id is not None:
            stmt = stmt.where(BoxRow.location_id == location_id)
        if query:
            pattern = f"%{query.lower()}%"
            stmt = stmt.where(
                func.lower(BoxRow.name).like(pattern)
                | func.lower(func.coalesce(BoxRow.description, "")).like(pattern)
            )
        result = await self._session.execute(
            stmt.order_by(BoxRow.created_at.desc(), BoxRow.id.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def count_by_name(self, workspace_id: UUID, name: str,
                            exclude_box_id: UUID | None = None) -> int:
        """Boxes whose name equals ``name``, ignoring case."""
        stmt = (
            select(func.count())
            .select_from(BoxRow)
            .where(
                BoxRow.workspace_id == workspace_id,
                func.lower(BoxRow.name) == name.lower(),
            )
        )
        if exclude_box_id is not None:
            stmt = stmt.where(BoxRow.id != exclude_box_id)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def unassign_locations(self, location_ids: list[UUID]) -> int:
        """Clear location_id on every box pointing into ``location_ids``."""
        if not location_ids:
            return 0
        result = await self._session.execute(
            update(BoxRow)
            .where(BoxRow.location_id.in_(location_ids))
            .values(location_id=None, updated_at=utc_now())
            .execution_options(**BULK)
        )
        return result.rowcount

    async def delete(self, box_id: UUID) -> int:
        result = await self._session.execute(
            delete(BoxRow).where(BoxRow.id == box_id).execution_options(**BULK)
        )
        return result.rowcount

    async def delete_by_workspace(self, workspace_id: UUID) -> int:
        result = await self._session.execute(
            delete(BoxRow)
            .where(BoxRow.workspace_id == workspace_id)
            .execution_options(**BULK)
        )
        return result.rowcount


class QRCodeRepository(SessionRepository):

    async def create(self, *, qr_code_id: UUID, workspace_id: UUID, short_id: str,
                     box_id: UUID | None = None) -> QRCodeRow:
        row = QRCodeRow(
            id=qr_code_id, workspace_id=workspace_id, short_id=short_id,
            box_id=box_id,
            status=QRStatus.ASSIGNED.value if box_id else QRStatus.GENERATED.value,
            created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, qr_code_id: UUID) -> QRCodeRow | None:
        return await self._session.get(QRCodeRow, qr_code_id, populate_existing=True)

    async def get_by_short_id(self, short_id: str) -> QRCodeRow | None:
        result = await self._session.execute(
            select(QRCodeRow)
            .where(QRCodeRow.short_id == short_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get_by_box(self, box_id: UUID) -> QRCodeRow | None:
        result = await self._session.execute(
            select(QRCodeRow)
            .where(QRCodeRow.box_id == box_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def ids_by_box(self, box_ids: list[UUID]) -> dict[UUID, UUID]:
        """Map box id → id of the QR code labelling it."""
        if not box_ids:
            return {}
        result = await self._session.execute(
            select(QRCodeRow.box_id, QRCodeRow.id).where(QRCodeRow.box_id.in_(box_ids))
        )
        return {box_id: qr_id for box_id, qr_id in result.all()}

    async def short_id_exists(self, short_id: str) -> bool:
        result = await self._session.execute(
            select(QRCodeRow.id).where(QRCodeRow.short_id == short_id)
        )
        return result.first() is not None

    async def list_by_workspace(self, workspace_id: UUID,
                                status: QRStatus | None = None) -> list[QRCodeRow]:
        stmt = select(QRCodeRow).where(QRCodeRow.workspace_id == workspace_id)
        if status is not None:
            stmt = stmt.where(QRCodeRow.status == status.value)
        result = await self._session.execute(
            stmt.order_by(QRCodeRow.created_at.desc(), QRCodeRow.short_id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def link(self, row: QRCodeRow, box_id: UUID | None) -> QRCodeRow:
        """Point ``row`` at ``box_id`` (None detaches); status follows the link."""
        row.box_id = box_id
        row.status = QRStatus.ASSIGNED.value if box_id else QRStatus.GENERATED.value
        await self._session.flush()
        return row

    async def reset_for_box(self, box_id: UUID) -> int:
        result = await self._session.execute(
            update(QRCodeRow)
            .where(QRCodeRow.box_id == box_id)
            .values(box_id=None, status=QRStatus.GENERATED.value)
            .execution_options(**BULK)
        )
        return result.rowcount

    async def reset_for_workspace_boxes(self, workspace_id: UUID) -> int:
        """Detach QR codes from the boxes of a workspace (status → generated)."""
        workspace_boxes = select(BoxRow.id).where(BoxRow.workspace_id == workspace_id)
        result = await self._session.execute(
            update(QRCodeRow)
            .where(QRCodeRow.box_id.in_(workspace_boxes))
            .values(box_id=None, status=QRStatus.GENERATED.value)
            .execution_options(**BULK)
        )
        return result.rowcount

    async def delete_by_workspace(self, workspace_id: UUID) -> int:
        result = await self._session.execute(
            delete(QRCodeRow)
            .where(QRCodeRow.workspace_id == workspace_id)
            .execution_options(**BULK)
        )
        return result.rowcount
