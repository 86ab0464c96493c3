"""Location repository — materialized-path queries and bulk subtree updates."""

from uuid import UUID

from sqlalchemy import String, delete, func, literal, or_, select, update

from shelfmap.db.tables import LocationRow
from shelfmap.hierarchy.paths import ROOT_LABEL, SEPARATOR, depth
from shelfmap.models.common import utc_now
from shelfmap.repositories.base import BULK, SessionRepository


def _subtree(path: str):
    """WHERE clause for ``path`` itself and everything below it."""
    return or_(
        LocationRow.path == path,
        LocationRow.path.startswith(path + SEPARATOR, autoescape=True),
    )


class LocationRepository(SessionRepository):

    async def create(self, *, location_id: UUID, workspace_id: UUID, name: str,
                     path: str, description: str | None = None) -> LocationRow:
        now = utc_now()
        row = LocationRow(
            id=location_id, workspace_id=workspace_id, name=name,
            description=description, path=path, is_deleted=False,
            created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, location_id: UUID) -> LocationRow | None:
        return await self._session.get(LocationRow, location_id, populate_existing=True)

    async def get_active_by_path(self, workspace_id: UUID, path: str) -> LocationRow | None:
        result = await self._session.execute(
            select(LocationRow)
            .where(
                LocationRow.workspace_id == workspace_id,
                LocationRow.is_deleted.is_(False),
                LocationRow.path == path,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_active(self, workspace_id: UUID) -> list[LocationRow]:
        result = await self._session.execute(
            select(LocationRow)
            .where(
                LocationRow.workspace_id == workspace_id,
                LocationRow.is_deleted.is_(False),
            )
            .order_by(LocationRow.path)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_children(self, workspace_id: UUID,
                            parent_path: str | None) -> list[LocationRow]:
        """Direct, non-deleted children of ``parent_path`` (None = root level)."""
        prefix = (parent_path or ROOT_LABEL) + SEPARATOR
        child_depth = (depth(parent_path) if parent_path else 0) + 1
        result = await self._session.execute(
            select(LocationRow)
            .where(
                LocationRow.workspace_id == workspace_id,
                LocationRow.is_deleted.is_(False),
                LocationRow.path.startswith(prefix, autoescape=True),
            )
            .order_by(LocationRow.name)
            .execution_options(populate_existing=True)
        )
        return [row for row in result.scalars().all() if depth(row.path) == child_depth]

    async def rewrite_subtree(self, workspace_id: UUID, old_path: str,
                              new_path: str) -> int:
        """Replace the ``old_path`` prefix with ``new_path`` on a live subtree.

        One UPDATE statement: the renamed node and all its descendants move
        together, keeping every segment after the renamed node.
        """
        result = await self._session.execute(
            update(LocationRow)
            .where(
                LocationRow.workspace_id == workspace_id,
                LocationRow.is_deleted.is_(False),
                _subtree(old_path),
            )
            .values(
                path=literal(new_path, String)
                + func.substr(LocationRow.path, len(old_path) + 1, type_=String),
                updated_at=utc_now(),
            )
            .execution_options(**BULK)
        )
        return result.rowcount

    async def active_subtree_ids(self, workspace_id: UUID, path: str) -> list[UUID]:
        result = await self._session.execute(
            select(LocationRow.id).where(
                LocationRow.workspace_id == workspace_id,
                LocationRow.is_deleted.is_(False),
                _subtree(path),
            )
        )
        return list(result.scalars().all())

    async def mark_deleted(self, location_ids: list[UUID]) -> int:
        if not location_ids:
            return 0
        result = await self._session.execute(
            update(LocationRow)
            .where(LocationRow.id.in_(location_ids))
            .values(is_deleted=True, updated_at=utc_now())
            .execution_options(**BULK)
        )
        return result.rowcount

    async def delete_by_workspace(self, workspace_id: UUID) -> int:
        """Hard delete, including soft-deleted rows."""
        result = await self._session.execute(
            delete(LocationRow)
            .where(LocationRow.workspace_id == workspace_id)
            .execution_options(**BULK)
        )
        return result.rowcount
