"""Location mutation service — create, rename, soft-delete and list locations.

Flow per operation:
1. Validate input (no I/O)
2. Load the location / parent and authorize through the MembershipGate
3. Compute the path and check same-level collisions
4. Mutate inside the request transaction; renames and deletes touch the
   whole subtree with one bulk statement each

Non-members always get the same NOT_FOUND as a missing location.
Returns Ok/Failure values; only unexpected errors propagate as exceptions.
"""

from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.access.membership import MembershipGate
from shelfmap.db.tables import LocationRow
from shelfmap.hierarchy.paths import child_path, depth, last_segment, parent_path
from shelfmap.hierarchy.siblings import SiblingConflictChecker
from shelfmap.hierarchy.slug import slugify
from shelfmap.models.common import new_uuid7, utc_now
from shelfmap.models.location import (
    Location,
    LocationCreate,
    LocationUpdate,
    validate_create,
    validate_update,
)
from shelfmap.models.results import (
    ErrorKind,
    Failure,
    Ok,
    Result,
    not_found,
    validation_error,
)
from shelfmap.repositories.inventory import BoxRepository
from shelfmap.repositories.locations import LocationRepository

logger = structlog.get_logger(__name__)

LOCATION_NOT_FOUND = "Location not found."
WORKSPACE_NOT_FOUND = "Workspace not found."
PARENT_NOT_FOUND = "Parent location not found."
SIBLING_CONFLICT = "A location with this name already exists at this level."
EMPTY_SLUG = "Name must contain at least one letter or digit."


def to_location(row: LocationRow, parent_id: UUID | None) -> Location:
    return Location(
        id=row.id,
        workspace_id=row.workspace_id,
        name=row.name,
        description=row.description,
        path=row.path,
        parent_id=parent_id,
        depth=depth(row.path),
        is_deleted=row.is_deleted,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class LocationMutationService:
    """Orchestrates location writes for one request-scoped session."""

    def __init__(self, session: AsyncSession, gate: MembershipGate) -> None:
        self._session = session
        self._gate = gate
        self._locations = LocationRepository(session)
        self._boxes = BoxRepository(session)
        self._siblings = SiblingConflictChecker(self._locations)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, user_id: UUID, data: LocationCreate) -> Result[Location]:
        checked = validate_create(data)
        if isinstance(checked, Failure):
            return checked
        data = checked.value

        slug = slugify(data.name)
        if not slug:
            return validation_error(EMPTY_SLUG)

        if await self._gate.role_of(data.workspace_id, user_id) is None:
            logger.warning(
                "location_create_denied",
                workspace_id=str(data.workspace_id), user_id=str(user_id),
            )
            return not_found(WORKSPACE_NOT_FOUND)

        parent: LocationRow | None = None
        if data.parent_id is not None:
            parent = await self._locations.get(data.parent_id)
            if (
                parent is None
                or parent.is_deleted
                or parent.workspace_id != data.workspace_id
            ):
                return not_found(PARENT_NOT_FOUND)

        parent_location_path = parent.path if parent else None
        built = child_path(parent_location_path, slug)
        if isinstance(built, Failure):
            return built

        if await self._siblings.has_conflict(data.workspace_id, parent_location_path, slug):
            return Failure(ErrorKind.CONFLICT, SIBLING_CONFLICT)

        try:
            row = await self._locations.create(
                location_id=new_uuid7(),
                workspace_id=data.workspace_id,
                name=data.name,
                description=data.description,
                path=built.value,
            )
        except SQLAlchemyError as exc:
            return await self._abort(
                exc, operation="create", workspace_id=data.workspace_id,
            )

        logger.info(
            "location_created",
            location_id=str(row.id), workspace_id=str(row.workspace_id),
            path=row.path, user_id=str(user_id),
        )
        return Ok(to_location(row, parent.id if parent else None))

    # ------------------------------------------------------------------
    # Update (rename cascades to descendants)
    # ------------------------------------------------------------------

    async def update(self, location_id: UUID, user_id: UUID,
                     data: LocationUpdate) -> Result[Location]:
        checked = validate_update(data)
        if isinstance(checked, Failure):
            return checked
        data = checked.value
        fields = data.model_fields_set

        new_slug: str | None = None
        if "name" in fields:
            new_slug = slugify(data.name)
            if not new_slug:
                return validation_error(EMPTY_SLUG)

        loaded = await self._load_for_member(location_id, user_id)
        if isinstance(loaded, Failure):
            return loaded
        row = loaded.value
        workspace_id = row.workspace_id

        old_path = row.path
        new_path: str | None = None
        if new_slug is not None and new_slug != last_segment(old_path):
            parent_location_path = parent_path(old_path)
            built = child_path(parent_location_path, new_slug)
            if isinstance(built, Failure):
                return built
            if await self._siblings.has_conflict(
                workspace_id, parent_location_path, new_slug,
                exclude_location_id=row.id,
            ):
                return Failure(ErrorKind.CONFLICT, SIBLING_CONFLICT)
            new_path = built.value

        try:
            if "name" in fields:
                row.name = data.name
            if "description" in fields:
                row.description = data.description
            row.updated_at = utc_now()
            await self._session.flush()

            moved = 0
            if new_path is not None:
                moved = await self._locations.rewrite_subtree(
                    workspace_id, old_path, new_path,
                )
                await self._session.refresh(row)
        except SQLAlchemyError as exc:
            return await self._abort(
                exc, operation="update", location_id=location_id,
                workspace_id=workspace_id,
            )

        if new_path is not None:
            logger.info(
                "location_renamed",
                location_id=str(location_id), old_path=old_path,
                new_path=new_path, rows_moved=moved, user_id=str(user_id),
            )
        return Ok(to_location(row, await self._parent_id_of(row)))

    # ------------------------------------------------------------------
    # Soft delete (subtree + box unassignment)
    # ------------------------------------------------------------------

    async def soft_delete(self, location_id: UUID, user_id: UUID) -> Result[None]:
        loaded = await self._load_for_member(location_id, user_id)
        if isinstance(loaded, Failure):
            return loaded
        row = loaded.value
        workspace_id = row.workspace_id

        try:
            affected = await self._locations.active_subtree_ids(workspace_id, row.path)
            await self._locations.mark_deleted(affected)
            unassigned = await self._boxes.unassign_locations(affected)
        except SQLAlchemyError as exc:
            return await self._abort(
                exc, operation="soft_delete", location_id=location_id,
                workspace_id=workspace_id,
            )

        logger.info(
            "location_deleted",
            location_id=str(location_id), workspace_id=str(workspace_id),
            locations_deleted=len(affected), boxes_unassigned=unassigned,
            user_id=str(user_id),
        )
        return Ok(None)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_children(self, workspace_id: UUID, user_id: UUID,
                            parent_id: UUID | None = None) -> Result[list[Location]]:
        """Direct children of ``parent_id``, or root-level locations."""
        if await self._gate.role_of(workspace_id, user_id) is None:
            return not_found(WORKSPACE_NOT_FOUND)

        parent: LocationRow | None = None
        if parent_id is not None:
            parent = await self._locations.get(parent_id)
            if parent is None or parent.is_deleted or parent.workspace_id != workspace_id:
                return not_found(PARENT_NOT_FOUND)

        rows = await self._locations.list_children(
            workspace_id, parent.path if parent else None,
        )
        return Ok([to_location(r, parent_id) for r in rows])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load_for_member(self, location_id: UUID,
                               user_id: UUID) -> Result[LocationRow]:
        row = await self._locations.get(location_id)
        if row is None or row.is_deleted:
            return not_found(LOCATION_NOT_FOUND)
        if await self._gate.role_of(row.workspace_id, user_id) is None:
            logger.warning(
                "location_access_denied",
                location_id=str(location_id), user_id=str(user_id),
            )
            return not_found(LOCATION_NOT_FOUND)
        return Ok(row)

    async def _parent_id_of(self, row: LocationRow) -> UUID | None:
        parent_location_path = parent_path(row.path)
        if parent_location_path is None:
            return None
        parent = await self._locations.get_active_by_path(
            row.workspace_id, parent_location_path,
        )
        return parent.id if parent else None

    async def _abort(self, exc: SQLAlchemyError, *, operation: str,
                     **context) -> Failure:
        """Roll back the request transaction and translate the error."""
        await self._session.rollback()
        ctx = {k: str(v) for k, v in context.items()}
        if isinstance(exc, IntegrityError):
            logger.warning("location_path_conflict", operation=operation, **ctx)
            return Failure(ErrorKind.CONFLICT, SIBLING_CONFLICT)
        logger.error(
            "location_mutation_failed", operation=operation, error=str(exc), **ctx,
        )
        return Failure(ErrorKind.INTERNAL, "Failed to update locations.")
