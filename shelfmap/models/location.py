"""Location models and input validation.

Request structs carry shape only; the length and emptiness rules live in
validate_create / validate_update, which return tagged results instead of
raising so the service can short-circuit before touching the database.
"""

from uuid import UUID

from pydantic import Field

from shelfmap.models.common import ShelfmapBase, UTCTimestamp, UUIDv7
from shelfmap.models.results import Ok, Result, validation_error

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class Location(ShelfmapBase):
    """A node in a workspace's storage hierarchy."""

    id: UUIDv7
    workspace_id: UUID
    name: str
    description: str | None = None
    path: str = Field(..., description="Dot-separated slugs, e.g. 'root.garage.top_shelf'.")
    parent_id: UUID | None = None
    depth: int = Field(..., ge=1, description="Nesting level; root-level locations are 1.")
    is_deleted: bool = False
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


class LocationCreate(ShelfmapBase):
    workspace_id: UUID
    name: str
    description: str | None = None
    parent_id: UUID | None = None


class LocationUpdate(ShelfmapBase):
    """Partial update. Only fields present in the request body are applied.

    An explicit ``"description": null`` clears the description; omitting
    the key leaves it untouched (see ``model_fields_set``).
    """

    name: str | None = None
    description: str | None = None


def _check_description(description: str | None) -> str | None:
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        return f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters."
    return None


def _check_name(name: str) -> str | None:
    if not name:
        return "Name must not be empty."
    if len(name) > NAME_MAX_LENGTH:
        return f"Name must be at most {NAME_MAX_LENGTH} characters."
    return None


def validate_create(data: LocationCreate) -> Result[LocationCreate]:
    """Trim the name and enforce length limits for a new location."""
    name = data.name.strip()
    problem = _check_name(name) or _check_description(data.description)
    if problem:
        return validation_error(problem)
    return Ok(data.model_copy(update={"name": name}))


def validate_update(data: LocationUpdate) -> Result[LocationUpdate]:
    """Require at least one field and enforce the same limits as create."""
    provided = data.model_fields_set & {"name", "description"}
    if not provided:
        return validation_error("At least one field (name or description) is required.")

    update: dict = {}
    if "name" in provided:
        if data.name is None:
            return validation_error("Name must not be null.")
        name = data.name.strip()
        problem = _check_name(name)
        if problem:
            return validation_error(problem)
        update["name"] = name

    if "description" in provided:
        problem = _check_description(data.description)
        if problem:
            return validation_error(problem)

    return Ok(data.model_copy(update=update))
