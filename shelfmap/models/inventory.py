"""Box and QR code models and input validation.

Like locations, request structs carry shape only; validate_box_create and
validate_box_update return tagged results so the service can reject bad
input before any I/O.
"""

from uuid import UUID

from pydantic import Field

from shelfmap.models.common import QRStatus, ShelfmapBase, UTCTimestamp, UUIDv7
from shelfmap.models.results import Ok, Result, validation_error

BOX_NAME_MAX_LENGTH = 100
BOX_DESCRIPTION_MAX_LENGTH = 10_000
QR_BATCH_MIN = 1
QR_BATCH_MAX = 100


class Box(ShelfmapBase):
    """A physical container, optionally placed at a location and labelled by a QR code."""

    id: UUIDv7
    workspace_id: UUID
    short_id: str
    name: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    location_id: UUID | None = None
    qr_code_id: UUID | None = None
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


class BoxCreate(ShelfmapBase):
    workspace_id: UUID
    name: str
    description: str | None = None
    tags: list[str] | None = None
    location_id: UUID | None = None
    qr_code_id: UUID | None = None


class BoxUpdate(ShelfmapBase):
    """Partial update; ``"location_id": null`` takes the box off its location."""

    name: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    location_id: UUID | None = None


class DuplicateNameCheck(ShelfmapBase):
    workspace_id: UUID
    name: str
    exclude_box_id: UUID | None = None


class DuplicateNameResult(ShelfmapBase):
    is_duplicate: bool
    count: int


class QRCode(ShelfmapBase):
    """A printed sticker. ``status`` is ``assigned`` exactly when ``box_id`` is set."""

    id: UUIDv7
    workspace_id: UUID
    short_id: str = Field(..., description="Scannable id, 'QR-' plus six characters.")
    box_id: UUID | None = None
    status: QRStatus
    created_at: UTCTimestamp


class QRCodeBatchCreate(ShelfmapBase):
    workspace_id: UUID
    quantity: int = Field(..., ge=QR_BATCH_MIN, le=QR_BATCH_MAX)


class QRCodeAssignment(ShelfmapBase):
    box_id: UUID


def _check_name(name: str) -> str | None:
    if not name:
        return "Box name must not be empty."
    if len(name) > BOX_NAME_MAX_LENGTH:
        return f"Box name must be at most {BOX_NAME_MAX_LENGTH} characters."
    return None


def _check_description(description: str | None) -> str | None:
    if description is not None and len(description) > BOX_DESCRIPTION_MAX_LENGTH:
        return f"Description must be at most {BOX_DESCRIPTION_MAX_LENGTH} characters."
    return None


def _clean_tags(tags: list[str] | None) -> list[str]:
    """Strip tags, drop blanks and repeats, keep first-seen order."""
    cleaned: list[str] = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def validate_box_create(data: BoxCreate) -> Result[BoxCreate]:
    name = data.name.strip()
    problem = _check_name(name) or _check_description(data.description)
    if problem:
        return validation_error(problem)
    return Ok(data.model_copy(update={"name": name, "tags": _clean_tags(data.tags)}))


def validate_box_update(data: BoxUpdate) -> Result[BoxUpdate]:
    provided = data.model_fields_set & {"name", "description", "tags", "location_id"}
    if not provided:
        return validation_error("At least one field must be provided.")

    update: dict = {}
    if "name" in provided:
        if data.name is None:
            return validation_error("Box name must not be null.")
        name = data.name.strip()
        problem = _check_name(name)
        if problem:
            return validation_error(problem)
        update["name"] = name
    if "description" in provided:
        problem = _check_description(data.description)
        if problem:
            return validation_error(problem)
    if "tags" in provided:
        update["tags"] = _clean_tags(data.tags)

    return Ok(data.model_copy(update=update))
