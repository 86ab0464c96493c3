"""Shared types, enums, and base models used across Shelfmap domain models."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]


# --- Shared enums ---


class WorkspaceRole(StrEnum):
    """Role of a user inside one workspace."""

    OWNER = "owner"
    MEMBER = "member"
    READ_ONLY = "read_only"


class QRStatus(StrEnum):
    """Lifecycle of a printed QR sticker."""

    GENERATED = "generated"
    PRINTED = "printed"
    ASSIGNED = "assigned"


# --- Base model ---


class ShelfmapBase(BaseModel):
    """Base model with common configuration for all Shelfmap Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }
