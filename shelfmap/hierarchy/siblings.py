"""Same-level name collision detection.

Two locations collide when they share a parent and their names slugify to
the same label ("Garage", "garage" and "Garáge" all collide). A child may
reuse its parent's name, and cousins in other subtrees never collide.
"""

from collections.abc import Iterable
from uuid import UUID

from shelfmap.db.tables import LocationRow
from shelfmap.hierarchy.paths import last_segment
from shelfmap.repositories.locations import LocationRepository


def find_conflict(siblings: Iterable[LocationRow], candidate_slug: str,
                  exclude_location_id: UUID | None = None) -> LocationRow | None:
    """Return the first sibling whose label equals ``candidate_slug``."""
    for sibling in siblings:
        if sibling.id == exclude_location_id:
            continue
        if last_segment(sibling.path) == candidate_slug:
            return sibling
    return None


class SiblingConflictChecker:
    """Loads the direct children of a parent path and compares labels."""

    def __init__(self, locations: LocationRepository) -> None:
        self._locations = locations

    async def has_conflict(self, workspace_id: UUID, parent_path: str | None,
                           candidate_slug: str,
                           exclude_location_id: UUID | None = None) -> bool:
        siblings = await self._locations.list_children(workspace_id, parent_path)
        return find_conflict(siblings, candidate_slug, exclude_location_id) is not None
