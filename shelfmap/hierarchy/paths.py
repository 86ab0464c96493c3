"""Materialized-path arithmetic for location trees.

Every path starts with the ``root`` anchor label, which is not a level:
``root.garage`` is depth 1, ``root.garage.top_shelf`` is depth 2. Five
levels cover building → room → shelf → bin → compartment.
"""

from shelfmap.models.results import ErrorKind, Failure, Ok, Result

ROOT_LABEL = "root"
SEPARATOR = "."
MAX_DEPTH = 5


def segments(path: str) -> list[str]:
    """Slug segments below the root anchor."""
    labels = path.split(SEPARATOR)
    if labels and labels[0] == ROOT_LABEL:
        labels = labels[1:]
    return labels


def depth(path: str) -> int:
    """Nesting level of a path (root-level locations are 1)."""
    return len(segments(path))


def parent_path(path: str) -> str | None:
    """Path of the parent location, or None for a root-level path."""
    labels = segments(path)
    if len(labels) <= 1:
        return None
    return SEPARATOR.join([ROOT_LABEL, *labels[:-1]])


def last_segment(path: str) -> str:
    return path.rsplit(SEPARATOR, 1)[-1]


def join_path(parent: str | None, slug: str) -> str:
    """Append a slug to a parent path; ``None`` means the root anchor."""
    return f"{parent or ROOT_LABEL}{SEPARATOR}{slug}"


def child_path(parent: str | None, slug: str) -> Result[str]:
    """Build a child path, refusing anything deeper than MAX_DEPTH."""
    path = join_path(parent, slug)
    if depth(path) > MAX_DEPTH:
        return Failure(
            ErrorKind.MAX_DEPTH_EXCEEDED,
            f"Maximum location depth exceeded. Locations can be nested at most {MAX_DEPTH} levels.",
            {"max_depth": MAX_DEPTH, "requested_depth": depth(path)},
        )
    return Ok(path)
