"""Repository conventions for the Shelfmap persistence layer.

Repositories call add()/flush()/execute() only, never commit().
Routes commit once per request through commit_unit_of_work().

Bulk UPDATE/DELETE statements run with synchronize_session=False, so
reads that may follow a bulk statement in the same session use
populate_existing to bypass stale identity-map entries.
"""

from sqlalchemy.ext.asyncio import AsyncSession

BULK = {"synchronize_session": False}


class SessionRepository:
    """Base class holding the request-scoped session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
