"""Seed script — load a demo account into the Shelfmap database.

Creates:
1. A demo profile (fixed id, so the dev token stays valid across runs)
2. A "Home" workspace owned by that profile
3. A small location tree (garage, basement, attic with shelves below)
4. A few boxes, two of them with QR codes assigned

Idempotent: safe to run multiple times, skips if the demo profile exists.

Usage:
    python -m scripts.seed          # against DATABASE_URL from .env
"""

import asyncio
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from shelfmap.access.membership import DatabaseMembershipGate
from shelfmap.access.workspaces import WorkspaceService
from shelfmap.config.settings import get_settings
from shelfmap.hierarchy.service import LocationMutationService
from shelfmap.identity.tokens import issue_token
from shelfmap.inventory.boxes import BoxService
from shelfmap.inventory.qr_codes import QRCodeService
from shelfmap.models.inventory import BoxCreate, QRCodeBatchCreate
from shelfmap.models.location import LocationCreate
from shelfmap.models.results import Failure
from shelfmap.repositories.workspace import ProfileRepository

DEMO_USER_ID = UUID("018f2a6e-0000-7000-8000-000000000001")
DEMO_EMAIL = "demo@shelfmap.local"
DEMO_WORKSPACE_NAME = "Home"

# (name, parent name or None)
DEMO_LOCATIONS = [
    ("Garage", None),
    ("Top Shelf", "Garage"),
    ("Workbench", "Garage"),
    ("Basement", None),
    ("Wine Rack", "Basement"),
    ("Attic", None),
]

# (name, location name, tags, with QR code)
DEMO_BOXES = [
    ("Christmas lights", "Top Shelf", ["seasonal"], True),
    ("Power tools", "Workbench", ["tools"], True),
    ("Old photos", "Attic", ["archive", "fragile"], False),
    ("Unsorted cables", None, [], False),
]


class SeedError(RuntimeError):
    pass


def _ok(result):
    if isinstance(result, Failure):
        raise SeedError(f"{result.kind}: {result.message}")
    return result.value


async def seed_demo(session: AsyncSession) -> dict:
    """Seed the demo account into ``session`` without committing.

    Returns dict with keys: created (bool), user_id, workspace_id,
    location_count, box_count.
    """
    profiles = ProfileRepository(session)
    if await profiles.get(DEMO_USER_ID) is not None:
        return {"created": False, "user_id": DEMO_USER_ID}

    await profiles.create(
        profile_id=DEMO_USER_ID, email=DEMO_EMAIL, full_name="Demo User",
    )
    membership = _ok(await WorkspaceService(session).create(DEMO_USER_ID, DEMO_WORKSPACE_NAME))
    workspace_id = membership.workspace.id

    gate = DatabaseMembershipGate(session)
    locations = LocationMutationService(session, gate)
    ids_by_name: dict[str, UUID] = {}
    for name, parent in DEMO_LOCATIONS:
        location = _ok(await locations.create(
            DEMO_USER_ID,
            LocationCreate(
                workspace_id=workspace_id,
                name=name,
                parent_id=ids_by_name[parent] if parent else None,
            ),
        ))
        ids_by_name[name] = location.id

    stickers = _ok(await QRCodeService(session, gate).generate_batch(
        DEMO_USER_ID,
        QRCodeBatchCreate(
            workspace_id=workspace_id,
            quantity=sum(1 for *_, with_qr in DEMO_BOXES if with_qr),
        ),
    ))
    boxes = BoxService(session, gate)
    for name, location, tags, with_qr in DEMO_BOXES:
        _ok(await boxes.create(
            DEMO_USER_ID,
            BoxCreate(
                workspace_id=workspace_id,
                name=name,
                location_id=ids_by_name[location] if location else None,
                tags=tags,
                qr_code_id=stickers.pop().id if with_qr else None,
            ),
        ))

    return {
        "created": True,
        "user_id": DEMO_USER_ID,
        "workspace_id": workspace_id,
        "location_count": len(ids_by_name),
        "box_count": len(DEMO_BOXES),
    }


# ---------------------------------------------------------------------------
# CLI entry point: python -m scripts.seed
# ---------------------------------------------------------------------------


async def _run_seed() -> None:
    from shelfmap.db.session import async_session_factory

    async with async_session_factory() as session:
        result = await seed_demo(session)
        if result["created"]:
            await session.commit()
            print("Seed complete.")
            print(f"  Workspace:  {result['workspace_id']}")
            print(f"  Locations:  {result['location_count']}")
            print(f"  Boxes:      {result['box_count']}")
        else:
            print(f"Demo data already seeded ({DEMO_EMAIL} exists). Skipping.")

    print(f"  User:       {DEMO_USER_ID}")
    print(f"  Dev token:  {issue_token(DEMO_USER_ID, get_settings())}")


if __name__ == "__main__":
    asyncio.run(_run_seed())
