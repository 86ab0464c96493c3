"""Tests for LocationRepository — prefix queries and bulk subtree statements."""

from uuid import UUID

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from shelfmap.repositories.locations import LocationRepository


async def _seed(repo: LocationRepository, workspace_id: UUID, *paths: str) -> dict:
    rows = {}
    for path in paths:
        rows[path] = await repo.create(
            location_id=uuid7(), workspace_id=workspace_id,
            name=path.rsplit(".", 1)[-1], path=path,
        )
    return rows


class TestLocationRepository:

    @pytest.mark.anyio
    async def test_create_and_get(self, db_session: AsyncSession, workspace_id: UUID) -> None:
        repo = LocationRepository(db_session)
        lid = uuid7()
        row = await repo.create(
            location_id=lid, workspace_id=workspace_id, name="Garage",
            path="root.garage", description="Detached",
        )
        assert row.id == lid
        fetched = await repo.get(lid)
        assert fetched is not None
        assert fetched.description == "Detached"
        assert fetched.is_deleted is False

    @pytest.mark.anyio
    async def test_get_nonexistent(self, db_session: AsyncSession) -> None:
        assert await LocationRepository(db_session).get(uuid7()) is None

    @pytest.mark.anyio
    async def test_get_active_by_path(self, db_session: AsyncSession,
                                      workspace_id: UUID) -> None:
        repo = LocationRepository(db_session)
        rows = await _seed(repo, workspace_id, "root.garage")
        found = await repo.get_active_by_path(workspace_id, "root.garage")
        assert found.id == rows["root.garage"].id

        await repo.mark_deleted([found.id])
        assert await repo.get_active_by_path(workspace_id, "root.garage") is None

    @pytest.mark.anyio
    async def test_list_children_direct_only(self, db_session: AsyncSession,
                                             workspace_id: UUID) -> None:
        repo = LocationRepository(db_session)
        await _seed(
            repo, workspace_id,
            "root.garage", "root.garage.shelf", "root.garage.shelf.bin", "root.attic",
        )
        roots = await repo.list_children(workspace_id, None)
        assert sorted(r.path for r in roots) == ["root.attic", "root.garage"]

        children = await repo.list_children(workspace_id, "root.garage")
        assert [r.path for r in children] == ["root.garage.shelf"]

    @pytest.mark.anyio
    async def test_underscore_is_not_a_wildcard(self, db_session: AsyncSession,
                                                workspace_id: UUID) -> None:
        repo = LocationRepository(db_session)
        await _seed(repo, workspace_id, "root.a_b", "root.a_b.x", "root.axb", "root.axb.y")
        children = await repo.list_children(workspace_id, "root.a_b")
        assert [r.path for r in children] == ["root.a_b.x"]

    @pytest.mark.anyio
    async def test_rewrite_subtree(self, db_session: AsyncSession,
                                   workspace_id: UUID) -> None:
        repo = LocationRepository(db_session)
        rows = await _seed(
            repo, workspace_id,
            "root.garage", "root.garage.shelf", "root.garage.shelf.bin", "root.garage_2",
        )
        moved = await repo.rewrite_subtree(workspace_id, "root.garage", "root.shed")
        assert moved == 3

        assert (await repo.get(rows["root.garage"].id)).path == "root.shed"
        assert (await repo.get(rows["root.garage.shelf"].id)).path == "root.shed.shelf"
        assert (await repo.get(rows["root.garage.shelf.bin"].id)).path == "root.shed.shelf.bin"
        assert (await repo.get(rows["root.garage_2"].id)).path == "root.garage_2"

    @pytest.mark.anyio
    async def test_rewrite_subtree_is_workspace_scoped(self, db_session: AsyncSession,
                                                       owner_id: UUID, workspace_id: UUID,
                                                       make_workspace) -> None:
        other = await make_workspace(owner_id, "Office")
        repo = LocationRepository(db_session)
        theirs = await _seed(repo, other, "root.garage")
        await _seed(repo, workspace_id, "root.garage")

        await repo.rewrite_subtree(workspace_id, "root.garage", "root.shed")
        assert (await repo.get(theirs["root.garage"].id)).path == "root.garage"

    @pytest.mark.anyio
    async def test_active_subtree_ids_and_mark_deleted(self, db_session: AsyncSession,
                                                       workspace_id: UUID) -> None:
        repo = LocationRepository(db_session)
        rows = await _seed(
            repo, workspace_id, "root.garage", "root.garage.shelf", "root.attic",
        )
        ids = await repo.active_subtree_ids(workspace_id, "root.garage")
        assert set(ids) == {rows["root.garage"].id, rows["root.garage.shelf"].id}

        assert await repo.mark_deleted(ids) == 2
        assert await repo.mark_deleted([]) == 0
        remaining = await repo.list_active(workspace_id)
        assert [r.path for r in remaining] == ["root.attic"]

    @pytest.mark.anyio
    async def test_delete_by_workspace_includes_soft_deleted(
        self, db_session: AsyncSession, workspace_id: UUID,
    ) -> None:
        repo = LocationRepository(db_session)
        rows = await _seed(repo, workspace_id, "root.garage", "root.attic")
        await repo.mark_deleted([rows["root.attic"].id])

        assert await repo.delete_by_workspace(workspace_id) == 2
        assert await repo.get(rows["root.attic"].id) is None
        assert await repo.delete_by_workspace(workspace_id) == 0
