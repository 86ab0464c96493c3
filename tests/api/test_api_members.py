"""Tests for the /v1/workspaces/{workspace_id}/members endpoints."""

from uuid import UUID

import pytest
from httpx import AsyncClient


class TestMembersApi:

    @pytest.mark.anyio
    async def test_add_change_remove(self, client: AsyncClient, auth_headers,
                                     owner_id: UUID, outsider_id: UUID,
                                     workspace_id: UUID) -> None:
        headers = auth_headers(owner_id)
        base = f"/v1/workspaces/{workspace_id}/members"

        added = await client.post(
            base, json={"user_id": str(outsider_id), "role": "member"}, headers=headers,
        )
        assert added.status_code == 201, added.text
        assert added.json()["email"] == "outsider@example.com"

        duplicate = await client.post(
            base, json={"user_id": str(outsider_id)}, headers=headers,
        )
        assert duplicate.status_code == 409

        changed = await client.patch(
            f"{base}/{outsider_id}", json={"role": "read_only"}, headers=headers,
        )
        assert changed.status_code == 200
        assert changed.json()["role"] == "read_only"

        listed = await client.get(base, headers=auth_headers(outsider_id))
        assert len(listed.json()) == 2

        left = await client.delete(f"{base}/{outsider_id}", headers=auth_headers(outsider_id))
        assert left.status_code == 204
        after = await client.get(base, headers=headers)
        assert [m["user_id"] for m in after.json()] == [str(owner_id)]

    @pytest.mark.anyio
    async def test_owner_cannot_be_removed(self, client: AsyncClient, auth_headers,
                                           owner_id: UUID, workspace_id: UUID) -> None:
        response = await client.delete(
            f"/v1/workspaces/{workspace_id}/members/{owner_id}",
            headers=auth_headers(owner_id),
        )
        assert response.status_code == 403

    @pytest.mark.anyio
    async def test_invalid_role_is_400(self, client: AsyncClient, auth_headers,
                                       owner_id: UUID, outsider_id: UUID,
                                       workspace_id: UUID) -> None:
        response = await client.post(
            f"/v1/workspaces/{workspace_id}/members",
            json={"user_id": str(outsider_id), "role": "admin"},
            headers=auth_headers(owner_id),
        )
        assert response.status_code == 400
