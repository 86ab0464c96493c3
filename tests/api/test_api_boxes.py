"""Tests for the /v1/boxes endpoints."""

from uuid import UUID

import pytest
from httpx import AsyncClient


async def _location(client: AsyncClient, headers: dict, workspace_id: UUID,
                    name: str = "Garage") -> dict:
    response = await client.post(
        "/v1/locations", json={"workspace_id": str(workspace_id), "name": name},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestBoxesApi:

    @pytest.mark.anyio
    async def test_create_fetch_move_delete(self, client: AsyncClient, auth_headers,
                                            owner_id: UUID, workspace_id: UUID) -> None:
        headers = auth_headers(owner_id)
        garage = await _location(client, headers, workspace_id)

        created = await client.post(
            "/v1/boxes",
            json={"workspace_id": str(workspace_id), "name": "Lights",
                  "location_id": garage["id"], "tags": ["xmas"]},
            headers=headers,
        )
        assert created.status_code == 201, created.text
        box = created.json()
        assert box["location_id"] == garage["id"]
        assert box["tags"] == ["xmas"]

        fetched = await client.get(f"/v1/boxes/{box['id']}", headers=headers)
        assert fetched.json()["name"] == "Lights"

        moved = await client.patch(
            f"/v1/boxes/{box['id']}", json={"location_id": None}, headers=headers,
        )
        assert moved.status_code == 200
        assert moved.json()["location_id"] is None

        deleted = await client.delete(f"/v1/boxes/{box['id']}", headers=headers)
        assert deleted.status_code == 204
        gone = await client.get(f"/v1/boxes/{box['id']}", headers=headers)
        assert gone.status_code == 404

    @pytest.mark.anyio
    async def test_deleted_location_is_404(self, client: AsyncClient, auth_headers,
                                           owner_id: UUID, workspace_id: UUID) -> None:
        headers = auth_headers(owner_id)
        garage = await _location(client, headers, workspace_id)
        await client.delete(f"/v1/locations/{garage['id']}", headers=headers)

        response = await client.post(
            "/v1/boxes",
            json={"workspace_id": str(workspace_id), "name": "Lights",
                  "location_id": garage["id"]},
            headers=headers,
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Location not found."}

    @pytest.mark.anyio
    async def test_search_and_duplicate_check(self, client: AsyncClient, auth_headers,
                                              owner_id: UUID, workspace_id: UUID) -> None:
        headers = auth_headers(owner_id)
        for name in ("Lights", "Cables"):
            await client.post(
                "/v1/boxes", json={"workspace_id": str(workspace_id), "name": name},
                headers=headers,
            )

        found = await client.get(
            "/v1/boxes", params={"workspace_id": str(workspace_id), "q": "light"},
            headers=headers,
        )
        assert [b["name"] for b in found.json()] == ["Lights"]

        check = await client.post(
            "/v1/boxes/check-duplicate",
            json={"workspace_id": str(workspace_id), "name": "cables"},
            headers=headers,
        )
        assert check.json() == {"is_duplicate": True, "count": 1}

    @pytest.mark.anyio
    async def test_non_member_is_404(self, client: AsyncClient, auth_headers,
                                     outsider_id: UUID, workspace_id: UUID) -> None:
        response = await client.post(
            "/v1/boxes", json={"workspace_id": str(workspace_id), "name": "Mine"},
            headers=auth_headers(outsider_id),
        )
        assert response.status_code == 404

    @pytest.mark.anyio
    async def test_assigned_qr_code_is_409(self, client: AsyncClient, auth_headers,
                                           owner_id: UUID, workspace_id: UUID) -> None:
        headers = auth_headers(owner_id)
        batch = await client.post(
            "/v1/qr-codes/batch", json={"workspace_id": str(workspace_id), "quantity": 1},
            headers=headers,
        )
        qr_code_id = batch.json()[0]["id"]
        body = {"workspace_id": str(workspace_id), "name": "A", "qr_code_id": qr_code_id}
        first = await client.post("/v1/boxes", json=body, headers=headers)
        assert first.status_code == 201

        second = await client.post("/v1/boxes", json={**body, "name": "B"}, headers=headers)
        assert second.status_code == 409
        assert second.json() == {"error": "QR code is already assigned to another box."}

    @pytest.mark.anyio
    async def test_missing_token(self, client: AsyncClient, workspace_id: UUID) -> None:
        response = await client.get("/v1/boxes", params={"workspace_id": str(workspace_id)})
        assert response.status_code == 401
