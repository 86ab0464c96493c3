"""Tests for DELETE /v1/account and GET /v1/profiles/me."""

from uuid import UUID

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from shelfmap.api.dependencies import get_identity_revoker
from shelfmap.db.tables import ProfileRow
from shelfmap.identity.revocation import IdentityRevoker


class TestProfileMe:

    @pytest.mark.anyio
    async def test_returns_own_profile(self, client: AsyncClient, auth_headers,
                                       owner_id: UUID) -> None:
        response = await client.get("/v1/profiles/me", headers=auth_headers(owner_id))
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(owner_id)
        assert data["email"] == "owner@example.com"


class TestDeleteAccount:

    @pytest.mark.anyio
    async def test_deletes_account_and_owned_workspaces(self, client: AsyncClient,
                                                        auth_headers, owner_id: UUID,
                                                        workspace_id: UUID) -> None:
        headers = auth_headers(owner_id)
        await client.post(
            "/v1/locations", json={"workspace_id": str(workspace_id), "name": "Garage"},
            headers=headers,
        )

        response = await client.delete("/v1/account", headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Account successfully deleted"
        assert data["workspaces_deleted"] == 1

        profile = await client.get("/v1/profiles/me", headers=headers)
        assert profile.status_code == 404

        again = await client.delete("/v1/account", headers=headers)
        assert again.status_code == 404

    @pytest.mark.anyio
    async def test_identity_revoked_after_response(self, client: AsyncClient,
                                                   auth_headers, owner_id: UUID) -> None:
        from shelfmap.api.main import app

        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(200)

        async def _revoker() -> IdentityRevoker:
            return IdentityRevoker(
                base_url="https://id.example.com", service_key="svc",
                transport=httpx.MockTransport(handler),
            )

        app.dependency_overrides[get_identity_revoker] = _revoker

        response = await client.delete("/v1/account", headers=auth_headers(owner_id))
        assert response.status_code == 200
        assert calls == [f"/admin/users/{owner_id}"]

    @pytest.mark.anyio
    async def test_requires_auth(self, client: AsyncClient) -> None:
        response = await client.delete("/v1/account")
        assert response.status_code == 401

    @pytest.mark.anyio
    async def test_failed_commit_is_500_and_skips_revocation(
        self, client: AsyncClient, db_session, auth_headers, owner_id: UUID,
        workspace_id: UUID, monkeypatch,
    ) -> None:
        from shelfmap.api.main import app

        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(200)

        async def _revoker() -> IdentityRevoker:
            return IdentityRevoker(
                base_url="https://id.example.com", service_key="svc",
                transport=httpx.MockTransport(handler),
            )

        async def _failing_commit() -> None:
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        app.dependency_overrides[get_identity_revoker] = _revoker
        await db_session.commit()
        monkeypatch.setattr(db_session, "commit", _failing_commit)

        response = await client.delete("/v1/account", headers=auth_headers(owner_id))

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to save changes."}
        assert calls == []
        remaining = await db_session.execute(
            select(func.count()).select_from(ProfileRow).where(ProfileRow.id == owner_id)
        )
        assert remaining.scalar_one() == 1
