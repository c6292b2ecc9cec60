"""Band and membership endpoint tests."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from setlist.models import Band, User
from setlist.services import bands
from tests.conftest import AuthenticatedClient, make_session_cookie


class TestBands:
    """Tests for band listing and creation."""

    @pytest.mark.asyncio
    async def test_list_bands(self, authenticated_client: AuthenticatedClient, band: Band):
        response = await authenticated_client.get("/api/bands")
        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [band.id]

    @pytest.mark.asyncio
    async def test_list_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/bands")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_band(self, authenticated_client: AuthenticatedClient, user: User):
        response = await authenticated_client.post(
            "/api/bands",
            json={"name": "The Setlists", "description": "Covers"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "The Setlists"
        assert data["created_by"] == user.id

    @pytest.mark.asyncio
    async def test_create_band_blank_name(self, authenticated_client: AuthenticatedClient):
        response = await authenticated_client.post("/api/bands", json={"name": "  "})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_band_detail(
        self, authenticated_client: AuthenticatedClient, band: Band, member_user: User
    ):
        response = await authenticated_client.get(f"/api/bands/{band.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "owner"
        assert {m["email"]: m["role"] for m in data["members"]} == {
            "test@example.com": "owner",
            "member@example.com": "member",
        }

    @pytest.mark.asyncio
    async def test_member_can_view(self, member_client: AuthenticatedClient, band: Band):
        response = await member_client.get(f"/api/bands/{band.id}")
        assert response.status_code == 200
        assert response.json()["role"] == "member"

    @pytest.mark.asyncio
    async def test_non_member_forbidden(
        self, client: AsyncClient, session: AsyncSession, band: Band, other_user: User
    ):
        headers = await make_session_cookie(session, other_user)
        response = await client.get(f"/api/bands/{band.id}", headers=headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unauthenticated_before_membership(self, client: AsyncClient):
        response = await client.get("/api/bands/no-such-band")
        assert response.status_code == 401


class TestInviteMember:
    """Tests for POST /api/bands/{band_id}/members."""

    @pytest.mark.asyncio
    async def test_owner_invites(
        self,
        authenticated_client: AuthenticatedClient,
        session: AsyncSession,
        band: Band,
        other_user: User,
    ):
        response = await authenticated_client.post(
            f"/api/bands/{band.id}/members",
            json={"email": other_user.email, "role": "admin"},
        )
        assert response.status_code == 201
        assert response.json()["role"] == "admin"

        member = await bands.get_member(session, band.id, other_user.id)
        assert member.role == "admin"

    @pytest.mark.asyncio
    async def test_admin_invites_default_role(
        self, admin_client: AuthenticatedClient, band: Band, other_user: User
    ):
        response = await admin_client.post(
            f"/api/bands/{band.id}/members",
            json={"email": other_user.email},
        )
        assert response.status_code == 201
        assert response.json()["role"] == "member"

    @pytest.mark.asyncio
    async def test_member_cannot_invite(
        self, member_client: AuthenticatedClient, band: Band, other_user: User
    ):
        response = await member_client.post(
            f"/api/bands/{band.id}/members",
            json={"email": other_user.email},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_cannot_invite_as_owner(
        self, authenticated_client: AuthenticatedClient, band: Band, other_user: User
    ):
        response = await authenticated_client.post(
            f"/api/bands/{band.id}/members",
            json={"email": other_user.email, "role": "owner"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_user(self, authenticated_client: AuthenticatedClient, band: Band):
        response = await authenticated_client.post(
            f"/api/bands/{band.id}/members",
            json={"email": "stranger@example.com"},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_already_member(
        self, authenticated_client: AuthenticatedClient, band: Band, member_user: User
    ):
        response = await authenticated_client.post(
            f"/api/bands/{band.id}/members",
            json={"email": member_user.email},
        )
        assert response.status_code == 409


class TestRemoveMember:
    """Tests for DELETE /api/bands/{band_id}/members/{user_id}."""

    @pytest.mark.asyncio
    async def test_owner_removes_member(
        self,
        authenticated_client: AuthenticatedClient,
        session: AsyncSession,
        band: Band,
        member_user: User,
    ):
        response = await authenticated_client.delete(f"/api/bands/{band.id}/members/{member_user.id}")
        assert response.status_code == 204
        assert await bands.get_member(session, band.id, member_user.id) is None

    @pytest.mark.asyncio
    async def test_self_removal_rejected(
        self, authenticated_client: AuthenticatedClient, band: Band, user: User
    ):
        response = await authenticated_client.delete(f"/api/bands/{band.id}/members/{user.id}")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_owner_removal_rejected(
        self, admin_client: AuthenticatedClient, band: Band, user: User
    ):
        response = await admin_client.delete(f"/api/bands/{band.id}/members/{user.id}")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_member_cannot_remove(
        self, member_client: AuthenticatedClient, band: Band, admin_user: User
    ):
        response = await member_client.delete(f"/api/bands/{band.id}/members/{admin_user.id}")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_target_not_member(
        self, authenticated_client: AuthenticatedClient, band: Band, other_user: User
    ):
        response = await authenticated_client.delete(f"/api/bands/{band.id}/members/{other_user.id}")
        assert response.status_code == 404
