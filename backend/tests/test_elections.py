"""
Tests for authentication and election endpoints.
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient


class TestAuthEndpoints:
    """Test cases for account endpoints."""

    @pytest.mark.asyncio
    async def test_register_and_login(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "New.Organiser@example.com", "password": "s3cret-pass", "full_name": "New"},
        )
        assert response.status_code == 201
        assert response.json()["email"] == "new.organiser@example.com"

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "new.organiser@example.com", "password": "s3cret-pass"},
        )
        assert response.status_code == 200
        token = response.json()["access_token"]

        response = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 200
        assert response.json()["full_name"] == "New"

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, test_user):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": test_user.email, "password": "s3cret-pass"},
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "Email already registered"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, test_user):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": "not-the-password"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401


class TestElectionEndpoints:
    """Test cases for election API endpoints."""

    @pytest.mark.asyncio
    async def test_list_elections(self, client: AsyncClient, test_election):
        response = await client.get("/api/v1/elections")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["title"] == test_election.title
        assert data[0]["status"] == "active"
        assert data[0]["is_active"] is True

    @pytest.mark.asyncio
    async def test_get_election(self, client: AsyncClient, test_election):
        response = await client.get(f"/api/v1/elections/{test_election.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(test_election.id)
        assert len(data["candidates"]) == 3
        assert data["voting_policy"] == "single"

    @pytest.mark.asyncio
    async def test_get_election_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/elections/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_create_election(self, client: AsyncClient, auth_headers: dict, test_user):
        start = datetime.utcnow() + timedelta(days=1)
        election_data = {
            "title": "Board Election",
            "description": "Annual board vote",
            "start_time": start.isoformat(),
            "end_time": (start + timedelta(days=3)).isoformat(),
            "voting_policy": "multiple",
            "requires_registration": True,
            "candidates": [
                {"name": "Alice", "description": "Incumbent"},
                {"name": "Bob"},
            ],
        }

        response = await client.post(
            "/api/v1/elections",
            json=election_data,
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Board Election"
        assert data["status"] == "draft"
        assert data["creator_id"] == str(test_user.id)
        assert data["requires_registration"] is True
        assert sorted(c["name"] for c in data["candidates"]) == ["Alice", "Bob"]

    @pytest.mark.asyncio
    async def test_create_election_default_window(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/v1/elections",
            json={
                "title": "Quick Poll",
                "candidates": [{"name": "Yes"}, {"name": "No"}],
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "active"
        start = datetime.fromisoformat(data["start_time"])
        end = datetime.fromisoformat(data["end_time"])
        assert end - start == timedelta(days=7)

    @pytest.mark.asyncio
    async def test_create_election_status_override(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/v1/elections",
            json={
                "title": "Prepared Ballot",
                "status": "draft",
                "candidates": [{"name": "Yes"}, {"name": "No"}],
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["status"] == "draft"

    @pytest.mark.asyncio
    async def test_create_election_needs_two_candidates(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(
            "/api/v1/elections",
            json={"title": "Lonely", "candidates": [{"name": "Only"}]},
            headers=auth_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_election_rejects_inverted_window(self, client: AsyncClient, auth_headers: dict):
        start = datetime.utcnow() + timedelta(days=2)
        response = await client.post(
            "/api/v1/elections",
            json={
                "title": "Backwards",
                "start_time": start.isoformat(),
                "end_time": (start - timedelta(days=1)).isoformat(),
                "candidates": [{"name": "Yes"}, {"name": "No"}],
            },
            headers=auth_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_election_unauthenticated(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/elections",
            json={"title": "Anonymous", "candidates": [{"name": "Yes"}, {"name": "No"}]},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_results(self, client: AsyncClient, test_election):
        first, second = test_election.candidates[0].id, test_election.candidates[1].id
        for candidate_id in (first, first, second):
            response = await client.post(
                f"/api/v1/votes/{test_election.id}",
                json={"candidate_ids": [str(candidate_id)]},
            )
            assert response.status_code == 201

        response = await client.get(f"/api/v1/elections/{test_election.id}/results")

        assert response.status_code == 200
        data = response.json()
        assert data["total_votes"] == 3
        counts = {r["candidate_id"]: r["vote_count"] for r in data["results"]}
        assert counts[str(first)] == 2
        assert counts[str(second)] == 1
        assert sum(counts.values()) == 3
