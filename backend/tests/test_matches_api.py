"""
Tests for the matches API.
"""
import pytest
from httpx import AsyncClient
from uuid import uuid4

from jobmatch.api.deps import get_matcher
from jobmatch.main import app as fastapi_app
from jobmatch.services.job_matching import MatchingError


@pytest.mark.asyncio
async def test_matches_require_auth(async_client: AsyncClient):
    response = await async_client.get("/api/matches")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_matches_reject_unknown_profile(async_client: AsyncClient, db):
    async_client.cookies.set("auth_token", str(uuid4()))
    response = await async_client.get("/api/matches")
    assert response.status_code == 401

    async_client.cookies.set("auth_token", "not-a-uuid")
    response = await async_client.get("/api/matches")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_matches(client: AsyncClient, stored_jobs):
    response = await client.get("/api/matches")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert "timestamp" in body

    data = body["data"]
    assert data["total_jobs"] == 2
    assert [match["external_id"] for match in data["matches"]] == ["recA", "recB"]
    top = data["matches"][0]
    assert top["match_score"] == 100
    assert top["matching_skills"] == ["React", "Node.js"]
    assert top["match_reasons"][0] == "Matched 2 skills: React, Node.js"
    assert data["user_profile"]["email"] == "seeker@example.com"
    assert data["match_stats"]["high_matches"] == 1


@pytest.mark.asyncio
async def test_get_matches_with_filters(client: AsyncClient, stored_jobs):
    response = await client.get("/api/matches", params={"min_score": 50})
    assert [match["external_id"] for match in response.json()["data"]["matches"]] == ["recA"]

    response = await client.get("/api/matches", params={"job_type": "Contract"})
    assert [match["external_id"] for match in response.json()["data"]["matches"]] == ["recB"]

    response = await client.get("/api/matches", params={"required_skills": ["sql", "excel"], "min_skills_match": 2})
    assert [match["external_id"] for match in response.json()["data"]["matches"]] == ["recB"]


@pytest.mark.asyncio
async def test_get_recommendations(client: AsyncClient, stored_jobs):
    response = await client.get("/api/matches", params={"type": "recommendations", "limit": 1})

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data) == 1
    assert data[0]["external_id"] == "recA"


@pytest.mark.asyncio
async def test_get_statistics(client: AsyncClient, stored_jobs):
    response = await client.get("/api/matches", params={"type": "statistics"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_jobs"] == 2
    assert data["high_matches"] == 1
    assert data["low_matches"] == 1
    assert data["top_skills"] == ["React", "Node.js"]


@pytest.mark.asyncio
async def test_invalid_type(client: AsyncClient):
    response = await client.get("/api/matches", params={"type": "everything"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_post_matches(client: AsyncClient, stored_jobs):
    response = await client.post("/api/matches", json={"remote_only": True})

    assert response.status_code == 200
    matches = response.json()["data"]["matches"]
    assert [match["external_id"] for match in matches] == ["recA"]


@pytest.mark.asyncio
async def test_post_matches_validates_body(client: AsyncClient):
    response = await client.post("/api/matches", json={"min_score": 150})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_matching_failure_returns_500(client: AsyncClient):
    class BrokenMatcher:
        async def find_matches(self, user_id, filters=None):
            raise MatchingError("Failed to fetch jobs: connection reset")

    fastapi_app.dependency_overrides[get_matcher] = lambda: BrokenMatcher()

    response = await client.get("/api/matches")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to compute job matches"
