"""Tests for the study session log and its statistics."""
import pytest
from httpx import AsyncClient

from tests.conftest import USER2


@pytest.mark.asyncio
async def test_create_session(client: AsyncClient):
    resp = await client.post("/api/study-sessions", json={"duration": 25, "subject": "Maths"})
    assert resp.status_code == 201
    data = resp.json()
    assert data["duration"] == 25
    assert data["subject"] == "Maths"
    assert data["type"] == "pomodoro"


@pytest.mark.asyncio
async def test_duration_must_be_positive(client: AsyncClient):
    resp = await client.post("/api/study-sessions", json={"duration": 0})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_sessions_newest_first(client: AsyncClient):
    await client.post("/api/study-sessions", json={"duration": 25, "subject": "First"})
    await client.post("/api/study-sessions", json={"duration": 5, "subject": "Second", "type": "short"})

    resp = await client.get("/api/study-sessions")
    assert [s["subject"] for s in resp.json()] == ["Second", "First"]


@pytest.mark.asyncio
async def test_stats(client: AsyncClient):
    await client.post("/api/study-sessions", json={"duration": 25, "subject": "Maths"})
    await client.post("/api/study-sessions", json={"duration": 50, "subject": "Maths"})
    await client.post("/api/study-sessions", json={"duration": 30})
    await client.post("/api/study-sessions", json={"duration": 90, "subject": "Other user"}, headers=USER2)

    resp = await client.get("/api/study-sessions/stats")
    assert resp.status_code == 200
    data = resp.json()
    assert data["session_count"] == 3
    assert data["total_minutes"] == 105
    assert data["total_formatted"] == "1h 45m"
    assert data["minutes_by_subject"] == {"Maths": 75, "General Study": 30}


@pytest.mark.asyncio
async def test_stats_empty(client: AsyncClient):
    data = (await client.get("/api/study-sessions/stats")).json()
    assert data == {
        "session_count": 0,
        "total_minutes": 0,
        "total_formatted": "0h 0m",
        "minutes_by_subject": {},
    }
