"""Tests for project CRUD."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_project(client: AsyncClient):
    resp = await client.post(
        "/api/projects",
        json={
            "title": "Resume",
            "type": "career",
            "data": {"sections": ["education", "experience"]},
        },
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["type"] == "career"
    assert data["status"] == "in_progress"
    assert data["data"] == {"sections": ["education", "experience"]}


@pytest.mark.asyncio
async def test_project_type_validated(client: AsyncClient):
    resp = await client.post("/api/projects", json={"title": "X", "type": "hobby"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_project_status(client: AsyncClient):
    project = (await client.post("/api/projects", json={"title": "Thesis", "type": "academic"})).json()
    resp = await client.put(f"/api/projects/{project['id']}", json={"status": "completed"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"
    assert resp.json()["type"] == "academic"


@pytest.mark.asyncio
async def test_update_missing_project_404(client: AsyncClient):
    resp = await client.put("/api/projects/404", json={"status": "completed"})
    assert resp.status_code == 404
