"""Tests for note CRUD and per-user isolation."""
import pytest
from httpx import AsyncClient

from tests.conftest import USER1, USER2


@pytest.mark.asyncio
async def test_create_note(client: AsyncClient):
    resp = await client.post(
        "/api/notes",
        json={"title": "Thermodynamics", "content": "First law...", "tags": ["physics", "exam"]},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["title"] == "Thermodynamics"
    assert data["tags"] == ["physics", "exam"]
    assert data["user_id"] == 1
    assert isinstance(data["id"], int)
    assert data["created_at"]
    assert data["updated_at"]


@pytest.mark.asyncio
async def test_create_note_requires_title(client: AsyncClient):
    resp = await client.post("/api/notes", json={"title": "", "content": "x"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_notes_newest_first(client: AsyncClient):
    await client.post("/api/notes", json={"title": "A", "content": "a"})
    await client.post("/api/notes", json={"title": "B", "content": "b"})

    resp = await client.get("/api/notes")
    assert resp.status_code == 200
    assert [n["title"] for n in resp.json()] == ["B", "A"]


@pytest.mark.asyncio
async def test_notes_scoped_to_user(client: AsyncClient):
    await client.post("/api/notes", json={"title": "Mine", "content": "."}, headers=USER1)
    await client.post("/api/notes", json={"title": "Theirs", "content": "."}, headers=USER2)

    mine = await client.get("/api/notes", headers=USER1)
    theirs = await client.get("/api/notes", headers=USER2)
    assert [n["title"] for n in mine.json()] == ["Mine"]
    assert [n["title"] for n in theirs.json()] == ["Theirs"]


@pytest.mark.asyncio
async def test_update_note_partial(client: AsyncClient):
    created = (await client.post("/api/notes", json={"title": "Old", "content": "keep"})).json()

    resp = await client.put(f"/api/notes/{created['id']}", json={"title": "New"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "New"
    assert data["content"] == "keep"


@pytest.mark.asyncio
async def test_update_missing_note_404(client: AsyncClient):
    resp = await client.put("/api/notes/9999", json={"title": "Nope"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_other_users_note_404(client: AsyncClient):
    created = (await client.post("/api/notes", json={"title": "Mine", "content": "."}, headers=USER1)).json()
    resp = await client.put(f"/api/notes/{created['id']}", json={"title": "Stolen"}, headers=USER2)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_note_is_idempotent(client: AsyncClient):
    created = (await client.post("/api/notes", json={"title": "Bye", "content": "."})).json()

    resp = await client.delete(f"/api/notes/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    again = await client.delete(f"/api/notes/{created['id']}")
    assert again.status_code == 200
    assert again.json() == {"success": True}

    assert (await client.get("/api/notes")).json() == []
