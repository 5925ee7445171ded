"""Tests for schedule CRUD, time ordering, and ICS export."""
import pytest
from httpx import AsyncClient


def _entry(title: str, start: str, end: str, **extra) -> dict:
    return {"title": title, "start_time": start, "end_time": end, "type": "class", **extra}


@pytest.mark.asyncio
async def test_create_schedule(client: AsyncClient):
    resp = await client.post(
        "/api/schedules",
        json=_entry("Algorithms", "2024-03-01T09:00:00Z", "2024-03-01T10:30:00Z", location="Room 101"),
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["title"] == "Algorithms"
    assert data["location"] == "Room 101"
    assert data["type"] == "class"


@pytest.mark.asyncio
async def test_end_before_start_rejected(client: AsyncClient):
    resp = await client.post(
        "/api/schedules",
        json=_entry("Backwards", "2024-03-01T10:00:00Z", "2024-03-01T09:00:00Z"),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_zero_length_entry_allowed(client: AsyncClient):
    resp = await client.post(
        "/api/schedules",
        json=_entry("Deadline", "2024-03-01T23:59:00Z", "2024-03-01T23:59:00Z"),
    )
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_list_by_start_time(client: AsyncClient):
    await client.post("/api/schedules", json=_entry("Later", "2024-03-02T09:00:00Z", "2024-03-02T10:00:00Z"))
    await client.post("/api/schedules", json=_entry("Earlier", "2024-03-01T09:00:00Z", "2024-03-01T10:00:00Z"))

    resp = await client.get("/api/schedules")
    assert [s["title"] for s in resp.json()] == ["Earlier", "Later"]


@pytest.mark.asyncio
async def test_update_rechecks_time_order(client: AsyncClient):
    entry = (await client.post(
        "/api/schedules", json=_entry("Lab", "2024-03-01T09:00:00Z", "2024-03-01T10:00:00Z")
    )).json()

    bad = await client.put(f"/api/schedules/{entry['id']}", json={"end_time": "2024-03-01T08:00:00Z"})
    assert bad.status_code == 422

    good = await client.put(f"/api/schedules/{entry['id']}", json={"end_time": "2024-03-01T11:00:00Z"})
    assert good.status_code == 200


@pytest.mark.asyncio
async def test_update_missing_schedule_404(client: AsyncClient):
    resp = await client.put("/api/schedules/77", json={"title": "Ghost"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_export_ics(client: AsyncClient):
    entry = (await client.post(
        "/api/schedules",
        json=_entry("Exam, Final", "2024-05-10T14:00:00Z", "2024-05-10T16:00:00Z", type="exam", location="Hall B"),
    )).json()

    resp = await client.get("/api/schedules/export.ics")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/calendar")
    assert "studysync-calendar.ics" in resp.headers["content-disposition"]

    body = resp.text
    assert body.startswith("BEGIN:VCALENDAR\r\n")
    assert f"UID:{entry['id']}@studysync.com" in body
    assert "DTSTART:20240510T140000Z" in body
    assert "DTEND:20240510T160000Z" in body
    assert "SUMMARY:Exam\\, Final" in body
    assert "LOCATION:Hall B" in body
    assert body.rstrip().endswith("END:VCALENDAR")
