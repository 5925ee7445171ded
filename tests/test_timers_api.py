"""Tests for the /api/timers endpoints."""
import asyncio

import pytest
from httpx import AsyncClient

from studysync.config import settings
from studysync.services.timer_registry import TimerRegistry
from tests.conftest import USER1, USER2


@pytest.fixture
def fast_ticks(monkeypatch):
    """Tick every 10 ms instead of every second."""
    monkeypatch.setattr(settings, "TIMER_TICK_SECONDS", 0.01)


@pytest.fixture
def recorded(monkeypatch):
    calls = []

    async def fake_recorder(user_id, mode, event):
        calls.append((user_id, mode.value, event.duration_minutes, event.subject_label))

    monkeypatch.setattr(TimerRegistry, "recorder", fake_recorder)
    return calls


async def _create(client: AsyncClient, headers=USER1, **body) -> dict:
    resp = await client.post("/api/timers", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_create_pomodoro_by_default(client: AsyncClient):
    data = await _create(client)
    assert data["mode"] == "pomodoro"
    assert data["total_duration"] == 1500
    assert data["remaining"] == 1500
    assert data["remaining_formatted"] == "25:00"
    assert data["state"] == "idle"
    assert data["running"] is False
    assert data["completed"] is False


@pytest.mark.asyncio
async def test_create_break_modes(client: AsyncClient):
    short = await _create(client, mode="short")
    long = await _create(client, mode="long")
    assert short["total_duration"] == 300
    assert long["total_duration"] == 900


@pytest.mark.asyncio
async def test_custom_requires_positive_duration(client: AsyncClient):
    missing = await client.post("/api/timers", json={"mode": "custom"})
    assert missing.status_code == 422

    zero = await client.post("/api/timers", json={"mode": "custom", "duration_seconds": 0})
    assert zero.status_code == 422

    ok = await _create(client, mode="custom", duration_seconds=45)
    assert ok["remaining_formatted"] == "00:45"


@pytest.mark.asyncio
async def test_start_pause_reset(client: AsyncClient, fast_ticks):
    timer = await _create(client, mode="custom", duration_seconds=1000)
    tid = timer["id"]

    started = (await client.post(f"/api/timers/{tid}/start")).json()
    assert started["running"] is True
    assert started["state"] == "running"

    await asyncio.sleep(0.1)
    paused = (await client.post(f"/api/timers/{tid}/pause")).json()
    assert paused["running"] is False
    assert paused["state"] == "paused"
    assert paused["remaining"] < 1000

    await asyncio.sleep(0.05)
    still = (await client.get(f"/api/timers/{tid}")).json()
    assert still["remaining"] == paused["remaining"]

    reset = (await client.post(f"/api/timers/{tid}/reset")).json()
    assert reset["remaining"] == 1000
    assert reset["state"] == "idle"


@pytest.mark.asyncio
async def test_mode_switch_while_running(client: AsyncClient, fast_ticks):
    timer = await _create(client, mode="short")
    tid = timer["id"]
    await client.post(f"/api/timers/{tid}/start")
    await asyncio.sleep(0.05)

    resp = await client.post(f"/api/timers/{tid}/mode", json={"mode": "pomodoro", "subject": "Biology"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["mode"] == "pomodoro"
    assert data["remaining"] == 1500
    assert data["running"] is False
    assert data["subject"] == "Biology"


@pytest.mark.asyncio
async def test_completion_logs_study_session(client: AsyncClient, fast_ticks, recorded):
    timer = await _create(client, mode="custom", duration_seconds=3, subject="History")
    tid = timer["id"]
    await client.post(f"/api/timers/{tid}/start")

    for _ in range(100):
        await asyncio.sleep(0.01)
        if recorded:
            break

    data = (await client.get(f"/api/timers/{tid}")).json()
    assert data["completed"] is True
    assert data["running"] is False
    assert data["remaining"] == 0
    assert data["state"] == "completed"
    assert recorded == [(1, "custom", 1, "History")]

    # Starting a completed timer changes nothing
    again = (await client.post(f"/api/timers/{tid}/start")).json()
    assert again["completed"] is True
    assert again["running"] is False


@pytest.mark.asyncio
async def test_list_timers_scoped_to_user(client: AsyncClient):
    await _create(client, headers=USER1)
    await _create(client, headers=USER2, mode="short")

    mine = (await client.get("/api/timers", headers=USER1)).json()
    assert len(mine) == 1
    assert mine[0]["mode"] == "pomodoro"


@pytest.mark.asyncio
async def test_other_users_timer_is_404(client: AsyncClient):
    timer = await _create(client, headers=USER1)
    resp = await client.post(f"/api/timers/{timer['id']}/start", headers=USER2)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_unknown_timer_404(client: AsyncClient):
    for path in ("", "/start", "/pause", "/reset"):
        method = client.get if path == "" else client.post
        resp = await method(f"/api/timers/nope{path}")
        assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_timer(client: AsyncClient):
    timer = await _create(client)
    resp = await client.delete(f"/api/timers/{timer['id']}")
    assert resp.json() == {"success": True}

    assert (await client.get(f"/api/timers/{timer['id']}")).status_code == 404
    assert (await client.delete(f"/api/timers/{timer['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_create_past_running_cap_is_422(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "MAX_TIMERS_PER_USER", 1)
    timer = await _create(client)
    await client.post(f"/api/timers/{timer['id']}/start")

    resp = await client.post("/api/timers", json={"mode": "short"})
    assert resp.status_code == 422

    await client.post(f"/api/timers/{timer['id']}/pause")
    resp = await client.post("/api/timers", json={"mode": "short"})
    assert resp.status_code == 201
    ids = [t["id"] for t in (await client.get("/api/timers")).json()]
    assert ids == [resp.json()["id"]]
