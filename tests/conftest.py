"""
Shared fixtures for StudySync backend integration tests.

Runs against an in-memory SQLite database (aiosqlite) unless
TEST_DATABASE_URL points somewhere else.  Each test function gets a fresh
engine with the schema created from the ORM metadata, and the app's get_db
dependency is overridden to use that test's session.
"""
from __future__ import annotations

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Override settings *before* any app module is imported, so that
# settings.DATABASE_URL and the global engine point at the test DB and no
# real Gemini key leaks into the tests.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["GEMINI_API_KEY"] = ""

from studysync.config import settings  # noqa: E402
from studysync.database import Base, engine_options, get_db  # noqa: E402
from studysync.main import app  # noqa: E402
from studysync.models import database_models  # noqa: E402,F401
from studysync.services.timer_registry import TimerRegistry  # noqa: E402


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a DB session for each test.  Tables are created before and
    dropped after, so each test starts with a clean slate.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **engine_options(TEST_DATABASE_URL))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the DB dependency
    overridden to use the per-test session.
    """

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _clean_timers():
    """Timers live in a process-wide registry; forget them between tests."""
    TimerRegistry.clear()
    yield
    TimerRegistry.clear()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch) -> str:
    """Point UPLOAD_DIR at a per-test temporary directory."""
    path = tmp_path / "uploads"
    path.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return str(path)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

USER1 = {"X-User-Id": "1"}
USER2 = {"X-User-Id": "2"}


class VirtualClock:
    """
    Scheduler stand-in with manually advanced time.

    ``call_later`` queues callbacks; ``advance(seconds)`` fires every due,
    non-cancelled callback in time order, including ones scheduled while
    advancing.
    """

    class _Handle:
        def __init__(self, when: float, callback) -> None:
            self.when = when
            self.callback = callback
            self.cancelled = False

        def cancel(self) -> None:
            self.cancelled = True

    def __init__(self) -> None:
        self.now = 0.0
        self._handles = []

    def call_later(self, delay, callback):
        handle = self._Handle(self.now + delay, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled and h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self._handles.remove(handle)
            self.now = handle.when
            handle.callback()
        self._handles = [h for h in self._handles if not h.cancelled]
        self.now = target
