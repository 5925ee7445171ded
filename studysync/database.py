"""
Database engine and session management.

PostgreSQL (asyncpg) in production, SQLite (aiosqlite) for local runs and
tests.  The engine options differ per backend; see ``engine_options``.
"""
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, StaticPool
from typing import Any, AsyncGenerator, Dict
import logging

from studysync.config import settings

logger = logging.getLogger(__name__)


def is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def engine_options(url: str) -> Dict[str, Any]:
    """
    Keyword arguments for ``create_async_engine``.

    SQLite needs no pre-ping or NullPool; an in-memory database must share a
    single connection or every session would see an empty schema.
    """
    if is_sqlite(url):
        database = make_url(url).database
        if not database or database == ":memory:":
            return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
        return {}
    return {"pool_pre_ping": True, "poolclass": NullPool}


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,  # Set to True for SQL query logging
    **engine_options(settings.DATABASE_URL),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Base class for ORM models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session: commits when the handler returns, rolls back if it raises.

        @router.get("/notes")
        async def list_notes(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error("Database session error: %s", e)
            raise


async def init_db() -> None:
    """Create any missing tables (alembic owns real migrations)."""
    from studysync.models import database_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(
        "Database tables created/verified (%s)",
        make_url(settings.DATABASE_URL).get_backend_name(),
    )


async def close_db() -> None:
    await engine.dispose()
    logger.info("Database connections closed")
