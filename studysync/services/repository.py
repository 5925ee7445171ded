"""
Generic user-scoped CRUD repository.

Every widget resource (notes, todos, flashcards, ...) is a plain record owned
by a user id.  ``Repository`` wraps the four operations the routers need so
each router stays a thin parse -> delegate -> respond layer.

    notes = Repository(Note, order_by=[Note.updated_at.desc()])
    rows = await notes.list_for_user(db, user_id)
"""
from __future__ import annotations

import enum
import logging
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete as sql_delete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studysync.database import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """CRUD over one ORM model, filtered by ``user_id``."""

    def __init__(self, model: Type[ModelT], order_by: Sequence[Any] = ()) -> None:
        self.model = model
        # id as final tie-breaker so equal timestamps still sort deterministically
        self.order_by = list(order_by) + [model.id.desc()]

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: Optional[int],
        filters: Sequence[Any] = (),
    ) -> List[ModelT]:
        """All rows for *user_id* (every user when None), in the repository order."""
        stmt = select(self.model)
        if user_id is not None:
            stmt = stmt.where(self.model.user_id == user_id)
        for clause in filters:
            stmt = stmt.where(clause)
        result = await db.execute(stmt.order_by(*self.order_by))
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, record_id: int, user_id: Optional[int]) -> Optional[ModelT]:
        stmt = select(self.model).where(self.model.id == record_id)
        if user_id is not None:
            stmt = stmt.where(self.model.user_id == user_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, user_id: int, values: Dict[str, Any]) -> ModelT:
        record = self.model(user_id=user_id, **_plain(values))
        db.add(record)
        await db.flush()
        await db.refresh(record)
        logger.info("Created %s id=%d for user=%d", self.model.__tablename__, record.id, user_id)
        return record

    async def update(
        self,
        db: AsyncSession,
        record_id: int,
        user_id: Optional[int],
        values: Dict[str, Any],
    ) -> Optional[ModelT]:
        """Apply *values* to an existing row.  Returns None if it does not exist."""
        record = await self.get(db, record_id, user_id)
        if record is None:
            return None
        columns = self.model.__table__.columns
        for key, value in _plain(values).items():
            # explicit nulls cannot clear a NOT NULL column
            if value is None and not columns[key].nullable:
                continue
            setattr(record, key, value)
        await db.flush()
        await db.refresh(record)
        logger.info("Updated %s id=%d fields=%s", self.model.__tablename__, record_id, sorted(values))
        return record

    async def delete(self, db: AsyncSession, record_id: int, user_id: Optional[int]) -> bool:
        """Delete by id.  Missing rows are not an error; returns whether one was removed."""
        stmt = sql_delete(self.model).where(self.model.id == record_id)
        if user_id is not None:
            stmt = stmt.where(self.model.user_id == user_id)
        result = await db.execute(stmt)
        await db.flush()
        removed = (result.rowcount or 0) > 0
        logger.info("Deleted %s id=%d (existed=%s)", self.model.__tablename__, record_id, removed)
        return removed


def _plain(values: Dict[str, Any]) -> Dict[str, Any]:
    """Unwrap enum members so drivers receive bare strings."""
    return {k: (v.value if isinstance(v, enum.Enum) else v) for k, v in values.items()}
