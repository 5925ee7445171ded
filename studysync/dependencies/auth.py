"""
Identity dependencies for FastAPI routes.

There is no authentication: the caller may name itself with the X-User-Id
header (handy for multi-user testing); otherwise every request acts as
settings.DEFAULT_USER_ID.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studysync.config import settings
from studysync.database import get_db
from studysync.models.database_models import User

logger = logging.getLogger(__name__)


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> int:
    """Resolve the acting user id. Falls back to DEFAULT_USER_ID; 400 if malformed."""
    if not x_user_id:
        return settings.DEFAULT_USER_ID
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Id must be an integer.",
        )
    if user_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Id must be positive.",
        )
    return user_id


async def get_or_create_user(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Ensure the user exists in the local users table. Creates if needed."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(
            id=user_id,
            username=f"student{user_id}",
            email=f"student{user_id}@studysync.local",
        )
        db.add(user)
        await db.flush()
        logger.info("Created new user: id=%d username=%s", user_id, user.username)

    return user
