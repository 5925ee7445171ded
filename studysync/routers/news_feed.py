"""
News feed endpoints.

The feed is shared: every user sees every post, newest first.  Posts can
only be edited or deleted by their author.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from studysync.database import get_db
from studysync.dependencies.auth import get_or_create_user
from studysync.models.database_models import NewsFeed, User
from studysync.models.schemas import NewsFeedCreate, NewsFeedResponse, NewsFeedUpdate, SuccessResponse
from studysync.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter()

posts = Repository(NewsFeed, order_by=[NewsFeed.created_at.desc()])


@router.get("", response_model=List[NewsFeedResponse])
async def list_posts(db: AsyncSession = Depends(get_db)):
    return await posts.list_for_user(db, None)


@router.post("", response_model=NewsFeedResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: NewsFeedCreate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await posts.create(db, user.id, body.model_dump())


@router.put("/{post_id}", response_model=NewsFeedResponse)
async def update_post(
    post_id: int,
    body: NewsFeedUpdate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    post = await posts.update(db, post_id, user.id, body.model_dump(exclude_unset=True))
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


@router.post("/{post_id}/like", response_model=NewsFeedResponse)
async def like_post(post_id: int, db: AsyncSession = Depends(get_db)):
    """Increment the like counter atomically."""
    result = await db.execute(
        update(NewsFeed)
        .where(NewsFeed.id == post_id)
        .values(likes=NewsFeed.likes + 1)
    )
    if not result.rowcount:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    post = await posts.get(db, post_id, None)
    await db.refresh(post)
    return post


@router.delete("/{post_id}", response_model=SuccessResponse)
async def delete_post(
    post_id: int,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    await posts.delete(db, post_id, user.id)
    return SuccessResponse()
